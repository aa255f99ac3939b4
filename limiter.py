"""
Boxtal Connect — Rate limiter (shared instance)
Imported by main.py and the routers that apply @limiter.limit().
"""
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from config import TRUSTED_PROXIES


def get_client_ip(request: Request) -> str:
    """
    Use X-Forwarded-For only when the request comes from a proxy listed in
    TRUSTED_PROXIES; otherwise the header is ignored and the remote address is used.
    """
    remote = get_remote_address(request)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded and remote in TRUSTED_PROXIES:
        return forwarded.split(",")[0].strip()
    return remote


limiter = Limiter(key_func=get_client_ip)

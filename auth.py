"""
Boxtal Connect — Auth dependencies
  - verify_client_secret: shared platform secret header (REST endpoints)
  - verify_admin_secret:  shared admin secret header (admin endpoints)
  - verify_ajax_nonce:    action-bound nonce posted by the admin UI
"""
import hashlib
import hmac
import logging
import time

from fastapi import Form, Header, HTTPException

from config import ADMIN_SECRET, CLIENT_SECRET, NONCE_SECRET, NONCE_TICK_SEC

logger = logging.getLogger(__name__)

NOTICE_NONCE_ACTION = "boxtal_connect_notice"


async def verify_client_secret(x_boxtal_secret: str = Header(default="")) -> None:
    """
    Validate the shared secret the Boxtal platform sends with every request.
    Set CLIENT_SECRET env var to enable. If unset, validation is skipped (dev mode).
    """
    if CLIENT_SECRET and not hmac.compare_digest(x_boxtal_secret.encode(), CLIENT_SECRET.encode()):
        logger.warning("Rejected platform request with invalid secret")
        raise HTTPException(status_code=401, detail="Invalid or missing client secret.")


async def verify_admin_secret(x_boxtal_admin_secret: str = Header(default="")) -> None:
    """Same as verify_client_secret, for the shop admin UI (ADMIN_SECRET)."""
    if ADMIN_SECRET and not hmac.compare_digest(x_boxtal_admin_secret.encode(), ADMIN_SECRET.encode()):
        logger.warning("Rejected admin request with invalid secret")
        raise HTTPException(status_code=401, detail="Invalid or missing admin secret.")


# ── Nonces ────────────────────────────────────────────────────────────────────

def _tick(now: float | None = None) -> int:
    return int((time.time() if now is None else now) // NONCE_TICK_SEC)


def _nonce_for(action: str, tick: int) -> str:
    return hmac.new(
        NONCE_SECRET.encode(), f"{tick}|{action}".encode(), hashlib.sha256
    ).hexdigest()[:20]


def create_nonce(action: str, now: float | None = None) -> str:
    """Empty string when NONCE_SECRET is unset: no nonce is issued."""
    if not NONCE_SECRET:
        return ""
    return _nonce_for(action, _tick(now))


def verify_nonce(nonce: str, action: str, now: float | None = None) -> bool:
    """A nonce verifies during the tick it was created in and the next one."""
    if not nonce or not NONCE_SECRET:
        return False
    tick = _tick(now)
    return any(
        hmac.compare_digest(nonce.encode(), _nonce_for(action, t).encode()) for t in (tick, tick - 1)
    )


async def verify_ajax_nonce(security: str = Form(default="")) -> None:
    if not verify_nonce(security, NOTICE_NONCE_ACTION):
        logger.warning("Rejected ajax request with invalid nonce")
        raise HTTPException(status_code=403, detail="Invalid or expired nonce.")

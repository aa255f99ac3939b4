"""
Boxtal Connect — Pydantic models (request bodies + response shapes)
"""
from typing import Dict, List

from pydantic import BaseModel, field_validator

from notices import RenderedNotice
from pairing import PairingStatus


class PairRequest(BaseModel):
    accessKey: str
    secretKey: str
    pairCallbackUrl: str | None = None  # present only for a pairing update

    @field_validator("accessKey", "secretKey")
    @classmethod
    def key_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Keys cannot be empty")
        return v


class DeleteConfigurationRequest(BaseModel):
    accessKey: str


class StatusResponse(BaseModel):
    status: str
    message: str


class NoticesResponse(BaseModel):
    nonce: str
    notices: List[RenderedNotice]


class AdminStatusResponse(BaseModel):
    pairing: PairingStatus
    maps_endpoint_url: str | None
    signup_page_url: str | None
    parcel_point_networks: Dict[str, List[str]]

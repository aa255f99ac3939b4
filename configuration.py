"""
Boxtal Connect — Shop configuration
Shipping configuration pushed by the Boxtal platform: where the parcel point
maps are served from and which parcel point networks each carrier uses.
"""
import logging
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from database import OptionStore

logger = logging.getLogger(__name__)

MAPS_ENDPOINT_URL_OPTION     = "maps_endpoint_url"
SIGNUP_PAGE_URL_OPTION       = "signup_page_url"
PARCEL_POINT_NETWORKS_OPTION = "parcel_point_networks"


class ShopConfiguration(BaseModel):
    mapsEndpointUrl: str
    parcelPointNetworks: dict[str, list[str]] = {}
    signupPageUrl: str | None = None

    @field_validator("mapsEndpointUrl")
    @classmethod
    def url_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("mapsEndpointUrl cannot be empty")
        return v


async def parse_configuration(store: OptionStore, body: Any) -> bool:
    """Validate and persist a configuration document. Nothing is written on failure."""
    try:
        config = ShopConfiguration.model_validate(body)
    except ValidationError as e:
        logger.warning("Rejected shop configuration (%d error(s))", e.error_count())
        return False

    await store.update_option(MAPS_ENDPOINT_URL_OPTION, config.mapsEndpointUrl)
    await store.update_option(PARCEL_POINT_NETWORKS_OPTION, config.parcelPointNetworks)
    if config.signupPageUrl:
        await store.update_option(SIGNUP_PAGE_URL_OPTION, config.signupPageUrl)
    logger.info("Shop configuration updated (%d carrier(s))", len(config.parcelPointNetworks))
    return True


async def delete_configuration(store: OptionStore) -> None:
    await store.delete_option(MAPS_ENDPOINT_URL_OPTION)
    await store.delete_option(PARCEL_POINT_NETWORKS_OPTION)
    await store.delete_option(SIGNUP_PAGE_URL_OPTION)
    logger.info("Shop configuration deleted")


async def get_configuration(store: OptionStore) -> dict[str, Any]:
    return {
        "maps_endpoint_url":     await store.get_option(MAPS_ENDPOINT_URL_OPTION),
        "signup_page_url":       await store.get_option(SIGNUP_PAGE_URL_OPTION),
        "parcel_point_networks": await store.get_option(PARCEL_POINT_NETWORKS_OPTION, {}),
    }

"""
Boxtal Connect — Pairing state
Access/secret keys issued by Boxtal once the shop is paired, plus the callback
URL of a pairing update waiting for validation.
"""
import logging
from enum import Enum

from database import OptionStore

logger = logging.getLogger(__name__)

ACCESS_KEY_OPTION         = "paired_access_key"
SECRET_KEY_OPTION         = "paired_secret_key"
PAIRING_UPDATE_URL_OPTION = "pairing_update_url"


class PairingStatus(str, Enum):
    UNPAIRED                   = "unpaired"
    PAIRED                     = "paired"
    PAIRING_UPDATE_IN_PROGRESS = "pairing_update_in_progress"


class PairingError(Exception):
    pass


class PairingState:
    def __init__(self, store: OptionStore):
        self.store = store

    async def get_access_key(self) -> str | None:
        return await self.store.get_option(ACCESS_KEY_OPTION)

    async def get_secret_key(self) -> str | None:
        return await self.store.get_option(SECRET_KEY_OPTION)

    async def is_paired(self) -> bool:
        return await self.get_access_key() is not None and await self.get_secret_key() is not None

    async def pair(self, access_key: str, secret_key: str) -> None:
        await self.store.update_option(ACCESS_KEY_OPTION, access_key)
        await self.store.update_option(SECRET_KEY_OPTION, secret_key)
        logger.info("Shop paired with access key %s", access_key)

    async def get_pairing_update_url(self) -> str | None:
        return await self.store.get_option(PAIRING_UPDATE_URL_OPTION)

    async def is_pairing_update_in_progress(self) -> bool:
        return await self.get_pairing_update_url() is not None

    async def start_pairing_update(self, callback_url: str) -> None:
        if not await self.is_paired():
            raise PairingError("Cannot start a pairing update on an unpaired shop")
        await self.store.update_option(PAIRING_UPDATE_URL_OPTION, callback_url)
        logger.info("Pairing update started")

    async def end_pairing_update(self) -> None:
        await self.store.delete_option(PAIRING_UPDATE_URL_OPTION)
        logger.info("Pairing update ended")

    async def state(self) -> PairingStatus:
        if not await self.is_paired():
            return PairingStatus.UNPAIRED
        if await self.is_pairing_update_in_progress():
            return PairingStatus.PAIRING_UPDATE_IN_PROGRESS
        return PairingStatus.PAIRED

"""
Boxtal Connect — Setup wizard bootstrap
Runs on every admin page load. An unpaired shop fetches its signup and map
URLs from Boxtal and shows the setup wizard notice; a paired shop drops it.
"""
import logging

from boxtal_api import GET, BoxtalApiClient
from config import LOCALE
from configuration import MAPS_ENDPOINT_URL_OPTION, SIGNUP_PAGE_URL_OPTION
from database import OptionStore
from notices import SETUP_FAILURE, SETUP_WIZARD, NoticeController
from pairing import PairingState

logger = logging.getLogger(__name__)

MODULE_CONFIG_PATH = "/v2/sellershop/module/config"


async def run_setup_wizard(
    store: OptionStore,
    notices: NoticeController,
    pairing: PairingState,
    api: BoxtalApiClient | None = None,
    locale: str = LOCALE,
) -> None:
    paired = await pairing.is_paired()
    has_wizard = await notices.has_notice(SETUP_WIZARD)

    if paired and has_wizard:
        await notices.remove_notice(SETUP_WIZARD)
        return
    if paired or has_wizard:
        return

    api = api or BoxtalApiClient()
    response = await api.request(GET, api.api_url(MODULE_CONFIG_PATH), {"locale": locale})
    res = None if response.is_error() else response.json()

    if not isinstance(res, dict) or not res.get("mapsEndpointUrl") or not res.get("signupPageUrl"):
        logger.warning("Setup wizard bootstrap failed: %s", response.error or "incomplete module config")
        await notices.add_notice(SETUP_FAILURE)
        return

    await store.update_option(MAPS_ENDPOINT_URL_OPTION, res["mapsEndpointUrl"])
    await store.update_option(SIGNUP_PAGE_URL_OPTION, res["signupPageUrl"])
    await notices.add_notice(SETUP_WIZARD, {"signup_url": res["signupPageUrl"]})
    await notices.remove_notice(SETUP_FAILURE)
    logger.info("Setup wizard ready")

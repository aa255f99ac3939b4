"""
Boxtal Connect — Ajax routes (called by the shop admin UI)
  POST /ajax/hide_notice               dismiss a notice
  POST /ajax/pairing_update_validate   confirm a pending pairing update

Form-encoded; every request carries the nonce from GET /admin/notices in `security`.
"""
import logging

from fastapi import APIRouter, Depends, Form, HTTPException

from auth import verify_ajax_nonce
from boxtal_api import POST, api_client_factory
from database import OptionStore, get_store
from notices import PAIRING, PAIRING_UPDATE, NoticeController
from pairing import PairingState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ajax", tags=["Ajax"], dependencies=[Depends(verify_ajax_nonce)])


@router.post("/hide_notice", response_model=bool, summary="Hide a notice")
async def hide_notice(
    notice_id: str | None = Form(default=None),
    store: OptionStore = Depends(get_store),
):
    """Remove a notice from the active list. Always answers `true`."""
    if notice_id is None or not notice_id.strip():
        return True

    await NoticeController(store).remove_notice(notice_id.strip())
    await store.commit()
    return True


@router.post("/pairing_update_validate", response_model=bool, summary="Validate a pairing update")
async def pairing_update_validate(
    input: str | None = Form(default=None),
    store: OptionStore = Depends(get_store),
    client_factory=Depends(api_client_factory),
):
    """
    Forward the validation input to the pairing update callback. On success the
    update ends and a successful pairing notice replaces the update notice.
    """
    if input is None or not input.strip():
        raise HTTPException(status_code=400, detail="missing input")

    pairing = PairingState(store)
    callback_url = await pairing.get_pairing_update_url()
    if callback_url is None:
        raise HTTPException(status_code=400, detail="no pairing update in progress")

    api = client_factory(await pairing.get_access_key(), await pairing.get_secret_key())
    response = await api.request(POST, callback_url, {"input": input.strip()})
    if response.is_error():
        logger.warning("Pairing update validation failed: %s", response.error)
        raise HTTPException(status_code=502, detail="pairing validation failed")

    notices = NoticeController(store)
    await pairing.end_pairing_update()
    await notices.remove_notice(PAIRING_UPDATE)
    await notices.add_notice(PAIRING, {"result": 1})
    await store.commit()
    return True

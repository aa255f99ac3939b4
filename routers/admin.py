"""
Boxtal Connect — Admin routes (called by the shop admin UI)
  GET    /admin/notices   bootstrap the setup wizard + render active notices
  DELETE /admin/notices   clear all notices
  GET    /admin/status    pairing state and stored configuration
"""
from fastapi import APIRouter, Depends

from auth import NOTICE_NONCE_ACTION, create_nonce, verify_admin_secret
from boxtal_api import api_client_factory
from configuration import get_configuration
from database import OptionStore, get_store
from models import AdminStatusResponse, NoticesResponse, StatusResponse
from notices import NoticeController
from pairing import PairingState
from setup_wizard import run_setup_wizard

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(verify_admin_secret)])


@router.get("/notices", response_model=NoticesResponse, summary="Active notices")
async def list_notices(
    store: OptionStore = Depends(get_store),
    client_factory=Depends(api_client_factory),
):
    """
    Run on every admin page load. Reconciles the setup wizard notice with the
    pairing state, then renders the active notices. One-shot notices are
    dropped once returned here.

    The returned **nonce** must be posted back as `security` to the ajax routes.
    """
    notices = NoticeController(store)
    await run_setup_wizard(store, notices, PairingState(store), client_factory())
    rendered = await notices.render_notices()
    await store.commit()
    return NoticesResponse(nonce=create_nonce(NOTICE_NONCE_ACTION), notices=rendered)


@router.delete("/notices", response_model=StatusResponse, summary="Clear notices")
async def clear_notices(store: OptionStore = Depends(get_store)):
    await NoticeController(store).remove_all_notices()
    await store.commit()
    return StatusResponse(status="ok", message="All notices removed.")


@router.get("/status", response_model=AdminStatusResponse, summary="Pairing status")
async def admin_status(store: OptionStore = Depends(get_store)):
    return AdminStatusResponse(
        pairing=await PairingState(store).state(),
        **await get_configuration(store),
    )

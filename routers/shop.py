"""
Boxtal Connect — Shop routes (called by the Boxtal platform)
  PATCH  /boxtal-connect/v1/shop/pair            pair the shop or start a pairing update
  PATCH  /boxtal-connect/v1/shop/configuration   push shop configuration
  DELETE /boxtal-connect/v1/shop/configuration   delete shop configuration

Bodies are encrypted envelopes (see envelope.py).
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from auth import verify_client_secret
from configuration import delete_configuration, parse_configuration
from database import OptionStore, get_store
from envelope import decrypt_body
from limiter import limiter
from models import DeleteConfigurationRequest, PairRequest, StatusResponse
from notices import PAIRING, PAIRING_UPDATE, SETUP_WIZARD, NoticeController
from pairing import PairingState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/boxtal-connect/v1", tags=["Shop"])


@router.patch("/shop/pair", response_model=StatusResponse, summary="Pair the shop",
              dependencies=[Depends(verify_client_secret)])
@limiter.limit("30/minute")
async def pairing_handler(request: Request, store: OptionStore = Depends(get_store)):
    """
    Pair the shop with a Boxtal account, or start a pairing update.

    - Unpaired shop + keys: keys are stored, the shop is paired.
    - Paired shop + keys + **pairCallbackUrl**: keys are replaced and a pairing
      update waits for validation from the admin UI.
    - Paired shop + keys without callback: **403**.
    - Undecryptable body or missing keys: **400**, a failed pairing notice is shown.
    """
    notices = NoticeController(store)
    pairing = PairingState(store)

    body = decrypt_body(await request.body())
    data = None
    if body is not None:
        try:
            data = PairRequest.model_validate(body)
        except ValidationError:
            pass

    if data is None:
        await notices.add_notice(PAIRING, {"result": 0})
        await store.commit()
        logger.warning("Pairing request rejected: bad body")
        raise HTTPException(status_code=400, detail="Invalid pairing request.")

    # ── Initial pairing ───────────────────────────────────────────────────────
    if not await pairing.is_paired():
        await pairing.pair(data.accessKey, data.secretKey)
        await notices.remove_notice(SETUP_WIZARD)
        await notices.add_notice(PAIRING, {"result": 1})
        await store.commit()
        return StatusResponse(status="ok", message="Shop paired.")

    # ── Pairing update ────────────────────────────────────────────────────────
    if data.pairCallbackUrl is None:
        logger.warning("Pairing update rejected: no callback URL")
        raise HTTPException(status_code=403, detail="Shop is already paired.")

    await pairing.pair(data.accessKey, data.secretKey)
    await notices.remove_notice(PAIRING)
    await pairing.start_pairing_update(data.pairCallbackUrl)
    await notices.add_notice(PAIRING_UPDATE)
    await store.commit()
    return StatusResponse(status="ok", message="Pairing update pending validation.")


@router.patch("/shop/configuration", response_model=StatusResponse, summary="Update configuration",
              dependencies=[Depends(verify_client_secret)])
@limiter.limit("30/minute")
async def update_configuration_handler(request: Request, store: OptionStore = Depends(get_store)):
    """Parse and store the shop configuration. **400** if it cannot be decrypted or parsed."""
    body = decrypt_body(await request.body())
    if body is None:
        raise HTTPException(status_code=400, detail="Invalid configuration request.")

    if not await parse_configuration(store, body):
        raise HTTPException(status_code=400, detail="Configuration could not be parsed.")

    await store.commit()
    return StatusResponse(status="ok", message="Configuration updated.")


@router.delete("/shop/configuration", response_model=StatusResponse, summary="Delete configuration",
               dependencies=[Depends(verify_client_secret)])
@limiter.limit("30/minute")
async def delete_configuration_handler(request: Request, store: OptionStore = Depends(get_store)):
    """Delete the shop configuration. The body must carry the shop's current **accessKey** (else 403)."""
    body = decrypt_body(await request.body())
    if body is None:
        raise HTTPException(status_code=400, detail="Invalid configuration request.")

    try:
        data = DeleteConfigurationRequest.model_validate(body)
    except ValidationError:
        data = None

    access_key = await PairingState(store).get_access_key()
    if data is None or access_key is None or data.accessKey != access_key:
        logger.warning("Configuration delete rejected: access key mismatch")
        raise HTTPException(status_code=403, detail="Access key mismatch.")

    await delete_configuration(store)
    await store.commit()
    return StatusResponse(status="ok", message="Configuration deleted.")

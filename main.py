"""
Boxtal Connect
==============
Shop-side bridge between an online store and the Boxtal shipping platform.

Boxtal pairs the shop and pushes its shipping configuration through the
`/boxtal-connect/v1/shop/*` routes. The shop admin UI lists and dismisses
notices through `/admin/*` and `/ajax/*`.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from config import CLEANUP_INTERVAL_SEC, LOG_LEVEL, NONCE_SECRET
from database import get_db, purge_expired_transients
from limiter import limiter
from routers import admin, ajax, shop, system

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("boxtal_connect")


# ── Background cleanup ────────────────────────────────────────────────────────

async def _cleanup_loop() -> None:
    """Purge expired transients every CLEANUP_INTERVAL_SEC. Runs as a background task."""
    while True:
        await asyncio.sleep(CLEANUP_INTERVAL_SEC)
        try:
            db = await get_db()
            try:
                deleted = await purge_expired_transients(db)
                if deleted:
                    logger.info("Purged %d expired transient(s)", deleted)
            finally:
                await db.close()
        except Exception:
            logger.exception("Error during transient purge")


# ── Lifespan ──────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: initialise DB + launch background cleanup
    if not NONCE_SECRET:
        logger.warning("NONCE_SECRET is not set: ajax routes will reject every request")
    db = await get_db()
    await db.close()
    task = asyncio.create_task(_cleanup_loop())
    yield
    # Shutdown: cancel background task cleanly
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


# ── App ───────────────────────────────────────────────────────────────────────

app = FastAPI(
    lifespan=lifespan,
    title="Boxtal Connect",
    description="""
Connects an online store to the **Boxtal** shipping platform.

## Pairing

1. The shop admin runs the setup wizard and signs up on Boxtal
2. Boxtal calls `PATCH /boxtal-connect/v1/shop/pair` with the shop's access and secret keys
3. Later pairings of an already paired shop must be validated from the admin UI
   (`POST /ajax/pairing_update_validate`)

## Security

Platform calls carry a shared secret header (`X-Boxtal-Secret`) and an encrypted body.
Admin ajax calls carry a nonce issued by `GET /admin/notices`.
""",
    version="1.0.0",
    license_info={"name": "GPL-2.0"},
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────

app.include_router(shop.router)
app.include_router(ajax.router)
app.include_router(admin.router)
app.include_router(system.router)

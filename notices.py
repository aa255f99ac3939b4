"""
Boxtal Connect — Admin notices
Controller over the list of active notices and the notice variants it
resolves keys to.

Core kinds are stored durably under ``notice_<kind>`` and keyed by their kind
name. Every other kind is stored in a transient under a generated key and
expires after NOTICE_TTL_SECONDS.
"""
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Literal

from pydantic import BaseModel, ValidationError

from config import NOTICE_TTL_SECONDS
from database import OptionStore

logger = logging.getLogger(__name__)

UPDATE         = "update"
SETUP_WIZARD   = "setup-wizard"
SETUP_FAILURE  = "setup-failure"
PAIRING        = "pairing"
PAIRING_UPDATE = "pairing-update"
CUSTOM         = "custom"

CORE_NOTICES = (UPDATE, SETUP_WIZARD, SETUP_FAILURE, PAIRING, PAIRING_UPDATE)

ACTIVE_NOTICES_OPTION = "active_notices"


def notice_option(kind: str) -> str:
    return f"notice_{kind}"


# ── Notice variants ───────────────────────────────────────────────────────────

class RenderedNotice(BaseModel):
    key: str
    kind: str
    level: Literal["info", "success", "warning", "error"]
    message: str
    dismissible: bool = True
    autodestruct: bool = False


class Notice(BaseModel, ABC):
    key: str

    @abstractmethod
    def render(self) -> RenderedNotice:
        """Each variant renders its own message."""


class UpdateNotice(Notice):
    kind: Literal["update"] = UPDATE
    version: str | None = None

    def render(self) -> RenderedNotice:
        message = "Boxtal Connect has been updated."
        if self.version:
            message = f"Boxtal Connect has been updated to version {self.version}."
        return RenderedNotice(key=self.key, kind=self.kind, level="info", message=message)


class SetupWizardNotice(Notice):
    kind: Literal["setup-wizard"] = SETUP_WIZARD
    signup_url: str | None = None

    def render(self) -> RenderedNotice:
        message = "Your shop is not connected to Boxtal yet. Run the setup wizard to pair it."
        if self.signup_url:
            message += f" Sign up at {self.signup_url}"
        return RenderedNotice(
            key=self.key, kind=self.kind, level="warning", message=message, dismissible=False
        )


class SetupFailureNotice(Notice):
    kind: Literal["setup-failure"] = SETUP_FAILURE

    def render(self) -> RenderedNotice:
        return RenderedNotice(
            key=self.key,
            kind=self.kind,
            level="error",
            message="Could not reach Boxtal to prepare the setup wizard. It will be retried on the next page load.",
        )


class PairingNotice(Notice):
    kind: Literal["pairing"] = PAIRING
    result: Literal[0, 1] = 1

    def render(self) -> RenderedNotice:
        if self.result:
            return RenderedNotice(
                key=self.key, kind=self.kind, level="success",
                message="Your shop is now paired with your Boxtal account.",
            )
        return RenderedNotice(
            key=self.key, kind=self.kind, level="error",
            message="Pairing with Boxtal failed. Please try again from your Boxtal account.",
        )


class PairingUpdateNotice(Notice):
    kind: Literal["pairing-update"] = PAIRING_UPDATE

    def render(self) -> RenderedNotice:
        return RenderedNotice(
            key=self.key, kind=self.kind, level="warning",
            message="A new pairing was requested for this shop. Enter the validation code to confirm it.",
            dismissible=False,
        )


class CustomNotice(Notice):
    kind: Literal["custom"] = CUSTOM
    message: str = ""
    level: Literal["info", "success", "warning", "error"] = "info"

    def render(self) -> RenderedNotice:
        return RenderedNotice(
            key=self.key, kind=self.kind, level=self.level, message=self.message, autodestruct=True
        )


def build_notice(key: str, kind: str, payload: dict[str, Any]) -> Notice | None:
    """Instantiate the variant for a notice kind, or None for an unknown kind."""
    match kind:
        case "update":
            cls = UpdateNotice
        case "setup-wizard":
            cls = SetupWizardNotice
        case "setup-failure":
            cls = SetupFailureNotice
        case "pairing":
            cls = PairingNotice
        case "pairing-update":
            cls = PairingUpdateNotice
        case "custom":
            cls = CustomNotice
        case _:
            logger.debug("Skipping notice %s of unknown kind %r", key, kind)
            return None

    fields = {k: v for k, v in payload.items() if k not in ("key", "kind")}
    try:
        return cls(key=key, **fields)
    except ValidationError as e:
        logger.debug("Skipping notice %s with invalid payload: %s", key, e)
        return None


# ── Controller ────────────────────────────────────────────────────────────────

class NoticeController:
    """Single authority over which notices are active."""

    def __init__(self, store: OptionStore):
        self.store = store

    async def get_notice_keys(self) -> list[str]:
        return list(await self.store.get_option(ACTIVE_NOTICES_OPTION, []))

    async def add_notice(self, kind: str, payload: dict[str, Any] | None = None) -> str:
        payload = dict(payload or {})
        if kind in CORE_NOTICES:
            key = kind
            if payload:
                await self.store.update_option(notice_option(kind), payload)
        else:
            key = f"bc_{uuid.uuid4().hex}"
            await self.store.set_transient(key, {**payload, "kind": kind}, NOTICE_TTL_SECONDS)

        keys = await self.get_notice_keys()
        if key not in keys:
            keys.append(key)
            await self.store.update_option(ACTIVE_NOTICES_OPTION, keys)
        logger.debug("Notice %s added", key)
        return key

    async def remove_notice(self, key: str) -> None:
        keys = await self.get_notice_keys()
        if key in keys:
            keys.remove(key)
            await self.store.update_option(ACTIVE_NOTICES_OPTION, keys)
            logger.debug("Notice %s removed", key)

    async def remove_all_notices(self) -> None:
        await self.store.update_option(ACTIVE_NOTICES_OPTION, [])

    async def has_notice(self, key: str) -> bool:
        return key in await self.get_notice_keys()

    async def has_notices(self) -> bool:
        return bool(await self.get_notice_keys())

    async def get_notices(self) -> list[Notice]:
        """
        Resolve active keys to notices, in insertion order.

        Keys whose transient has expired are pruned. Unknown kinds are skipped
        but left in place.
        """
        notices: list[Notice] = []
        for key in await self.get_notice_keys():
            if key in CORE_NOTICES:
                payload = await self.store.get_option(notice_option(key)) or {}
                notice  = build_notice(key, key, payload)
            else:
                payload = await self.store.get_transient(key)
                if not isinstance(payload, dict) or "kind" not in payload:
                    await self.remove_notice(key)
                    continue
                notice = build_notice(key, payload["kind"], payload)
            if notice is not None:
                notices.append(notice)
        return notices

    async def render_notices(self) -> list[RenderedNotice]:
        """Render every active notice. One-shot notices are removed once rendered."""
        rendered = []
        for notice in await self.get_notices():
            output = notice.render()
            if output.autodestruct:
                await self.remove_notice(notice.key)
            rendered.append(output)
        return rendered

"""Guest session identity for anonymous storefront orders."""

from __future__ import annotations

import logging
import secrets
import time

from pydantic import BaseModel, ConfigDict, Field, field_validator

from orderpulse._constants import RESTAURANT_HEADER, SESSION_HEADER, SESSION_ID_KEY
from orderpulse.exceptions import PersistenceError
from orderpulse.storage import PersistentKeyValueStore

_logger = logging.getLogger(__name__)

_SESSION_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def generate_session_id(now_ms: int | None = None) -> str:
    """Return a new guest session id (``session_<epoch ms>_<9 random chars>``)."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_SESSION_ALPHABET) for _ in range(9))
    return f"session_{now_ms}_{suffix}"


class GuestSession(BaseModel):
    """Identity headers attached to every storefront request.

    Parameters
    ----------
    session_id : str
        Guest session id.  The backend groups a guest's orders by it.
    restaurant_slug : str or None
        Restaurant the guest is ordering from.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    session_id: str = Field(default_factory=generate_session_id)
    restaurant_slug: str | None = None

    @field_validator("session_id")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("session_id must be non-empty")
        return value

    @field_validator("restaurant_slug")
    @classmethod
    def _normalize_slug(cls, value: str | None) -> str | None:
        return value or None

    def headers(self) -> dict[str, str]:
        result = {SESSION_HEADER: self.session_id}
        if self.restaurant_slug:
            result[RESTAURANT_HEADER] = self.restaurant_slug
        return result

    @classmethod
    def load_or_create(
        cls,
        store: PersistentKeyValueStore,
        *,
        restaurant_slug: str | None = None,
        session_id: str | None = None,
    ) -> GuestSession:
        """Reuse the persisted session id, or create and persist a new one.

        An explicit *session_id* wins and is not persisted.
        """
        if session_id:
            return cls(session_id=session_id, restaurant_slug=restaurant_slug)

        stored = store.get(SESSION_ID_KEY)
        if stored:
            return cls(session_id=stored, restaurant_slug=restaurant_slug)

        session = cls(restaurant_slug=restaurant_slug)
        try:
            store.set(SESSION_ID_KEY, session.session_id)
        except PersistenceError:
            _logger.warning("Could not persist guest session id; using it for this process only", exc_info=True)
        return session

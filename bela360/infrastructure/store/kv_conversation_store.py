from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Mapping

from bela360.application.exceptions import ConversationStoreError
from bela360.application.ports.conversation_store import ConversationStorePort
from bela360.application.ports.key_value_store import KeyValueStorePort
from bela360.domain.entities.conversation_state import BookingDraft, ConversationState, ConversationStep
from bela360.infrastructure.store.memory_store import utc_now

DEFAULT_TTL_SECONDS = 30 * 60

# Draft field name -> JSON key
_DRAFT_KEYS = {
    "service_id": "serviceId",
    "service_name": "serviceName",
    "professional_id": "professionalId",
    "professional_name": "professionalName",
    "date": "date",
    "time": "time",
    "appointment_id": "appointmentId",
}
_DRAFT_FIELDS = {v: k for k, v in _DRAFT_KEYS.items()}


class KeyValueConversationStore(ConversationStorePort):
    """
    One booking dialog per (business, client phone), stored as a flat JSON object
    under ``{namespace}:{business_id}:{client_phone}``.

    Every write refreshes both ``expiresAt`` and the key's native TTL, so the
    record self-deletes even if never read again.
    """

    def __init__(
        self,
        kv: KeyValueStorePort,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        namespace: str = "conversation",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._kv = kv
        self._ttl_seconds = ttl_seconds
        self._namespace = namespace
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def key_for(self, business_id: str, client_phone: str) -> str:
        return f"{self._namespace}:{business_id}:{client_phone}"

    def get(self, business_id: str, client_phone: str) -> ConversationState | None:
        key = self.key_for(business_id, client_phone)
        try:
            raw = self._kv.get(key)
            if not raw:
                return None
            state = self._deserialize(json.loads(raw))
            if state.is_expired(self._clock()):
                self._kv.delete(key)
                return None
            return state
        except Exception as e:
            self._logger.warning("Error getting conversation state", extra={"key": key, "error": str(e)})
            return None

    def set(
        self,
        business_id: str,
        client_phone: str,
        step: ConversationStep,
        partial: Mapping[str, Any] | None = None,
    ) -> ConversationState:
        key = self.key_for(business_id, client_phone)
        existing = self.get(business_id, client_phone)
        draft = existing.data if existing else BookingDraft()

        now = self._clock()
        state = ConversationState(
            step=ConversationStep(step),
            data=draft.merged(partial),
            last_message_at=now,
            expires_at=now + timedelta(seconds=self._ttl_seconds),
        )

        try:
            self._kv.set_with_ttl(key, json.dumps(self._serialize(state), ensure_ascii=False), self._ttl_seconds)
        except Exception as e:
            self._logger.error("Error setting conversation state", extra={"key": key, "error": str(e)})
            raise ConversationStoreError(f"Could not save conversation state for {key}") from e
        return state

    def clear(self, business_id: str, client_phone: str) -> None:
        key = self.key_for(business_id, client_phone)
        try:
            self._kv.delete(key)
        except Exception as e:
            self._logger.error("Error clearing conversation state", extra={"key": key, "error": str(e)})

    def update_data(
        self,
        business_id: str,
        client_phone: str,
        partial: Mapping[str, Any],
    ) -> ConversationState | None:
        existing = self.get(business_id, client_phone)
        if existing is None:
            return None
        return self.set(business_id, client_phone, existing.step, partial)

    def _serialize(self, state: ConversationState) -> dict[str, Any]:
        data = {
            json_key: getattr(state.data, field_name)
            for field_name, json_key in _DRAFT_KEYS.items()
            if getattr(state.data, field_name) is not None
        }
        return {
            "step": state.step.value,
            "data": data,
            "lastMessageAt": state.last_message_at.isoformat(),
            "expiresAt": state.expires_at.isoformat(),
        }

    def _deserialize(self, payload: dict[str, Any]) -> ConversationState:
        raw_data = payload.get("data") or {}
        draft = BookingDraft(**{_DRAFT_FIELDS[k]: v for k, v in raw_data.items() if k in _DRAFT_FIELDS})
        return ConversationState(
            step=ConversationStep(payload["step"]),
            data=draft,
            last_message_at=_parse_timestamp(payload["lastMessageAt"]),
            expires_at=_parse_timestamp(payload["expiresAt"]),
        )


def _parse_timestamp(value: str) -> datetime:
    # JavaScript writers emit "...Z", which fromisoformat only accepts from 3.11.
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)

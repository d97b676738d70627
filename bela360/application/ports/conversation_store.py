from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from bela360.domain.entities.conversation_state import ConversationState, ConversationStep


class ConversationStorePort(ABC):
    @abstractmethod
    def get(self, business_id: str, client_phone: str) -> ConversationState | None:
        """
        Current dialog for the client, or None.
        Expired entries are deleted on read. Read failures are reported as None.
        """
        raise NotImplementedError

    @abstractmethod
    def set(
        self,
        business_id: str,
        client_phone: str,
        step: ConversationStep,
        partial: Mapping[str, Any] | None = None,
    ) -> ConversationState:
        """
        Replace the step, shallow-merge partial into the draft and refresh the TTL.
        Write failures propagate.
        """
        raise NotImplementedError

    @abstractmethod
    def clear(self, business_id: str, client_phone: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def update_data(
        self,
        business_id: str,
        client_phone: str,
        partial: Mapping[str, Any],
    ) -> ConversationState | None:
        """Merge partial into the draft keeping the current step. No-op returning None when absent."""
        raise NotImplementedError

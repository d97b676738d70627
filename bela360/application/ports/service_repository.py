from __future__ import annotations

from abc import ABC, abstractmethod

from bela360.domain.entities.service import Service


class ServiceRepositoryPort(ABC):
    @abstractmethod
    def get(self, service_id: str) -> Service | None:
        """Get service by id. Returns None if not found."""
        raise NotImplementedError

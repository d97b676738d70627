from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Service:
    id: str
    business_id: str
    duration: int  # minutes
    name: str | None = None

    def __post_init__(self) -> None:
        if self.duration < 1:
            raise ValueError(f"Service duration must be positive, got {self.duration}")

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class ConfirmOutput:
    """Result of a successful confirmation."""

    subscriber_id: UUID

"""
Confirmation component.

Token-gated, idempotent confirmation of pending subscribers.
"""

from letterbox.components.confirmation.component import ConfirmationService
from letterbox.components.confirmation.models import ConfirmOutput

__all__ = [
    "ConfirmationService",
    "ConfirmOutput",
]

from typing import Protocol


class ConfirmedSubscribersPort(Protocol):
    """Read side of the subscriber repository used for delivery."""

    def list_confirmed_subscribers(self) -> list[str]:
        """Stored emails of confirmed subscribers, unvalidated."""
        ...

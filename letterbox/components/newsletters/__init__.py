"""
Newsletters component.

Publishing issues to confirmed subscribers.
"""

from letterbox.components.newsletters.component import NewsletterService
from letterbox.components.newsletters.models import NewsletterIssue, PublishOutput
from letterbox.components.newsletters.ports import ConfirmedSubscribersPort

__all__ = [
    "NewsletterService",
    "NewsletterIssue",
    "PublishOutput",
    "ConfirmedSubscribersPort",
]

"""
Newsletter component models.
"""

from __future__ import annotations

from dataclasses import dataclass

from letterbox.core.errors import ValidationError


@dataclass(frozen=True)
class NewsletterIssue:
    title: str
    html_content: str
    text_content: str

    def validate(self) -> None:
        for field_name in ("title", "html_content", "text_content"):
            if not getattr(self, field_name).strip():
                raise ValidationError(f"The {field_name} field must not be empty.", field=field_name)


@dataclass(frozen=True)
class PublishOutput:
    delivered: int
    skipped: int

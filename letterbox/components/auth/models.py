"""
Auth component models.

Password policy bounds and the user-facing messages for password changes.
"""

from __future__ import annotations

MIN_PASSWORD_LENGTH = 12
MAX_PASSWORD_LENGTH = 128

PASSWORD_MISMATCH = (
    "You entered two different new passwords - the field values must match."
)
PASSWORD_LENGTH = (
    f"The new password must be between {MIN_PASSWORD_LENGTH} "
    f"and {MAX_PASSWORD_LENGTH} characters long."
)
PASSWORD_INCORRECT = "The current password is incorrect."


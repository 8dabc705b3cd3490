"""
Auth component.

Operator login, logout, password change, and the typed session they share.
"""

from letterbox.components.auth.component import AuthService
from letterbox.components.auth.models import (
    MAX_PASSWORD_LENGTH,
    MIN_PASSWORD_LENGTH,
    PASSWORD_INCORRECT,
    PASSWORD_LENGTH,
    PASSWORD_MISMATCH,
)
from letterbox.components.auth.ports import (
    CredentialVerifierPort,
    SessionStorePort,
    UserRepoPort,
)
from letterbox.components.auth.session import USER_ID_KEY, TypedSession

__all__ = [
    # Service
    "AuthService",
    "TypedSession",
    # Models
    "MIN_PASSWORD_LENGTH",
    "MAX_PASSWORD_LENGTH",
    "PASSWORD_INCORRECT",
    "PASSWORD_LENGTH",
    "PASSWORD_MISMATCH",
    "USER_ID_KEY",
    # Ports
    "CredentialVerifierPort",
    "SessionStorePort",
    "UserRepoPort",
]

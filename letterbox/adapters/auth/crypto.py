import secrets
import string

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from letterbox.core.errors import UnexpectedError

SUBSCRIPTION_TOKEN_LENGTH = 25
SUBSCRIPTION_TOKEN_ALPHABET = string.ascii_letters + string.digits


def generate_subscription_token(length: int = SUBSCRIPTION_TOKEN_LENGTH) -> str:
    """
    Generate an opaque confirmation token.

    25 independent draws from a 62-symbol alphabet give ~149 bits of entropy.
    Uniqueness is not checked; a collision would violate the primary key on
    subscription_tokens and surface as an unexpected error.
    """
    return "".join(secrets.choice(SUBSCRIPTION_TOKEN_ALPHABET) for _ in range(length))


def generate_session_id() -> str:
    return secrets.token_urlsafe(32)


class Argon2CredentialVerifier:
    """argon2id password hashing.

    Hashes are PHC strings carrying algorithm, parameters and salt, so
    verification keeps working for hashes produced with older parameters.
    """

    def __init__(
        self,
        time_cost: int = 2,
        memory_cost: int = 15000,
        parallelism: int = 1,
    ) -> None:
        self.ph = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=Type.ID,
        )
        # Verified against when the username does not exist, so both
        # failure paths pay for one argon2 verification.
        self.dummy_hash = self.hash_password(secrets.token_urlsafe(16))

    def hash_password(self, password: str) -> str:
        return str(self.ph.hash(password))

    def verify_password(self, password: str, hash_str: str) -> bool:
        try:
            self.ph.verify(hash_str, password)
            return True
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError) as e:
            raise UnexpectedError("Failed to verify password hash.") from e

    def needs_rehash(self, hash_str: str) -> bool:
        try:
            return bool(self.ph.check_needs_rehash(hash_str))
        except InvalidHashError as e:
            raise UnexpectedError("Stored password hash is malformed.") from e

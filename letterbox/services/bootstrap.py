import logging

from letterbox.app_shell.config import BootstrapSettings
from letterbox.components.auth import MAX_PASSWORD_LENGTH, MIN_PASSWORD_LENGTH
from letterbox.components.auth.ports import CredentialVerifierPort, UserRepoPort
from letterbox.domain.entities import User

logger = logging.getLogger(__name__)


def create_operator(
    user_repo: UserRepoPort,
    verifier: CredentialVerifierPort,
    username: str,
    password: str,
) -> User:
    """
    Create an operator account.
    Raises ValueError for a blank or taken username, or a password outside
    the length bounds that password changes enforce.
    """
    username = username.strip()
    if not username:
        raise ValueError("Username must not be empty")
    if not MIN_PASSWORD_LENGTH <= len(password) <= MAX_PASSWORD_LENGTH:
        raise ValueError(
            f"Password must be between {MIN_PASSWORD_LENGTH} and {MAX_PASSWORD_LENGTH} "
            "characters long"
        )
    if user_repo.get_by_username(username) is not None:
        raise ValueError(f"User {username} already exists")

    user = User(username=username, password_hash=verifier.hash_password(password))
    return user_repo.save(user)


def bootstrap_operator(
    user_repo: UserRepoPort,
    verifier: CredentialVerifierPort,
    settings: BootstrapSettings,
) -> User | None:
    """
    Create the first operator account (Day 0) if none exists and credentials are configured.
    """
    if user_repo.count() > 0:
        return None

    if not settings.username or settings.password is None:
        logger.info(
            "No operator accounts and no bootstrap credentials configured. "
            "Skipping operator creation."
        )
        return None

    user = create_operator(
        user_repo, verifier, settings.username, settings.password.get_secret_value()
    )
    logger.info("Bootstrap: created operator account %s", user.username)
    return user

from __future__ import annotations

import hmac
import logging

import bcrypt

from horder.core.config import get_settings
from horder.core.security import create_access_token
from horder.domain.errors import AuthenticationError, EntityNotFound, PasswordChangeError
from horder.persistence.repositories import Repository, UserRecord

logger = logging.getLogger(__name__)

_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("ascii")


def is_password_hash(stored: str) -> bool:
    return stored.startswith(_BCRYPT_PREFIXES)


def check_password(password: str, stored: str) -> bool:
    if not is_password_hash(stored):
        return False
    return bcrypt.checkpw(password.encode("utf-8"), stored.encode("ascii"))


def normalize_username(username: str | None) -> str:
    return (username or "").strip().lower()


def bootstrap_admin(repo: Repository) -> UserRecord:
    settings = get_settings()
    username = normalize_username(settings.default_admin_username)
    existing = repo.get_user(username)
    if existing is not None:
        return existing
    user = UserRecord(username=username, password=hash_password(settings.default_admin_password))
    repo.insert_user(user)
    logger.info("default admin user created: username=%s", username)
    return user


def migrate_legacy_password(repo: Repository, user: UserRecord, password: str) -> bool:
    """Re-hash a plain-text password left over from before hashing was introduced.

    Returns True when the stored value was plain text matching ``password`` and
    has been replaced by its bcrypt hash.
    """
    if is_password_hash(user.password):
        return False
    if not password or not _constant_time_equal(user.password, password):
        return False
    user.password = hash_password(password)
    repo.update_user(user)
    logger.info("legacy password migrated: username=%s", user.username)
    return True


def _constant_time_equal(left: str, right: str) -> bool:
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))


def authenticate(repo: Repository, username: str, password: str) -> UserRecord:
    username = normalize_username(username)
    user = repo.get_user(username)
    if user is None and username == normalize_username(get_settings().default_admin_username):
        user = bootstrap_admin(repo)
    if user is None:
        raise AuthenticationError("user not found")

    if check_password(password, user.password) or migrate_legacy_password(repo, user, password):
        return user
    raise AuthenticationError("invalid password")


def login(repo: Repository, username: str, password: str) -> str:
    user = authenticate(repo, username, password)
    return create_access_token(user.username)


def get_profile(repo: Repository, username: str) -> UserRecord:
    user = repo.get_user(username)
    if user is None:
        raise EntityNotFound("user", username)
    return user


def update_profile(repo: Repository, username: str, full_name: str) -> UserRecord:
    user = get_profile(repo, username)
    user.full_name = full_name.strip() or user.full_name
    repo.update_user(user)
    return user


def change_password(
    repo: Repository,
    username: str,
    old_password: str,
    new_password: str,
    confirm_password: str,
) -> None:
    if not new_password:
        raise PasswordChangeError("new password must not be empty")
    if new_password != confirm_password:
        raise PasswordChangeError("password confirmation does not match")

    user = get_profile(repo, username)
    if not check_password(old_password, user.password):
        raise PasswordChangeError("old password is incorrect")
    user.password = hash_password(new_password)
    repo.update_user(user)
    logger.info("password changed: username=%s", username)

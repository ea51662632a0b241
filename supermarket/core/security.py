import logging

import bcrypt

from supermarket.core.exceptions import PasswordVerificationError, ValidationError

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72
BCRYPT_ROUNDS = 10
MIN_LOCK_PASSWORD_LENGTH = 4


def _encode(password: str) -> bytes:
    raw = password.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        raise PasswordVerificationError(f"Lock password is longer than {BCRYPT_MAX_BYTES} bytes")
    return raw


def hash_lock_password(password: str) -> str:
    """Hash a lock screen password for keeping in memory or config."""
    if len(password) < MIN_LOCK_PASSWORD_LENGTH:
        raise ValidationError(f"Lock password needs at least {MIN_LOCK_PASSWORD_LENGTH} characters")

    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("ascii")


def verify_lock_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("ascii"))
    except PasswordVerificationError:
        # Too long to ever have been hashed
        return False
    except ValueError:
        logger.error("Lock password check failed: stored hash is malformed")
        return False

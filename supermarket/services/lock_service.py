import logging
from datetime import datetime, timedelta

from supermarket.core.clock import Clock, local_now
from supermarket.core.exceptions import PasswordVerificationError
from supermarket.core.security import hash_lock_password, verify_lock_password
from supermarket.schemas.lock import LockStatus

logger = logging.getLogger(__name__)


class SessionLockService:
    """
    Lock screen state for the single till session.

    Without a password the till never locks. With one, it locks on demand
    or after `auto_lock_minutes` without activity (0 disables the timer).
    """

    def __init__(self, password: str | None = None, auto_lock_minutes: int = 5, clock: Clock = local_now):
        self.password_hash = hash_lock_password(password) if password else None
        self.auto_lock_minutes = auto_lock_minutes
        self.clock = clock
        self.locked = False
        self.failed_attempts = 0
        self.last_activity: datetime | None = None

    @property
    def has_password(self) -> bool:
        return self.password_hash is not None

    def set_password(self, password: str, current_password: str | None = None) -> None:
        """An empty password removes the lock altogether. Changing an existing one needs it first."""
        if self.password_hash and not verify_lock_password(current_password or "", self.password_hash):
            raise PasswordVerificationError("Current password is incorrect")

        self.password_hash = hash_lock_password(password) if password else None
        if not self.password_hash:
            self.locked = False
        logger.info("Lock password " + ("set." if self.password_hash else "removed."))

    def touch(self, now: datetime | None = None) -> None:
        self.last_activity = now or self.clock()

    def lock(self) -> bool:
        if self.has_password:
            self.locked = True
            logger.info("Session locked.")
        return self.locked

    def unlock(self, password: str) -> None:
        if not self.locked:
            return

        if not verify_lock_password(password, self.password_hash):
            self.failed_attempts += 1
            logger.warning(f"Unlock failed (attempt {self.failed_attempts})")
            raise PasswordVerificationError("Incorrect password")

        self.locked = False
        self.failed_attempts = 0
        self.touch()
        logger.info("Session unlocked.")

    def should_lock(self, now: datetime | None = None) -> bool:
        if not self.has_password or self.locked or self.auto_lock_minutes <= 0:
            return False
        if self.last_activity is None:
            return False
        return (now or self.clock()) - self.last_activity >= timedelta(minutes=self.auto_lock_minutes)

    def check_idle(self, now: datetime | None = None) -> bool:
        """Lock if the idle timeout has passed; returns whether the session is locked."""
        if self.should_lock(now):
            self.lock()
        return self.locked

    def status(self) -> LockStatus:
        return LockStatus(
            locked=self.locked,
            has_password=self.has_password,
            failed_attempts=self.failed_attempts,
            auto_lock_minutes=self.auto_lock_minutes,
            last_activity=self.last_activity,
        )

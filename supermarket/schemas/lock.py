from datetime import datetime

from pydantic import Field

from supermarket.schemas.common import StoreModel


class PasswordIn(StoreModel):
    password: str = Field(..., min_length=1)


class PasswordChange(StoreModel):
    password: str = Field("", description="Empty string removes the lock password")
    current_password: str | None = None


class LockStatus(StoreModel):
    locked: bool
    has_password: bool
    failed_attempts: int
    auto_lock_minutes: int
    last_activity: datetime | None

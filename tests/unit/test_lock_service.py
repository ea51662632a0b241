from datetime import timedelta

import pytest

from supermarket.core.exceptions import PasswordVerificationError
from supermarket.services.lock_service import SessionLockService


def test_without_password_never_locks(lock_service, clock):
    lock_service.touch()
    clock.advance(hours=1)

    assert lock_service.lock() is False
    assert lock_service.check_idle() is False


def test_unlock_with_correct_password(lock_service):
    lock_service.set_password("1234")
    lock_service.lock()

    with pytest.raises(PasswordVerificationError):
        lock_service.unlock("0000")
    assert lock_service.status().failed_attempts == 1
    assert lock_service.locked

    lock_service.unlock("1234")
    assert not lock_service.locked
    assert lock_service.failed_attempts == 0


def test_idle_timeout_locks(lock_service, clock):
    lock_service.set_password("1234")
    lock_service.touch()

    clock.advance(minutes=4, seconds=59)
    assert lock_service.check_idle() is False

    clock.advance(seconds=1)
    assert lock_service.check_idle() is True


def test_zero_minutes_disables_timer(clock):
    service = SessionLockService(password="1234", auto_lock_minutes=0, clock=clock)
    service.touch()
    clock.advance(days=1)

    assert service.check_idle() is False
    assert service.lock() is True


def test_changing_password_needs_current_one(lock_service):
    lock_service.set_password("1234")

    with pytest.raises(PasswordVerificationError):
        lock_service.set_password("5678", current_password="wrong")

    lock_service.set_password("5678", current_password="1234")
    lock_service.lock()
    lock_service.unlock("5678")

    # Removing the password unlocks for good
    lock_service.set_password("", current_password="5678")
    assert not lock_service.has_password
    assert lock_service.lock() is False


def test_last_activity_reported(lock_service, clock):
    lock_service.touch(clock.now - timedelta(minutes=1))
    assert lock_service.status().last_activity == clock.now - timedelta(minutes=1)

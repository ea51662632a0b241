from fastapi import APIRouter, Depends

from supermarket.core.deps import get_lock_service
from supermarket.schemas.lock import LockStatus, PasswordChange, PasswordIn
from supermarket.services.lock_service import SessionLockService

router = APIRouter(
    prefix="/lock",
    tags=["Lock"],
)


@router.get("", response_model=LockStatus)
async def lock_status(lock: SessionLockService = Depends(get_lock_service)):
    """Also applies the idle timeout, so polling this is enough to auto-lock."""
    lock.check_idle()
    return lock.status()


@router.post("", response_model=LockStatus)
async def lock_session(lock: SessionLockService = Depends(get_lock_service)):
    lock.lock()
    return lock.status()


@router.post("/unlock", response_model=LockStatus)
async def unlock_session(body: PasswordIn, lock: SessionLockService = Depends(get_lock_service)):
    lock.unlock(body.password)
    return lock.status()


@router.put("/password", response_model=LockStatus)
async def change_password(body: PasswordChange, lock: SessionLockService = Depends(get_lock_service)):
    lock.set_password(body.password, body.current_password)
    return lock.status()


@router.post("/activity", response_model=LockStatus)
async def record_activity(lock: SessionLockService = Depends(get_lock_service)):
    lock.touch()
    return lock.status()

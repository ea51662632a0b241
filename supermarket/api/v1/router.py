from fastapi import APIRouter

from supermarket.api.v1.endpoints import (
    backup,
    categories,
    checkout,
    lock,
    orders,
    products,
    statistics,
)

router = APIRouter()

router.include_router(categories.router)
router.include_router(products.router)
router.include_router(orders.router)
router.include_router(statistics.router)

router.include_router(checkout.router)
router.include_router(backup.router)

router.include_router(lock.router)

import logging

from fastapi import APIRouter, Depends, status

from supermarket.core.deps import get_cart_service, get_lock_service, get_product_service
from supermarket.core.exceptions import NotFoundError
from supermarket.schemas.cart import CartRead, QuantityUpdate, ScanRequest
from supermarket.schemas.order import OrderDetails
from supermarket.services.cart_service import CartService
from supermarket.services.lock_service import SessionLockService
from supermarket.services.product_service import ProductService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/checkout",
    tags=["Checkout"],
)


def touch_session(lock: SessionLockService = Depends(get_lock_service)) -> None:
    """Every till action counts as activity for the idle lock."""
    lock.touch()


# -------------------------------
# VIEW CART
# -------------------------------
@router.get("/cart", response_model=CartRead)
async def view_cart(cart: CartService = Depends(get_cart_service)):
    return cart.get_cart()


# -------------------------------
# ADD ITEM
# -------------------------------
@router.post("/scan", response_model=CartRead, dependencies=[Depends(touch_session)])
async def scan_barcode(body: ScanRequest, cart: CartService = Depends(get_cart_service)):
    """Barcode scanner input; 404 when nothing carries the barcode."""
    return await cart.scan(body.barcode, body.quantity)


@router.post("/cart/{product_id}", response_model=CartRead, dependencies=[Depends(touch_session)])
async def add_to_cart(
    product_id: str,
    body: QuantityUpdate | None = None,
    cart: CartService = Depends(get_cart_service),
    products: ProductService = Depends(get_product_service),
):
    product = await products.get_by_id(product_id)
    if not product:
        raise NotFoundError(f"Product {product_id} not found")
    return cart.add_item(product, body.quantity if body else 1)


# -------------------------------
# UPDATE / REMOVE
# -------------------------------
@router.patch("/cart/{product_id}", response_model=CartRead, dependencies=[Depends(touch_session)])
async def update_cart_item(
    product_id: str,
    body: QuantityUpdate,
    cart: CartService = Depends(get_cart_service),
):
    """Set the quantity; 0 removes the line."""
    return cart.update_quantity(product_id, body.quantity)


@router.delete("/cart/{product_id}", response_model=CartRead, dependencies=[Depends(touch_session)])
async def remove_cart_item(product_id: str, cart: CartService = Depends(get_cart_service)):
    return cart.remove_item(product_id)


@router.delete("/cart", response_model=CartRead, dependencies=[Depends(touch_session)])
async def clear_cart(cart: CartService = Depends(get_cart_service)):
    return cart.clear()


# -------------------------------
# CHECKOUT
# -------------------------------
@router.post(
    "",
    response_model=OrderDetails,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(touch_session)],
)
async def checkout(cart: CartService = Depends(get_cart_service)):
    """Turn the cart into a completed order and empty it."""
    return await cart.checkout()

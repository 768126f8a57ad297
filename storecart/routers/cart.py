"""
Cart Router

Cart endpoints for the storefront page. Every response carries the fresh cart
summary plus any notifications raised while handling the request.
Removal confirmation happens in the page before DELETE is sent.
"""
from fastapi import APIRouter, Depends, HTTPException

from storecart.logging import get_logger
from storecart.session import CartSession
from .deps import drain_notifications, get_session
from .models import AddItemRequest, CartResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/api/cart", tags=["cart"])


def _cart_response(session: CartSession) -> dict:
    return {**session.cart.summary(), "notifications": drain_notifications()}


@router.get("", response_model=CartResponse)
async def get_cart(session: CartSession = Depends(get_session)):
    """Current cart with totals."""
    return _cart_response(session)


@router.post("/items", response_model=CartResponse)
async def add_item(request: AddItemRequest, session: CartSession = Depends(get_session)):
    """Add one unit of a product (merges by name)."""
    try:
        session.add_item(request.name, request.price, request.image)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _cart_response(session)


@router.post("/items/{index}/increase", response_model=CartResponse)
async def increase_quantity(index: int, session: CartSession = Depends(get_session)):
    session.increase_quantity(index)
    return _cart_response(session)


@router.post("/items/{index}/decrease", response_model=CartResponse)
async def decrease_quantity(index: int, session: CartSession = Depends(get_session)):
    """Remove one unit; the last unit removes the item."""
    session.decrease_quantity(index)
    return _cart_response(session)


@router.delete("/items/{index}", response_model=CartResponse)
async def remove_item(index: int, session: CartSession = Depends(get_session)):
    session.remove_item(index)
    return _cart_response(session)


@router.delete("", response_model=CartResponse)
async def clear_cart(session: CartSession = Depends(get_session)):
    session.clear()
    return _cart_response(session)

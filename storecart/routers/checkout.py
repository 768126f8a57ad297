"""Checkout Router - order finalization and last-order lookup."""
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from storecart.logging import get_logger
from storecart.session import CartSession
from .deps import drain_notifications, get_session
from .models import CheckoutRequest, OrderResponse, ValidationErrorResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["checkout"])


@router.post(
    "/checkout",
    response_model=OrderResponse,
    responses={400: {"model": ValidationErrorResponse}},
)
async def checkout(
    request: CheckoutRequest,
    background_tasks: BackgroundTasks,
    session: CartSession = Depends(get_session),
):
    """
    Validate the checkout form and finalize the order.

    Validation failures return 400 with the failing rule and the form field
    to focus. Webhook submission runs after the response is sent.
    """
    order = session.checkout(request.full_name, request.phone, request.address, request.notes)
    background_tasks.add_task(session.submit_order, order)
    return {**order.to_dict(), "notifications": drain_notifications()}


@router.get("/orders/last", response_model=OrderResponse)
async def last_order(session: CartSession = Depends(get_session)):
    """Last finalized order, for the order confirmation/history view."""
    order = session.last_order()
    if order is None:
        raise HTTPException(status_code=404, detail="No order found")
    return order.to_dict()

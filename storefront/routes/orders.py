from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlmodel import Session

from storefront.database import get_session
from storefront.models.order import OrderStatus
from storefront.notifications import notify_order_placed, notify_status_changed
from storefront.schemas.order_schemas import (
    OrderListResponse,
    OrderRead,
    PaymentStatusUpdate,
    PlaceOrderRequest,
    StatusUpdate,
)
from storefront.services import order_service

router = APIRouter()


@router.post("", response_model=OrderRead, status_code=201)
def create_order(
    payload: PlaceOrderRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
):
    # notifications run after the response, outside the placement transaction
    order = order_service.place_order(
        session,
        payload,
        notifier=lambda snapshot: background_tasks.add_task(notify_order_placed, snapshot),
    )
    return OrderRead.model_validate(order)


@router.get("", response_model=OrderListResponse)
def list_orders(
    page: int = 1,
    limit: int = 20,
    status: Optional[OrderStatus] = Query(None),
    user_id: Optional[int] = Query(None),
    session: Session = Depends(get_session),
):
    data = order_service.list_orders(
        session, page=page, limit=limit, status=status, user_id=user_id
    )
    data["results"] = [OrderRead.model_validate(o) for o in data["results"]]
    return data


@router.get("/number/{order_number}", response_model=OrderRead)
def get_order_by_number(
    order_number: str,
    session: Session = Depends(get_session),
):
    return OrderRead.model_validate(
        order_service.get_order_by_number(session, order_number)
    )


@router.get("/{order_id}", response_model=OrderRead)
def get_order(
    order_id: int,
    session: Session = Depends(get_session),
):
    return OrderRead.model_validate(order_service.get_order(session, order_id))


@router.patch("/{order_id}/status", response_model=OrderRead)
def update_order_status(
    order_id: int,
    payload: StatusUpdate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
):
    order = order_service.update_status(
        session,
        order_id,
        payload.status,
        notifier=lambda snapshot: background_tasks.add_task(notify_status_changed, snapshot),
    )
    return OrderRead.model_validate(order)


@router.patch("/{order_id}/payment-status", response_model=OrderRead)
def update_payment_status(
    order_id: int,
    payload: PaymentStatusUpdate,
    session: Session = Depends(get_session),
):
    return OrderRead.model_validate(
        order_service.update_payment_status(session, order_id, payload.payment_status)
    )

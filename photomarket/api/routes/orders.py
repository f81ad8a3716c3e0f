"""Order API routes."""
from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from photomarket.api.dependencies import get_current_user, get_order_service, require_admin
from photomarket.core.security import TokenPayload
from photomarket.models.schemas import OrderCreate, OrderResponse, OrderStatusUpdate
from photomarket.services import OrderService

router = APIRouter()


@router.post("/orders", response_model=OrderResponse, status_code=201)
async def create_order(
    order_data: OrderCreate,
    user: TokenPayload = Depends(get_current_user),
    order_service: OrderService = Depends(get_order_service)
):
    """
    Record an order for the current user.

    Orders start as ``pending``; downloads unlock once the payment side
    marks them ``completed``.
    """
    order = await order_service.create_order(user.email, order_data)
    return OrderResponse.model_validate(order)


@router.get("/orders", response_model=List[OrderResponse])
async def list_my_orders(
    user: TokenPayload = Depends(get_current_user),
    order_service: OrderService = Depends(get_order_service)
):
    """List the current user's orders, newest first."""
    orders = await order_service.list_user_orders(user.email)
    return [OrderResponse.model_validate(order) for order in orders]


@router.get("/admin/orders", response_model=List[OrderResponse])
async def list_orders(
    skip: int = Query(default=0, ge=0, description="Number of records to skip"),
    limit: int = Query(default=100, ge=1, le=1000, description="Max records to return"),
    admin: TokenPayload = Depends(require_admin),
    order_service: OrderService = Depends(get_order_service)
):
    """List all orders (admin)."""
    orders = await order_service.list_orders(skip=skip, limit=limit)
    return [OrderResponse.model_validate(order) for order in orders]


@router.patch("/admin/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: UUID,
    request: OrderStatusUpdate,
    admin: TokenPayload = Depends(require_admin),
    order_service: OrderService = Depends(get_order_service)
):
    """Apply a payment outcome to an order (admin)."""
    order = await order_service.update_status(order_id, request.status)
    return OrderResponse.model_validate(order)

"""
API Routes Package

This module consolidates the broker's HTTP routes.
"""

from fastapi import APIRouter

from . import orders
from . import webhooks

router = APIRouter()

router.include_router(orders.router, prefix="/api/orders", tags=["orders"])
router.include_router(webhooks.router, tags=["webhooks"])

__all__ = ["router"]

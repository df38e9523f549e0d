"""
Public catalog routes — food items and liveness.

Route prefix: /api (except the root liveness check).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.errors import InternalError
from auth.dependencies import db_session
from database.models import FoodItem

logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog"])
root_router = APIRouter(tags=["health"])


def _food_item_out(item: FoodItem) -> Dict[str, Any]:
    return {
        "id": str(item.item_id),
        "name": item.name,
        "category": item.category,
        "reactionType": item.reaction_type,
        "emoji": item.emoji,
    }


@router.get("/food-items")
async def list_food_items(
    category: Optional[str] = Query(default=None),
    reaction_type: Optional[str] = Query(default=None, alias="reactionType"),
    session: AsyncSession = Depends(db_session),
) -> List[Dict[str, Any]]:
    """All food items, optionally filtered by category and/or reaction type."""
    stmt = select(FoodItem)
    if category:
        stmt = stmt.where(FoodItem.category == category)
    if reaction_type:
        stmt = stmt.where(FoodItem.reaction_type == reaction_type)
    try:
        result = await session.execute(stmt.order_by(FoodItem.name))
    except Exception as exc:
        logger.exception("Error fetching food items")
        raise InternalError("Error fetching food items") from exc
    return [_food_item_out(item) for item in result.scalars().all()]


@root_router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "Sensitivv API Server is running"

"""Watchlist API router."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coinfolio.database import get_db
from coinfolio.dependencies.auth import get_owner_context
from coinfolio.models import WatchlistItem
from coinfolio.schemas import MessageResponse, WatchlistItemCreate
from coinfolio.schemas import WatchlistItem as WatchlistItemSchema
from coinfolio.services.portfolio import OwnerContext
from coinfolio.services.repositories import WatchlistRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/watchlist", tags=["watchlist"])


@router.get("", response_model=list[WatchlistItemSchema])
def list_watchlist(
    db: Session = Depends(get_db),
    owner: OwnerContext = Depends(get_owner_context),
) -> list[WatchlistItem]:
    """Get the caller's watchlist, newest first."""
    return list(WatchlistRepository(db).list_by_owner(owner.owner_id))


@router.post("", response_model=WatchlistItemSchema, status_code=status.HTTP_201_CREATED)
def add_to_watchlist(
    data: WatchlistItemCreate,
    db: Session = Depends(get_db),
    owner: OwnerContext = Depends(get_owner_context),
) -> WatchlistItem:
    """Follow a coin. Adding a coin twice is a 409."""
    item = WatchlistRepository(db).add(
        owner.owner_id,
        data.asset_id.strip(),
        note=data.note,
        target_price=data.target_price,
    )
    db.commit()
    db.refresh(item)
    logger.info(f"Owner {owner.owner_id} added {item.asset_id} to watchlist")
    return item


@router.delete("/{item_id}", response_model=MessageResponse)
def remove_from_watchlist(
    item_id: int,
    db: Session = Depends(get_db),
    owner: OwnerContext = Depends(get_owner_context),
) -> dict:
    WatchlistRepository(db).remove(owner.owner_id, item_id)
    db.commit()
    return {"message": "Removed from watchlist"}

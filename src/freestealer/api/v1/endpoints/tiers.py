"""Tier listing and management endpoints."""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, HTTPException, Query, Response, status

from freestealer.api.v1.dependencies import (
    CounterServiceDep,
    CurrentUserDep,
    SessionDep,
    counter_http_error,
)
from freestealer.core.settings import settings
from freestealer.models import Tier
from freestealer.repositories.tier_repo import SORT_VOTES, TierRepository
from freestealer.schemas.comment import CommentResponse
from freestealer.schemas.tier import (
    TierCreate,
    TierDetailResponse,
    TierPage,
    TierResponse,
    TierUpdate,
)
from freestealer.services.counters import CounterError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tiers", tags=["tiers"])


def _get_owned_tier_or_error(repo: TierRepository, tier_id: int, user_id: int) -> Tier:
    tier = repo.get_visible(tier_id, user_id)
    if tier is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tier not found")
    if tier.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the owner can modify this tier",
        )
    return tier


@router.post("", response_model=TierResponse, status_code=status.HTTP_201_CREATED)
def create_tier(payload: TierCreate, db: SessionDep, current_user: CurrentUserDep) -> Tier:
    """Submit a new free-tier listing owned by the caller."""
    tier = TierRepository(db).create(owner_id=current_user.id, fields=payload.model_dump())
    logger.info("Tier created: tier_id=%s user_id=%s", tier.id, current_user.id)
    return tier


@router.get("", response_model=TierPage)
def list_tiers(
    db: SessionDep,
    current_user: CurrentUserDep,
    platform: str | None = None,
    user_id: int | None = None,
    sort: Literal["votes", "recent"] = SORT_VOTES,
    page: int = Query(1, ge=1),
) -> TierPage:
    """List tiers, most upvoted first unless ``sort=recent``."""
    page_size = settings.tiers_page_size
    tiers = TierRepository(db).list_tiers(
        viewer_id=current_user.id,
        page=page,
        page_size=page_size,
        platform=platform,
        user_id=user_id,
        sort=sort,
    )
    return TierPage(
        data=[TierResponse.model_validate(tier) for tier in tiers],
        page=page,
        page_size=page_size,
    )


@router.get("/{tier_id}", response_model=TierDetailResponse)
def get_tier(tier_id: int, db: SessionDep, current_user: CurrentUserDep) -> TierDetailResponse:
    """Return a tier with its comments."""
    repo = TierRepository(db)
    tier = repo.get_visible(tier_id, current_user.id)
    if tier is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tier not found")
    comments = [CommentResponse.model_validate(c) for c in repo.live_comments(tier_id)]
    return TierDetailResponse(
        **TierResponse.model_validate(tier).model_dump(),
        comments=comments,
    )


@router.put("/{tier_id}", response_model=TierResponse)
def update_tier(
    tier_id: int,
    payload: TierUpdate,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> Tier:
    """Update descriptive fields of a tier the caller owns."""
    repo = TierRepository(db)
    tier = _get_owned_tier_or_error(repo, tier_id, current_user.id)
    tier = repo.update(tier, payload.model_dump(exclude_unset=True))
    logger.info("Tier updated: tier_id=%s", tier_id)
    return tier


@router.delete("/{tier_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tier(
    tier_id: int,
    db: SessionDep,
    current_user: CurrentUserDep,
    counters: CounterServiceDep,
) -> Response:
    """Delete a tier the caller owns."""
    _get_owned_tier_or_error(TierRepository(db), tier_id, current_user.id)
    try:
        counters.retire_tier(tier_id)
    except CounterError as err:
        raise counter_http_error(err) from err
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""Vote-related endpoints for the Freestealer API."""

from typing import Any

from fastapi import APIRouter, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from freestealer.api.v1.dependencies import (
    CounterServiceDep,
    CurrentUserDep,
    SessionDep,
    counter_http_error,
)
from freestealer.models import Vote
from freestealer.repositories.tier_repo import TierRepository
from freestealer.schemas.vote import MyVoteResponse, VoteCreate, VoteResponse
from freestealer.services.counters import CounterError, VoteStatus

router = APIRouter(prefix="/votes", tags=["votes"])


def _ensure_tier_visible(db: Session, tier_id: int, user_id: int) -> None:
    if TierRepository(db).get_visible(tier_id, user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tier not found")


@router.post("", status_code=status.HTTP_201_CREATED)
def cast_vote(
    vote_data: VoteCreate,
    response: Response,
    db: SessionDep,
    current_user: CurrentUserDep,
    counters: CounterServiceDep,
) -> dict[str, Any]:
    """Cast a vote. Repeating the same vote removes it; the opposite vote flips it."""
    _ensure_tier_visible(db, vote_data.tier_id, current_user.id)
    try:
        outcome = counters.apply_vote(current_user.id, vote_data.tier_id, vote_data.vote_type)
    except CounterError as err:
        raise counter_http_error(err) from err

    if outcome.status is VoteStatus.REMOVED:
        response.status_code = status.HTTP_200_OK
        return {"message": "Vote removed"}
    if outcome.status is VoteStatus.UPDATED:
        response.status_code = status.HTTP_200_OK
    return VoteResponse.model_validate(outcome.vote).model_dump(mode="json")


@router.get("/{tier_id}/my-vote", response_model=MyVoteResponse)
def get_my_vote(tier_id: int, db: SessionDep, current_user: CurrentUserDep) -> MyVoteResponse:
    """Return the caller's vote on a tier, 0 when none."""
    _ensure_tier_visible(db, tier_id, current_user.id)
    vote_type = db.scalars(
        select(Vote.vote_type).where(
            Vote.user_id == current_user.id,
            Vote.tier_id == tier_id,
            Vote.deleted_at.is_(None),
        )
    ).first()
    return MyVoteResponse(vote_type=vote_type or 0)

"""Comment endpoints for the Freestealer API."""

from fastapi import APIRouter, HTTPException, Response, status
from sqlalchemy import select

from freestealer.api.v1.dependencies import (
    CounterServiceDep,
    CurrentUserDep,
    SessionDep,
    counter_http_error,
)
from freestealer.models import Comment
from freestealer.repositories.tier_repo import TierRepository
from freestealer.schemas.comment import CommentCreate, CommentResponse
from freestealer.services.counters import CommentRecord, CounterError

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("", response_model=list[CommentResponse])
def list_comments(tier_id: int, db: SessionDep, current_user: CurrentUserDep) -> list[Comment]:
    """Return a tier's comments, newest first."""
    repo = TierRepository(db)
    if repo.get_visible(tier_id, current_user.id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tier not found")
    return repo.live_comments(tier_id)


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def create_comment(
    payload: CommentCreate,
    db: SessionDep,
    current_user: CurrentUserDep,
    counters: CounterServiceDep,
) -> CommentRecord:
    """Comment on a tier as the caller."""
    if TierRepository(db).get_visible(payload.tier_id, current_user.id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tier not found")
    try:
        return counters.apply_comment(current_user.id, payload.tier_id, payload.content.strip())
    except CounterError as err:
        raise counter_http_error(err) from err


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    comment_id: int,
    db: SessionDep,
    current_user: CurrentUserDep,
    counters: CounterServiceDep,
) -> Response:
    """Delete one of the caller's comments."""
    comment = db.scalars(
        select(Comment).where(Comment.id == comment_id, Comment.deleted_at.is_(None))
    ).first()
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    if comment.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the author can delete this comment",
        )
    try:
        counters.retract_comment(comment_id)
    except CounterError as err:
        raise counter_http_error(err) from err
    return Response(status_code=status.HTTP_204_NO_CONTENT)

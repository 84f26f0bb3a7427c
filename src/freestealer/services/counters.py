"""Counter-consistent write path for votes and comments.

``CounterService`` is the only component allowed to create, change or delete
``Vote`` and ``Comment`` rows and to touch the ``upvote_count``,
``downvote_count`` and ``comment_count`` columns of ``Tier``. Every operation
runs in a single transaction that pairs the child-row change with a relative
counter update (``SET c = c + delta``), so a failure anywhere rolls both back
and concurrent voters on the same tier never lose increments.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from freestealer.models import Comment, Tier, Vote
from freestealer.models.comment import COMMENT_MAX_LENGTH
from freestealer.models.mixins import utcnow
from freestealer.models.tier import COMMENT_COUNTER, DOWNVOTE_COUNTER, UPVOTE_COUNTER
from freestealer.models.vote import VOTE_DOWN, VOTE_UP

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]

__all__ = [
    "CommentRecord",
    "CounterDrift",
    "CounterError",
    "CounterService",
    "InvalidArgumentError",
    "NotFoundError",
    "StorageFailureError",
    "VoteOutcome",
    "VoteRecord",
    "VoteStatus",
]


class CounterError(Exception):
    """Base error for vote and comment operations."""


class InvalidArgumentError(CounterError):
    """Input was rejected before any storage access."""


class NotFoundError(CounterError):
    """A referenced row does not exist or is already deleted."""


class StorageFailureError(CounterError):
    """The transaction could not commit and was rolled back.

    ``conflict`` is True when the failure was a unique-constraint violation,
    i.e. another request inserted the same (user, tier) vote first.
    """

    def __init__(self, message: str, *, conflict: bool = False) -> None:
        super().__init__(message)
        self.conflict = conflict


class VoteStatus(str, enum.Enum):
    """What ``apply_vote`` did with the caller's vote."""

    CREATED = "created"
    UPDATED = "updated"
    REMOVED = "removed"


@dataclass(frozen=True)
class VoteRecord:
    """Detached snapshot of a vote row."""

    id: int
    user_id: int
    tier_id: int
    vote_type: int
    created_at: datetime

    @classmethod
    def from_model(cls, vote: Vote) -> VoteRecord:
        return cls(
            id=vote.id,
            user_id=vote.user_id,
            tier_id=vote.tier_id,
            vote_type=vote.vote_type,
            created_at=vote.created_at,
        )


@dataclass(frozen=True)
class CommentRecord:
    """Detached snapshot of a comment row."""

    id: int
    user_id: int
    tier_id: int
    content: str
    created_at: datetime

    @classmethod
    def from_model(cls, comment: Comment) -> CommentRecord:
        return cls(
            id=comment.id,
            user_id=comment.user_id,
            tier_id=comment.tier_id,
            content=comment.content,
            created_at=comment.created_at,
        )


@dataclass(frozen=True)
class VoteOutcome:
    """Result of ``apply_vote``; ``vote`` is None when the vote was removed."""

    status: VoteStatus
    vote: VoteRecord | None = None


@dataclass(frozen=True)
class CounterDrift:
    """A tier whose stored counters disagree with its live child rows.

    Both tuples are ``(upvotes, downvotes, comments)``.
    """

    tier_id: int
    stored: tuple[int, int, int]
    live: tuple[int, int, int]


def _counter_for(vote_type: int) -> str:
    return UPVOTE_COUNTER if vote_type == VOTE_UP else DOWNVOTE_COUNTER


def _is_unique_violation(err: IntegrityError) -> bool:
    orig = err.orig
    # psycopg exposes the SQLSTATE, sqlite3 the extended result code name.
    if getattr(orig, "sqlstate", None) == "23505":
        return True
    return getattr(orig, "sqlite_errorname", "") == "SQLITE_CONSTRAINT_UNIQUE"


class CounterService:
    """Apply votes and comments while keeping tier counters exact."""

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        cascade_on_delete: bool = False,
        conflict_retries: int = 1,
    ) -> None:
        """Initialize the service.

        Args:
            session_factory: Callable returning a fresh ``Session``; each
                operation opens, commits and closes its own.
            cascade_on_delete: When True, retiring a tier also soft-deletes its
                live votes and comments and zeroes its counters. When False the
                children are left in place as orphans.
            conflict_retries: How many times ``apply_vote`` re-runs after losing
                a concurrent first-vote race for the same (user, tier) pair.
        """
        self._session_factory = session_factory
        self._cascade_on_delete = cascade_on_delete
        self._conflict_retries = conflict_retries

    @property
    def cascade_on_delete(self) -> bool:
        return self._cascade_on_delete

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Session]:
        """Yield a session inside one transaction, mapping storage errors.

        Commits on normal exit. Any exception, including cancellation, rolls
        the transaction back before it propagates.
        """
        session = self._session_factory()
        try:
            with session.begin():
                yield session
        except CounterError:
            raise
        except SQLAlchemyError as err:
            logger.error("Storage failure during %s: %s", operation, err, exc_info=True)
            conflict = isinstance(err, IntegrityError) and _is_unique_violation(err)
            raise StorageFailureError(f"{operation} failed", conflict=conflict) from err
        finally:
            session.close()

    @staticmethod
    def _adjust_counters(session: Session, tier_id: int, **deltas: int) -> None:
        """Apply relative deltas to the named counter columns of one tier."""
        values = {name: getattr(Tier, name) + delta for name, delta in deltas.items() if delta}
        if not values:
            return
        result = session.execute(
            update(Tier)
            .where(Tier.id == tier_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise StorageFailureError(f"Tier {tier_id} vanished during counter update")

    # ------------------------------------------------------------------ votes

    def apply_vote(self, user_id: int, tier_id: int, vote_type: int) -> VoteOutcome:
        """Create, switch or toggle off ``user_id``'s vote on ``tier_id``.

        Raises:
            InvalidArgumentError: ``vote_type`` is not 1 or -1.
            StorageFailureError: The transaction failed and was rolled back.
        """
        if vote_type not in (VOTE_UP, VOTE_DOWN):
            raise InvalidArgumentError("Vote type must be 1 (upvote) or -1 (downvote)")

        attempt = 0
        while True:
            try:
                return self._apply_vote_once(user_id, tier_id, vote_type)
            except StorageFailureError as err:
                if not err.conflict or attempt >= self._conflict_retries:
                    raise
                attempt += 1
                logger.warning(
                    "Concurrent first vote by user %s on tier %s, retrying (%d/%d)",
                    user_id,
                    tier_id,
                    attempt,
                    self._conflict_retries,
                )

    @staticmethod
    def _live_vote(session: Session, user_id: int, tier_id: int) -> Vote | None:
        return session.scalars(
            select(Vote)
            .where(
                Vote.user_id == user_id,
                Vote.tier_id == tier_id,
                Vote.deleted_at.is_(None),
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        ).first()

    @staticmethod
    def _guarded_vote_update(session: Session, vote: Vote, **values: object) -> bool:
        """Update ``vote`` only if it is still live with the type that was read.

        Returns False when a concurrent writer changed the row first.
        """
        result = session.execute(
            update(Vote)
            .where(
                Vote.id == vote.id,
                Vote.deleted_at.is_(None),
                Vote.vote_type == vote.vote_type,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def _apply_vote_once(self, user_id: int, tier_id: int, vote_type: int) -> VoteOutcome:
        with self._transaction("apply_vote") as session:
            while True:
                existing = self._live_vote(session, user_id, tier_id)

                if existing is None:
                    vote = Vote(user_id=user_id, tier_id=tier_id, vote_type=vote_type)
                    session.add(vote)
                    session.flush()
                    self._adjust_counters(session, tier_id, **{_counter_for(vote_type): 1})
                    outcome = VoteOutcome(VoteStatus.CREATED, VoteRecord.from_model(vote))
                    break

                old_type = existing.vote_type
                if old_type == vote_type:
                    if not self._guarded_vote_update(session, existing, deleted_at=utcnow()):
                        continue
                    self._adjust_counters(session, tier_id, **{_counter_for(vote_type): -1})
                    outcome = VoteOutcome(VoteStatus.REMOVED)
                    break

                if not self._guarded_vote_update(
                    session, existing, vote_type=vote_type, updated_at=utcnow()
                ):
                    continue
                self._adjust_counters(
                    session,
                    tier_id,
                    **{_counter_for(old_type): -1, _counter_for(vote_type): 1},
                )
                session.refresh(existing)
                outcome = VoteOutcome(VoteStatus.UPDATED, VoteRecord.from_model(existing))
                break

        logger.info(
            "Vote %s: user_id=%s tier_id=%s vote_type=%s",
            outcome.status.value,
            user_id,
            tier_id,
            vote_type,
        )
        return outcome

    # --------------------------------------------------------------- comments

    def apply_comment(self, user_id: int, tier_id: int, content: str) -> CommentRecord:
        """Insert a comment and bump the tier's ``comment_count``.

        Raises:
            InvalidArgumentError: ``content`` is empty or longer than 100 characters.
            StorageFailureError: The transaction failed and was rolled back.
        """
        if not isinstance(content, str) or not 1 <= len(content) <= COMMENT_MAX_LENGTH:
            raise InvalidArgumentError(
                f"Comment must be between 1 and {COMMENT_MAX_LENGTH} characters"
            )

        with self._transaction("apply_comment") as session:
            comment = Comment(user_id=user_id, tier_id=tier_id, content=content)
            session.add(comment)
            session.flush()
            self._adjust_counters(session, tier_id, **{COMMENT_COUNTER: 1})
            record = CommentRecord.from_model(comment)

        logger.info(
            "Comment created: comment_id=%s tier_id=%s user_id=%s",
            record.id,
            record.tier_id,
            record.user_id,
        )
        return record

    def retract_comment(self, comment_id: int) -> None:
        """Soft-delete a comment and decrement its tier's ``comment_count``.

        Raises:
            NotFoundError: No live comment has ``comment_id``.
            StorageFailureError: The transaction failed and was rolled back.
        """
        with self._transaction("retract_comment") as session:
            comment = session.scalars(
                select(Comment)
                .where(Comment.id == comment_id, Comment.deleted_at.is_(None))
                .with_for_update(of=Comment)
            ).first()
            if comment is None:
                raise NotFoundError(f"Comment {comment_id} not found")

            comment.deleted_at = utcnow()
            session.flush()
            self._adjust_counters(session, comment.tier_id, **{COMMENT_COUNTER: -1})

        logger.info("Comment deleted: comment_id=%s", comment_id)

    # ------------------------------------------------------------------ tiers

    def retire_tier(self, tier_id: int) -> None:
        """Soft-delete a tier, cascading to its children when configured.

        Raises:
            NotFoundError: No live tier has ``tier_id``.
            StorageFailureError: The transaction failed and was rolled back.
        """
        with self._transaction("retire_tier") as session:
            tier = session.scalars(
                select(Tier)
                .where(Tier.id == tier_id, Tier.deleted_at.is_(None))
                .with_for_update(of=Tier)
            ).first()
            if tier is None:
                raise NotFoundError(f"Tier {tier_id} not found")

            now = utcnow()
            tier.deleted_at = now
            if self._cascade_on_delete:
                for model in (Vote, Comment):
                    session.execute(
                        update(model)
                        .where(model.tier_id == tier_id, model.deleted_at.is_(None))
                        .values(deleted_at=now)
                        .execution_options(synchronize_session=False)
                    )
                # Every child is gone, so the live counts are zero.
                tier.upvote_count = 0
                tier.downvote_count = 0
                tier.comment_count = 0

        logger.info("Tier deleted: tier_id=%s cascade=%s", tier_id, self._cascade_on_delete)

    # ------------------------------------------------------------------ audit

    def find_drift(self) -> list[CounterDrift]:
        """Return tiers whose stored counters differ from their live child rows.

        Read-only; counters are never rewritten here.
        """
        with self._transaction("find_drift") as session:
            upvotes = self._live_vote_counts(session, VOTE_UP)
            downvotes = self._live_vote_counts(session, VOTE_DOWN)
            comments = dict(
                session.execute(
                    select(Comment.tier_id, func.count())
                    .where(Comment.deleted_at.is_(None))
                    .group_by(Comment.tier_id)
                ).all()
            )
            rows = session.execute(
                select(Tier.id, Tier.upvote_count, Tier.downvote_count, Tier.comment_count)
                .order_by(Tier.id)
            ).all()

        drift: list[CounterDrift] = []
        for tier_id, up, down, comment_count in rows:
            stored = (up, down, comment_count)
            live = (
                upvotes.get(tier_id, 0),
                downvotes.get(tier_id, 0),
                comments.get(tier_id, 0),
            )
            if stored != live:
                drift.append(CounterDrift(tier_id=tier_id, stored=stored, live=live))
        return drift

    @staticmethod
    def _live_vote_counts(session: Session, vote_type: int) -> dict[int, int]:
        return dict(
            session.execute(
                select(Vote.tier_id, func.count())
                .where(Vote.deleted_at.is_(None), Vote.vote_type == vote_type)
                .group_by(Vote.tier_id)
            ).all()
        )

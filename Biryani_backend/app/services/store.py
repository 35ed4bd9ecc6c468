import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Generic, List, Optional, Tuple, TypeVar

from pydantic import ValidationError
from sqlalchemy import case, func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from models.post import Post, Vote, utcnow
from models.report import Report
from models.user import User
from schemas.post import PostCreate, PostResponse
from schemas.report import ReportAck
from schemas.vote import VoteResponse

T = TypeVar("T")
ANONYMOUS_USER_ID = "anonymous"
logger = logging.getLogger("biryani.store")


class StoreStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"
    FAILED = "failed"


@dataclass
class StoreResult(Generic[T]):
    """Outcome of a store operation.

    ``degraded`` means the caller still got a usable value, but it did not
    come from (or did not reach) the database: the fallback list, or a
    zero-valued placeholder. ``error`` holds the database error in that case.
    """

    status: StoreStatus
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status is StoreStatus.OK

    @property
    def degraded(self) -> bool:
        return self.status is StoreStatus.DEGRADED

    @property
    def failed(self) -> bool:
        return self.status is StoreStatus.FAILED


def _tally_columns():
    true_votes = func.coalesce(func.sum(case((Vote.vote_type == 1, 1), else_=0)), 0).label("true_votes")
    false_votes = func.coalesce(func.sum(case((Vote.vote_type == 0, 1), else_=0)), 0).label("false_votes")
    return true_votes, false_votes


def _to_response(post: Post, user_name: str | None, true_votes: int = 0, false_votes: int = 0) -> PostResponse:
    return PostResponse(
        id=post.id,
        user_id=post.user_id,
        user_name=user_name,
        place_name=post.place_name or "",
        description=post.description,
        lat=post.lat,
        lng=post.lng,
        distribution_time=post.distribution_time,
        created_at=post.created_at,
        true_votes=true_votes or 0,
        false_votes=false_votes or 0,
    )


class PostStore:
    def __init__(self, session_factory, anonymous_name: str = "Anonymous User"):
        self.session_factory = session_factory
        self.anonymous_name = anonymous_name
        # 数据库不可用时的兜底列表，新帖在前；不加锁
        self.fallback_posts: List[PostResponse] = []

    async def list_posts(self) -> StoreResult[List[PostResponse]]:
        true_votes, false_votes = _tally_columns()
        query = (
            select(Post, User.name, true_votes, false_votes)
            .outerjoin(User, User.id == Post.user_id)
            .outerjoin(Vote, Vote.post_id == Post.id)
            .group_by(Post.id, User.name)
            .order_by(Post.created_at.desc())
        )
        try:
            async with self.session_factory() as session:
                rows = (await session.execute(query)).all()
        except SQLAlchemyError as exc:
            logger.warning("STORE_DEGRADED op=list_posts fallback=%d error=%s", len(self.fallback_posts), exc)
            return StoreResult(StoreStatus.DEGRADED, list(self.fallback_posts), exc)
        posts = [_to_response(post, user_name, t, f) for post, user_name, t, f in rows]
        return StoreResult(StoreStatus.OK, posts + self.fallback_posts)

    async def create_post(self, payload: PostCreate) -> StoreResult[PostResponse]:
        post_id = payload.id or uuid.uuid4().hex
        user_id = payload.user_id or ANONYMOUS_USER_ID
        user_name = payload.user_name or self.anonymous_name
        logger.info("POST_CREATE id=%s place=%s", post_id, payload.place_name)
        try:
            async with self.session_factory() as session:
                await session.execute(
                    sqlite_insert(User)
                    .values(id=user_id, name=user_name)
                    .on_conflict_do_nothing(index_elements=[User.id])
                )
                session.add(Post(
                    id=post_id,
                    user_id=user_id,
                    place_name=payload.place_name,
                    description=payload.description,
                    lat=payload.lat,
                    lng=payload.lng,
                    distribution_time=payload.distribution_time,
                ))
                await session.commit()
                row = await session.execute(
                    select(Post, User.name).outerjoin(User, User.id == Post.user_id).where(Post.id == post_id)
                )
                post, stored_name = row.one()
            return StoreResult(StoreStatus.OK, _to_response(post, stored_name))
        except SQLAlchemyError as exc:
            logger.warning("STORE_DEGRADED op=create_post id=%s error=%s", post_id, exc)
            try:
                memory_post = PostResponse(
                    id=post_id,
                    user_id=user_id,
                    user_name=user_name,
                    place_name=payload.place_name,
                    description=payload.description,
                    lat=payload.lat,
                    lng=payload.lng,
                    distribution_time=payload.distribution_time,
                    created_at=utcnow(),
                )
            except ValidationError as mem_exc:
                logger.error("STORE_FAILED op=create_post id=%s error=%s", post_id, mem_exc)
                return StoreResult(StoreStatus.FAILED, error=exc)
            self.fallback_posts.insert(0, memory_post)
            return StoreResult(StoreStatus.DEGRADED, memory_post, exc)

    async def _count_votes(self, session, post_id: str) -> Tuple[int, int]:
        true_votes, false_votes = _tally_columns()
        row = await session.execute(select(true_votes, false_votes).where(Vote.post_id == post_id))
        t, f = row.one()
        return int(t or 0), int(f or 0)

    async def tallies(self, post_id: str) -> StoreResult[VoteResponse]:
        try:
            async with self.session_factory() as session:
                t, f = await self._count_votes(session, post_id)
        except SQLAlchemyError as exc:
            logger.warning("STORE_DEGRADED op=tallies post=%s error=%s", post_id, exc)
            return StoreResult(StoreStatus.DEGRADED, VoteResponse(post_id=post_id), exc)
        return StoreResult(StoreStatus.OK, VoteResponse(post_id=post_id, true_votes=t, false_votes=f))

    async def cast_vote(self, post_id: str, user_id: str, vote_type: int) -> StoreResult[VoteResponse]:
        logger.info("VOTE post=%s user=%s type=%s", post_id, user_id, vote_type)
        stmt = sqlite_insert(Vote).values(post_id=post_id, user_id=user_id, vote_type=vote_type)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Vote.post_id, Vote.user_id],
            set_={"vote_type": stmt.excluded.vote_type},
        )
        try:
            async with self.session_factory() as session:
                await session.execute(stmt)
                await session.commit()
                t, f = await self._count_votes(session, post_id)
        except SQLAlchemyError as exc:
            logger.warning("STORE_DEGRADED op=cast_vote post=%s error=%s", post_id, exc)
            return StoreResult(StoreStatus.DEGRADED, VoteResponse(post_id=post_id), exc)
        return StoreResult(StoreStatus.OK, VoteResponse(post_id=post_id, true_votes=t, false_votes=f))

    async def create_report(self, post_id: str, user_id: str | None, reason: str | None) -> StoreResult[ReportAck]:
        try:
            async with self.session_factory() as session:
                session.add(Report(post_id=post_id, user_id=user_id, reason=reason or ""))
                await session.commit()
        except SQLAlchemyError as exc:
            logger.warning("STORE_DEGRADED op=create_report post=%s error=%s", post_id, exc)
            return StoreResult(StoreStatus.DEGRADED, ReportAck(), exc)
        return StoreResult(StoreStatus.OK, ReportAck())

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError

from ..db.models import Collection, Draft, Entry, User
from ..metrics import RATE_LIMIT_REJECTIONS
from ..schemas.collection import CollectionCreate, CollectionView
from ..schemas.draft import DraftModel, DraftResult, DraftSave, DraftSuccess
from ..schemas.journal import (
    EntryCreate,
    EntryListData,
    EntryListResult,
    EntryListSuccess,
    EntryModel,
    EntryUpdate,
)
from ..schemas.results import Failure
from .errors import (
    CollectionNotFound,
    EntryNotFound,
    InvalidMood,
    JournalError,
    RateLimited,
    UserNotFound,
)
from .images import MoodImageClient
from .moods import Mood, find_mood
from .ratelimit import RateLimiter
from .storage import UNORGANIZED, StorageService

logger = logging.getLogger(__name__)


class JournalService:
    """Entry, collection and draft operations scoped to one external identity.

    Read paths for entries and drafts return tagged results so callers can
    render a degraded view; everything else raises ``JournalError``.
    """

    def __init__(
        self,
        storage: StorageService,
        *,
        images: MoodImageClient,
        limiter: RateLimiter,
    ) -> None:
        self._storage = storage
        self._images = images
        self._limiter = limiter

    # -- helpers ---------------------------------------------------------
    async def _require_user(self, external_id: str) -> User:
        user = await self._storage.get_user_by_external_id(external_id)
        if user is None:
            raise UserNotFound()
        return user

    def _enforce_rate_limit(self, external_id: str, action: str) -> None:
        decision = self._limiter.check(f"write:{external_id}")
        if decision.allowed:
            return
        RATE_LIMIT_REJECTIONS.labels(action=action).inc()
        logger.warning(
            "rate limit exceeded",
            extra={
                "extra_fields": {
                    "code": "RATE_LIMIT_EXCEEDED",
                    "action": action,
                    "details": {
                        "remaining": decision.remaining,
                        "resetInSeconds": decision.reset_in_seconds,
                    },
                }
            },
        )
        raise RateLimited(decision.remaining, decision.reset_in_seconds)

    @staticmethod
    def _resolve_mood(key: str) -> Mood:
        mood = find_mood(key)
        if mood is None:
            raise InvalidMood(key)
        return mood

    async def _check_collection(self, user: User, collection_id: str | None) -> str | None:
        if not collection_id:
            return None
        collection = await self._storage.get_collection(
            user_id=user.id, collection_id=collection_id
        )
        if collection is None:
            raise CollectionNotFound()
        return collection.id

    # -- users -----------------------------------------------------------
    async def provision_user(
        self,
        external_id: str,
        *,
        name: str | None = None,
        email: str | None = None,
        image_url: str | None = None,
    ) -> User:
        return await self._storage.ensure_user(
            external_id,
            name=name,
            email=email,
            image_url=image_url,
        )

    # -- entries ---------------------------------------------------------
    async def create_entry(self, external_id: str, payload: EntryCreate) -> Entry:
        self._enforce_rate_limit(external_id, "entry_create")
        user = await self._require_user(external_id)
        mood = self._resolve_mood(payload.mood)
        collection_id = await self._check_collection(user, payload.collection_id)
        image_url = await self._images.lookup(payload.mood_query or mood.image_query)

        entry = await self._storage.add_entry(
            user_id=user.id,
            title=payload.title,
            content=payload.content,
            mood=mood.id,
            mood_score=mood.score,
            mood_image_url=image_url,
            collection_id=collection_id,
        )
        await self._storage.delete_drafts(user_id=user.id)
        return entry

    async def list_entries(
        self,
        external_id: str,
        *,
        collection_id: str | None = None,
        order: str = "desc",
    ) -> EntryListResult:
        try:
            user = await self._require_user(external_id)
            entries = await self._storage.list_entries(
                user_id=user.id,
                collection_id=collection_id,
                order=order,
            )
        except (JournalError, SQLAlchemyError) as exc:
            logger.error("Error loading entries: %s", exc)
            return Failure(error=str(exc))
        items = [EntryModel.model_validate(e, from_attributes=True) for e in entries]
        return EntryListSuccess(data=EntryListData(entries=items))

    async def get_entry(self, external_id: str, entry_id: str) -> Entry:
        user = await self._require_user(external_id)
        entry = await self._storage.get_entry(user_id=user.id, entry_id=entry_id)
        if entry is None:
            raise EntryNotFound()
        return entry

    async def update_entry(self, external_id: str, entry_id: str, payload: EntryUpdate) -> Entry:
        user = await self._require_user(external_id)
        existing = await self._storage.get_entry(user_id=user.id, entry_id=entry_id)
        if existing is None:
            raise EntryNotFound()
        mood = self._resolve_mood(payload.mood)
        collection_id = await self._check_collection(user, payload.collection_id)

        image_url = existing.mood_image_url
        if existing.mood != mood.id:
            image_url = await self._images.lookup(payload.mood_query or mood.image_query)

        updated = await self._storage.update_entry(
            user_id=user.id,
            entry_id=entry_id,
            title=payload.title,
            content=payload.content,
            mood=mood.id,
            mood_score=mood.score,
            mood_image_url=image_url,
            collection_id=collection_id,
        )
        if updated is None:
            raise EntryNotFound()
        return updated

    async def delete_entry(self, external_id: str, entry_id: str) -> Entry:
        user = await self._require_user(external_id)
        entry = await self._storage.delete_entry(user_id=user.id, entry_id=entry_id)
        if entry is None:
            raise EntryNotFound()
        return entry

    # -- collections -----------------------------------------------------
    async def list_collections(self, external_id: str) -> Sequence[Collection]:
        user = await self._require_user(external_id)
        return await self._storage.list_collections(user_id=user.id)

    async def create_collection(self, external_id: str, payload: CollectionCreate) -> Collection:
        self._enforce_rate_limit(external_id, "collection_create")
        user = await self._require_user(external_id)
        return await self._storage.add_collection(
            user_id=user.id,
            name=payload.name,
            description=payload.description,
        )

    async def delete_collection(self, external_id: str, collection_id: str) -> None:
        user = await self._require_user(external_id)
        deleted = await self._storage.delete_collection(
            user_id=user.id, collection_id=collection_id
        )
        if not deleted:
            raise CollectionNotFound()

    async def collection_view(self, external_id: str, collection_id: str) -> CollectionView:
        user = await self._require_user(external_id)
        if collection_id == UNORGANIZED:
            name = "Unorganized Entries"
            description = None
        else:
            collection = await self._storage.get_collection(
                user_id=user.id, collection_id=collection_id
            )
            if collection is None:
                raise CollectionNotFound()
            name = collection.name
            description = collection.description
        entries = await self._storage.list_entries(user_id=user.id, collection_id=collection_id)
        return CollectionView(
            id=collection_id,
            name=name,
            description=description,
            entries=[EntryModel.model_validate(e, from_attributes=True) for e in entries],
        )

    # -- drafts ----------------------------------------------------------
    async def get_draft(self, external_id: str) -> DraftResult:
        try:
            user = await self._require_user(external_id)
            draft = await self._storage.get_draft(user_id=user.id)
        except (JournalError, SQLAlchemyError) as exc:
            logger.error("Error loading draft: %s", exc)
            return Failure(error=str(exc))
        return DraftSuccess(data=_draft_model(draft))

    async def save_draft(self, external_id: str, payload: DraftSave) -> DraftResult:
        try:
            user = await self._require_user(external_id)
            draft = await self._storage.save_draft(
                user_id=user.id,
                title=payload.title,
                content=payload.content,
                mood=payload.mood,
            )
        except (JournalError, SQLAlchemyError) as exc:
            logger.error("Error saving draft: %s", exc)
            return Failure(error=str(exc))
        return DraftSuccess(data=_draft_model(draft))


def _draft_model(draft: Draft | None) -> DraftModel | None:
    if draft is None:
        return None
    return DraftModel.model_validate(draft, from_attributes=True)


__all__ = ["JournalService"]

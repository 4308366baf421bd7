from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import delete, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db.models import Collection, Draft, Entry, SettingEntry, User
from .errors import CollectionExists

UNORGANIZED = "unorganized"


class StorageService:
    """Persist users, entries, collections and drafts."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    async def healthcheck(self) -> None:
        async with self._session_factory() as session:
            await session.execute(text("SELECT 1"))

    async def get_setting(self, key: str) -> str | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SettingEntry).where(SettingEntry.key == key)
            )
            entry = result.scalar_one_or_none()
            return entry.value if entry else None

    # -- user management -------------------------------------------------
    async def get_user_by_external_id(self, external_id: str) -> User | None:
        async with self._session_factory() as session:
            return await session.scalar(select(User).where(User.external_id == external_id))

    async def ensure_user(
        self,
        external_id: str,
        *,
        name: str | None = None,
        email: str | None = None,
        image_url: str | None = None,
    ) -> User:
        async with self._session_factory() as session:
            user = await session.scalar(select(User).where(User.external_id == external_id))
            if user:
                return user
            user = User(external_id=external_id, name=name, email=email, image_url=image_url)
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    # -- entries ---------------------------------------------------------
    @staticmethod
    async def _load_entry(session: AsyncSession, entry_id: str) -> Entry | None:
        return await session.scalar(
            select(Entry)
            .where(Entry.id == entry_id)
            .execution_options(populate_existing=True)
        )

    async def add_entry(
        self,
        *,
        user_id: str,
        title: str,
        content: str,
        mood: str,
        mood_score: int,
        mood_image_url: str | None,
        collection_id: str | None,
    ) -> Entry:
        async with self._session_factory() as session:
            entry = Entry(
                user_id=user_id,
                title=title,
                content=content,
                mood=mood,
                mood_score=mood_score,
                mood_image_url=mood_image_url,
                collection_id=collection_id,
            )
            session.add(entry)
            await session.commit()
            loaded = await self._load_entry(session, entry.id)
            return loaded or entry

    async def list_entries(
        self,
        *,
        user_id: str,
        collection_id: str | None = None,
        order: str = "desc",
    ) -> Sequence[Entry]:
        query = select(Entry).where(Entry.user_id == user_id)
        if collection_id == UNORGANIZED:
            query = query.where(Entry.collection_id.is_(None))
        elif collection_id:
            query = query.where(Entry.collection_id == collection_id)
        if order == "asc":
            query = query.order_by(Entry.created_at.asc())
        else:
            query = query.order_by(Entry.created_at.desc())
        async with self._session_factory() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def entries_since(self, *, user_id: str, since: datetime) -> Sequence[Entry]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Entry)
                .where(Entry.user_id == user_id)
                .where(Entry.created_at >= since)
                .order_by(Entry.created_at.asc())
            )
            return list(result.scalars().all())

    async def get_entry(self, *, user_id: str, entry_id: str) -> Entry | None:
        async with self._session_factory() as session:
            return await session.scalar(
                select(Entry).where(Entry.id == entry_id, Entry.user_id == user_id)
            )

    async def update_entry(
        self,
        *,
        user_id: str,
        entry_id: str,
        title: str,
        content: str,
        mood: str,
        mood_score: int,
        mood_image_url: str | None,
        collection_id: str | None,
    ) -> Entry | None:
        async with self._session_factory() as session:
            entry = await session.scalar(
                select(Entry).where(Entry.id == entry_id, Entry.user_id == user_id)
            )
            if entry is None:
                return None
            entry.title = title
            entry.content = content
            entry.mood = mood
            entry.mood_score = mood_score
            entry.mood_image_url = mood_image_url
            entry.collection_id = collection_id
            entry.updated_at = datetime.utcnow()
            await session.commit()
            return await self._load_entry(session, entry_id)

    async def delete_entry(self, *, user_id: str, entry_id: str) -> Entry | None:
        async with self._session_factory() as session:
            entry = await session.scalar(
                select(Entry).where(Entry.id == entry_id, Entry.user_id == user_id)
            )
            if entry is None:
                return None
            await session.delete(entry)
            await session.commit()
            return entry

    # -- collections -----------------------------------------------------
    async def list_collections(self, *, user_id: str) -> Sequence[Collection]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Collection)
                .where(Collection.user_id == user_id)
                .order_by(Collection.created_at.desc())
            )
            return list(result.scalars().all())

    async def add_collection(
        self,
        *,
        user_id: str,
        name: str,
        description: str | None,
    ) -> Collection:
        async with self._session_factory() as session:
            collection = Collection(user_id=user_id, name=name, description=description)
            session.add(collection)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise CollectionExists(name) from exc
            await session.refresh(collection)
            return collection

    async def get_collection(self, *, user_id: str, collection_id: str) -> Collection | None:
        async with self._session_factory() as session:
            return await session.scalar(
                select(Collection).where(
                    Collection.id == collection_id,
                    Collection.user_id == user_id,
                )
            )

    async def delete_collection(self, *, user_id: str, collection_id: str) -> bool:
        async with self._session_factory() as session:
            collection = await session.scalar(
                select(Collection).where(
                    Collection.id == collection_id,
                    Collection.user_id == user_id,
                )
            )
            if collection is None:
                return False
            await session.delete(collection)
            await session.commit()
            return True

    # -- drafts ----------------------------------------------------------
    async def get_draft(self, *, user_id: str) -> Draft | None:
        async with self._session_factory() as session:
            return await session.scalar(select(Draft).where(Draft.user_id == user_id))

    async def save_draft(
        self,
        *,
        user_id: str,
        title: str | None,
        content: str | None,
        mood: str | None,
    ) -> Draft:
        async with self._session_factory() as session:
            draft = await session.scalar(select(Draft).where(Draft.user_id == user_id))
            if draft is None:
                draft = Draft(user_id=user_id, title=title, content=content, mood=mood)
                session.add(draft)
            else:
                draft.title = title
                draft.content = content
                draft.mood = mood
                draft.updated_at = datetime.utcnow()
            await session.commit()
            await session.refresh(draft)
            return draft

    async def delete_drafts(self, *, user_id: str) -> int:
        async with self._session_factory() as session:
            result = await session.execute(delete(Draft).where(Draft.user_id == user_id))
            await session.commit()
            return int(result.rowcount or 0)


__all__ = ["StorageService", "UNORGANIZED"]

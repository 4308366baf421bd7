from __future__ import annotations

import logging

import pytest

from reflect.app.schemas.collection import CollectionCreate
from reflect.app.schemas.draft import DraftSave, DraftSuccess
from reflect.app.schemas.journal import EntryCreate, EntryListSuccess, EntryUpdate
from reflect.app.schemas.results import Failure
from reflect.app.services.errors import (
    CollectionNotFound,
    EntryNotFound,
    InvalidMood,
    RateLimited,
    UserNotFound,
)
from reflect.app.services.journal import JournalService
from reflect.app.services.ratelimit import RateLimiter
from reflect.app.services.storage import StorageService


class _StubImages:
    def __init__(self, url: str | None = "https://img.example/mood.jpg") -> None:
        self.url = url
        self.queries: list[str | None] = []

    @property
    def available(self) -> bool:
        return self.url is not None

    async def lookup(self, query: str | None) -> str | None:
        self.queries.append(query)
        return self.url


def _service(session_factory, *, limit: int = 10, images: _StubImages | None = None):
    storage = StorageService(session_factory)
    service = JournalService(
        storage,
        images=images or _StubImages(),
        limiter=RateLimiter(limit, 3600),
    )
    return service, storage


def _payload(**overrides) -> EntryCreate:
    values = {"title": "Today", "content": "It was fine", "mood": "HAPPY"}
    values.update(overrides)
    return EntryCreate(**values)


@pytest.mark.anyio
async def test_create_entry_assigns_mood_and_clears_draft(temp_session_factory) -> None:
    images = _StubImages()
    service, storage = _service(temp_session_factory, images=images)
    user = await service.provision_user("auth0|1")
    await service.save_draft("auth0|1", DraftSave(title="wip", content="half"))

    entry = await service.create_entry("auth0|1", _payload(mood="grateful"))

    assert entry.mood == "grateful"
    assert entry.mood_score == 9
    assert entry.mood_image_url == "https://img.example/mood.jpg"
    assert images.queries == ["rose gratitude"]
    assert await storage.get_draft(user_id=user.id) is None


@pytest.mark.anyio
async def test_create_entry_prefers_custom_image_query(temp_session_factory) -> None:
    images = _StubImages(url=None)
    service, _ = _service(temp_session_factory, images=images)
    await service.provision_user("auth0|1")

    entry = await service.create_entry("auth0|1", _payload(mood_query="mountain lake"))

    assert images.queries == ["mountain lake"]
    assert entry.mood_image_url is None


@pytest.mark.anyio
async def test_create_entry_rejects_unknown_mood(temp_session_factory) -> None:
    service, storage = _service(temp_session_factory)
    user = await service.provision_user("auth0|1")

    with pytest.raises(InvalidMood):
        await service.create_entry("auth0|1", _payload(mood="ECSTATIC"))

    assert await storage.list_entries(user_id=user.id) == []


@pytest.mark.anyio
async def test_create_entry_requires_provisioned_user(temp_session_factory) -> None:
    service, _ = _service(temp_session_factory)

    with pytest.raises(UserNotFound):
        await service.create_entry("auth0|ghost", _payload())


@pytest.mark.anyio
async def test_create_entry_rejects_foreign_collection(temp_session_factory) -> None:
    service, _ = _service(temp_session_factory)
    await service.provision_user("auth0|1")
    await service.provision_user("auth0|2")
    foreign = await service.create_collection("auth0|2", CollectionCreate(name="Private"))

    with pytest.raises(CollectionNotFound):
        await service.create_entry("auth0|1", _payload(collection_id=foreign.id))


@pytest.mark.anyio
async def test_write_rate_limit(temp_session_factory, caplog: pytest.LogCaptureFixture) -> None:
    service, _ = _service(temp_session_factory, limit=2)
    await service.provision_user("auth0|1")
    await service.provision_user("auth0|2")

    await service.create_entry("auth0|1", _payload())
    await service.create_collection("auth0|1", CollectionCreate(name="One"))

    with caplog.at_level(logging.WARNING):
        with pytest.raises(RateLimited) as excinfo:
            await service.create_entry("auth0|1", _payload())

    assert str(excinfo.value) == "Too many requests. Please try again later."
    assert excinfo.value.status_code == 429
    assert any(
        getattr(record, "extra_fields", {}).get("code") == "RATE_LIMIT_EXCEEDED"
        for record in caplog.records
    )

    # Separate callers have separate budgets.
    await service.create_entry("auth0|2", _payload())


@pytest.mark.anyio
async def test_update_entry_refreshes_image_only_on_mood_change(temp_session_factory) -> None:
    images = _StubImages(url="https://img.example/first.jpg")
    service, _ = _service(temp_session_factory, images=images)
    await service.provision_user("auth0|1")
    entry = await service.create_entry("auth0|1", _payload(mood="calm"))

    images.url = "https://img.example/second.jpg"
    same_mood = await service.update_entry(
        "auth0|1", entry.id, EntryUpdate(title="Edited", content="More", mood="CALM")
    )
    assert same_mood.title == "Edited"
    assert same_mood.mood_image_url == "https://img.example/first.jpg"
    assert len(images.queries) == 1

    new_mood = await service.update_entry(
        "auth0|1", entry.id, EntryUpdate(title="Edited", content="More", mood="anxious")
    )
    assert new_mood.mood == "anxious"
    assert new_mood.mood_score == 3
    assert new_mood.mood_image_url == "https://img.example/second.jpg"
    assert images.queries[-1] == "purple storm"


@pytest.mark.anyio
async def test_entry_access_is_owner_only(temp_session_factory) -> None:
    service, _ = _service(temp_session_factory)
    await service.provision_user("auth0|1")
    await service.provision_user("auth0|2")
    entry = await service.create_entry("auth0|1", _payload())

    with pytest.raises(EntryNotFound):
        await service.get_entry("auth0|2", entry.id)
    with pytest.raises(EntryNotFound):
        await service.delete_entry("auth0|2", entry.id)

    deleted = await service.delete_entry("auth0|1", entry.id)
    assert deleted.id == entry.id
    with pytest.raises(EntryNotFound):
        await service.get_entry("auth0|1", entry.id)


@pytest.mark.anyio
async def test_list_entries_returns_tagged_results(temp_session_factory) -> None:
    service, _ = _service(temp_session_factory)
    await service.provision_user("auth0|1")
    collection = await service.create_collection("auth0|1", CollectionCreate(name="Work"))
    await service.create_entry("auth0|1", _payload(title="filed", collection_id=collection.id))
    await service.create_entry("auth0|1", _payload(title="loose"))

    result = await service.list_entries("auth0|1", collection_id="unorganized")
    assert isinstance(result, EntryListSuccess)
    assert [entry.title for entry in result.data.entries] == ["loose"]

    filed = await service.list_entries("auth0|1", collection_id=collection.id)
    assert isinstance(filed, EntryListSuccess)
    assert filed.data.entries[0].collection.name == "Work"

    missing = await service.list_entries("auth0|ghost")
    assert isinstance(missing, Failure)
    assert missing.error == "User not found"


@pytest.mark.anyio
async def test_collection_view_and_delete(temp_session_factory) -> None:
    service, _ = _service(temp_session_factory)
    await service.provision_user("auth0|1")
    collection = await service.create_collection(
        "auth0|1", CollectionCreate(name="Travel", description="Trips")
    )
    await service.create_entry("auth0|1", _payload(collection_id=collection.id))
    await service.create_entry("auth0|1", _payload())

    view = await service.collection_view("auth0|1", collection.id)
    assert view.name == "Travel"
    assert view.description == "Trips"
    assert len(view.entries) == 1

    unorganized = await service.collection_view("auth0|1", "unorganized")
    assert unorganized.name == "Unorganized Entries"
    assert len(unorganized.entries) == 1

    await service.delete_collection("auth0|1", collection.id)
    assert await service.list_collections("auth0|1") == []
    with pytest.raises(CollectionNotFound):
        await service.collection_view("auth0|1", collection.id)
    with pytest.raises(CollectionNotFound):
        await service.delete_collection("auth0|1", collection.id)


@pytest.mark.anyio
async def test_drafts_are_tagged(temp_session_factory) -> None:
    service, _ = _service(temp_session_factory)
    await service.provision_user("auth0|1")

    empty = await service.get_draft("auth0|1")
    assert isinstance(empty, DraftSuccess)
    assert empty.data is None

    saved = await service.save_draft("auth0|1", DraftSave(title="t", mood="sad"))
    assert isinstance(saved, DraftSuccess)
    assert saved.data.title == "t"

    loaded = await service.get_draft("auth0|1")
    assert loaded.data.id == saved.data.id

    missing = await service.save_draft("auth0|ghost", DraftSave(title="t"))
    assert isinstance(missing, Failure)

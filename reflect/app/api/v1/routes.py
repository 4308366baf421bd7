from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path, Request, status

from ...core.security import resolve_identity
from ...insights import MoodAnalyticsEngine
from ...metrics import USER_API_COUNTER
from ...schemas.analytics import AnalyticsQuery, AnalyticsResult
from ...schemas.collection import (
    CollectionCreate,
    CollectionDeleteResponse,
    CollectionListResponse,
    CollectionModel,
    CollectionView,
)
from ...schemas.draft import DraftResult, DraftSave
from ...schemas.journal import (
    EntryCreate,
    EntryListQuery,
    EntryListResult,
    EntryModel,
    EntryUpdate,
)
from ...schemas.mood import MoodListResponse, MoodModel
from ...schemas.user import UserModel, UserSync
from ...services.errors import JournalError
from ...services.journal import JournalService
from ...services.moods import MOODS

router = APIRouter(prefix="/api/v1", tags=["journal"])


def get_journal_service(request: Request) -> JournalService:
    return request.app.state.journal_service


def get_analytics_engine(request: Request) -> MoodAnalyticsEngine:
    return request.app.state.analytics_engine


def _http_error(exc: JournalError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=str(exc))


@router.get("/moods", response_model=MoodListResponse)
async def list_moods() -> MoodListResponse:
    items = [MoodModel.model_validate(mood.as_dict()) for mood in MOODS.values()]
    return MoodListResponse(items=items)


@router.post("/me", response_model=UserModel)
async def sync_profile(
    payload: UserSync,
    journal: JournalService = Depends(get_journal_service),
    external_id: str = Depends(resolve_identity),
) -> UserModel:
    user = await journal.provision_user(
        external_id,
        name=payload.name,
        email=payload.email,
        image_url=payload.image_url,
    )
    USER_API_COUNTER.labels(endpoint="me_post").inc()
    return UserModel.model_validate(user, from_attributes=True)


@router.get("/analytics", response_model=AnalyticsResult)
async def analytics(
    query: AnalyticsQuery = Depends(),
    engine: MoodAnalyticsEngine = Depends(get_analytics_engine),
    external_id: str = Depends(resolve_identity),
) -> AnalyticsResult:
    result = await engine.compute(external_id, query.period)
    USER_API_COUNTER.labels(endpoint="analytics_get").inc()
    return result


# -- entries -------------------------------------------------------------
@router.post("/entries", response_model=EntryModel, status_code=status.HTTP_201_CREATED)
async def create_entry(
    payload: EntryCreate,
    journal: JournalService = Depends(get_journal_service),
    external_id: str = Depends(resolve_identity),
) -> EntryModel:
    try:
        entry = await journal.create_entry(external_id, payload)
    except JournalError as exc:
        raise _http_error(exc) from exc
    USER_API_COUNTER.labels(endpoint="entries_post").inc()
    return EntryModel.model_validate(entry, from_attributes=True)


@router.get("/entries", response_model=EntryListResult)
async def list_entries(
    query: EntryListQuery = Depends(),
    journal: JournalService = Depends(get_journal_service),
    external_id: str = Depends(resolve_identity),
) -> EntryListResult:
    result = await journal.list_entries(
        external_id,
        collection_id=query.collection_id,
        order=query.order,
    )
    USER_API_COUNTER.labels(endpoint="entries_get").inc()
    return result


@router.get("/entries/{entry_id}", response_model=EntryModel)
async def get_entry(
    entry_id: str = Path(..., min_length=1),
    journal: JournalService = Depends(get_journal_service),
    external_id: str = Depends(resolve_identity),
) -> EntryModel:
    try:
        entry = await journal.get_entry(external_id, entry_id)
    except JournalError as exc:
        raise _http_error(exc) from exc
    USER_API_COUNTER.labels(endpoint="entry_get").inc()
    return EntryModel.model_validate(entry, from_attributes=True)


@router.put("/entries/{entry_id}", response_model=EntryModel)
async def update_entry(
    payload: EntryUpdate,
    entry_id: str = Path(..., min_length=1),
    journal: JournalService = Depends(get_journal_service),
    external_id: str = Depends(resolve_identity),
) -> EntryModel:
    try:
        entry = await journal.update_entry(external_id, entry_id, payload)
    except JournalError as exc:
        raise _http_error(exc) from exc
    USER_API_COUNTER.labels(endpoint="entry_put").inc()
    return EntryModel.model_validate(entry, from_attributes=True)


@router.delete("/entries/{entry_id}", response_model=EntryModel)
async def delete_entry(
    entry_id: str = Path(..., min_length=1),
    journal: JournalService = Depends(get_journal_service),
    external_id: str = Depends(resolve_identity),
) -> EntryModel:
    try:
        entry = await journal.delete_entry(external_id, entry_id)
    except JournalError as exc:
        raise _http_error(exc) from exc
    USER_API_COUNTER.labels(endpoint="entry_delete").inc()
    return EntryModel.model_validate(entry, from_attributes=True)


# -- collections ---------------------------------------------------------
@router.get("/collections", response_model=CollectionListResponse)
async def list_collections(
    journal: JournalService = Depends(get_journal_service),
    external_id: str = Depends(resolve_identity),
) -> CollectionListResponse:
    try:
        collections = await journal.list_collections(external_id)
    except JournalError as exc:
        raise _http_error(exc) from exc
    items = [CollectionModel.model_validate(c, from_attributes=True) for c in collections]
    USER_API_COUNTER.labels(endpoint="collections_get").inc()
    return CollectionListResponse(items=items)


@router.post(
    "/collections",
    response_model=CollectionModel,
    status_code=status.HTTP_201_CREATED,
)
async def create_collection(
    payload: CollectionCreate,
    journal: JournalService = Depends(get_journal_service),
    external_id: str = Depends(resolve_identity),
) -> CollectionModel:
    try:
        collection = await journal.create_collection(external_id, payload)
    except JournalError as exc:
        raise _http_error(exc) from exc
    USER_API_COUNTER.labels(endpoint="collections_post").inc()
    return CollectionModel.model_validate(collection, from_attributes=True)


@router.delete("/collections/{collection_id}", response_model=CollectionDeleteResponse)
async def delete_collection(
    collection_id: str = Path(..., min_length=1),
    journal: JournalService = Depends(get_journal_service),
    external_id: str = Depends(resolve_identity),
) -> CollectionDeleteResponse:
    try:
        await journal.delete_collection(external_id, collection_id)
    except JournalError as exc:
        raise _http_error(exc) from exc
    USER_API_COUNTER.labels(endpoint="collection_delete").inc()
    return CollectionDeleteResponse()


@router.get("/collections/{collection_id}/entries", response_model=CollectionView)
async def collection_entries(
    collection_id: str = Path(..., min_length=1),
    journal: JournalService = Depends(get_journal_service),
    external_id: str = Depends(resolve_identity),
) -> CollectionView:
    try:
        view = await journal.collection_view(external_id, collection_id)
    except JournalError as exc:
        raise _http_error(exc) from exc
    USER_API_COUNTER.labels(endpoint="collection_entries_get").inc()
    return view


# -- drafts --------------------------------------------------------------
@router.get("/draft", response_model=DraftResult)
async def get_draft(
    journal: JournalService = Depends(get_journal_service),
    external_id: str = Depends(resolve_identity),
) -> DraftResult:
    result = await journal.get_draft(external_id)
    USER_API_COUNTER.labels(endpoint="draft_get").inc()
    return result


@router.put("/draft", response_model=DraftResult)
async def save_draft(
    payload: DraftSave,
    journal: JournalService = Depends(get_journal_service),
    external_id: str = Depends(resolve_identity),
) -> DraftResult:
    result = await journal.save_draft(external_id, payload)
    USER_API_COUNTER.labels(endpoint="draft_put").inc()
    return result

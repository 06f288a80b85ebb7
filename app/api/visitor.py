"""Per-visitor compare, recently-viewed, search, saved-search and alert lists keyed by X-Visitor-Id"""
import logging
from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.db.session import get_db
from app.models.vehicle import Vehicle
from app.schemas.visitor import (
    CompareAdd,
    ViewedIn,
    SavedSearchIn,
    SavedSearchUpdate,
    SearchPreferencesUpdate,
    SearchHistoryIn,
    ClientAlertIn,
    ClientAlertUpdate,
)
from app.core.auth_utils import check_not_found
from app.core.config import settings
from app.core.enums import VehicleStatus
from app.core.errors import APIError
from app.core.response_builders import success_response
from app.stores.base import Storage, MemoryStorage, JSONFileStorage, VehicleSnapshot
from app.stores.alerts import AlertStore, MAX_ALERTS
from app.stores.compare import CompareStore
from app.stores.recently_viewed import RecentlyViewedStore
from app.stores.saved_search import SavedSearchStore
from app.stores.search import SearchStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/visitor", tags=["visitor"])

VISITOR_ID_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"

_storage: Storage = JSONFileStorage(settings.VISITOR_STORE_DIR) if settings.VISITOR_STORE_DIR else MemoryStorage()


def get_visitor_storage() -> Storage:
    return _storage


def _prefix(visitor_id: str) -> str:
    return f"visitor:{visitor_id}:"


def compare_store(
    visitor_id: str = Header(..., alias="X-Visitor-Id", pattern=VISITOR_ID_PATTERN),
    storage: Storage = Depends(get_visitor_storage),
) -> CompareStore:
    return CompareStore(storage, key_prefix=_prefix(visitor_id))


def recently_viewed_store(
    visitor_id: str = Header(..., alias="X-Visitor-Id", pattern=VISITOR_ID_PATTERN),
    storage: Storage = Depends(get_visitor_storage),
) -> RecentlyViewedStore:
    return RecentlyViewedStore(storage, key_prefix=_prefix(visitor_id))


def saved_search_store(
    visitor_id: str = Header(..., alias="X-Visitor-Id", pattern=VISITOR_ID_PATTERN),
    storage: Storage = Depends(get_visitor_storage),
) -> SavedSearchStore:
    return SavedSearchStore(storage, key_prefix=_prefix(visitor_id))


def search_store(
    visitor_id: str = Header(..., alias="X-Visitor-Id", pattern=VISITOR_ID_PATTERN),
    storage: Storage = Depends(get_visitor_storage),
) -> SearchStore:
    return SearchStore(storage, key_prefix=_prefix(visitor_id))


def alert_store(
    visitor_id: str = Header(..., alias="X-Visitor-Id", pattern=VISITOR_ID_PATTERN),
    storage: Storage = Depends(get_visitor_storage),
) -> AlertStore:
    return AlertStore(storage, key_prefix=_prefix(visitor_id))


async def _vehicle_snapshot(db: AsyncSession, vehicle_id: int) -> VehicleSnapshot:
    res = await db.execute(
        select(Vehicle).where(Vehicle.id == vehicle_id, Vehicle.status == VehicleStatus.AVAILABLE)
    )
    vehicle = res.scalars().first()
    check_not_found(vehicle, "Vehicle", vehicle_id)
    return VehicleSnapshot.from_vehicle(vehicle)


def _compare_data(store: CompareStore) -> dict:
    return {
        **store.snapshot(),
        "can_add_more": store.can_add_more(),
        "url": store.comparison_url(settings.SITE_URL),
    }


@router.get("/compare")
async def get_compare(store: CompareStore = Depends(compare_store)):
    return success_response(_compare_data(store))


@router.post("/compare")
async def add_to_compare(
    payload: CompareAdd,
    store: CompareStore = Depends(compare_store),
    db: AsyncSession = Depends(get_db),
):
    snapshot = await _vehicle_snapshot(db, payload.vehicle_id)
    slot = store.add(snapshot)
    return success_response({"slot": slot, **_compare_data(store)})


@router.get("/compare/export")
async def export_compare(store: CompareStore = Depends(compare_store)):
    exported = store.export(settings.SITE_URL)
    if exported is None:
        raise APIError(status_code=404, message="No vehicles to export", code="COMPARISON_EMPTY")
    return success_response(exported)


@router.delete("/compare/{vehicle_id}")
async def remove_from_compare(vehicle_id: int, store: CompareStore = Depends(compare_store)):
    check_not_found(store.remove(vehicle_id), "Comparison vehicle", vehicle_id)
    return success_response(_compare_data(store))


@router.delete("/compare")
async def clear_compare(store: CompareStore = Depends(compare_store)):
    store.clear()
    return success_response(_compare_data(store))


@router.get("/recently-viewed")
async def get_recently_viewed(store: RecentlyViewedStore = Depends(recently_viewed_store)):
    store.update_analytics()
    return success_response({
        **store.snapshot(),
        "most_viewed": store.most_viewed(),
    })


@router.post("/recently-viewed")
async def add_recently_viewed(
    payload: ViewedIn,
    store: RecentlyViewedStore = Depends(recently_viewed_store),
    db: AsyncSession = Depends(get_db),
):
    snapshot = await _vehicle_snapshot(db, payload.vehicle_id)
    entry = store.add(snapshot, source=payload.source)
    return success_response(entry)


@router.delete("/recently-viewed/{vehicle_id}")
async def remove_recently_viewed(vehicle_id: int, store: RecentlyViewedStore = Depends(recently_viewed_store)):
    check_not_found(store.remove(vehicle_id), "Viewed vehicle", vehicle_id)
    return success_response({"vehicle_id": vehicle_id})


@router.delete("/recently-viewed")
async def clear_recently_viewed(store: RecentlyViewedStore = Depends(recently_viewed_store)):
    store.clear()
    return success_response(store.snapshot())


@router.get("/saved-searches")
async def list_saved_searches(store: SavedSearchStore = Depends(saved_search_store)):
    return success_response({
        "searches": store.state.searches,
        "quick_access": store.quick_access(),
        "can_save_more": store.can_save_more(),
    })


@router.post("/saved-searches")
async def save_search(payload: SavedSearchIn, store: SavedSearchStore = Depends(saved_search_store)):
    search = store.save(**payload.model_dump())
    if search is None:
        raise APIError(
            status_code=409,
            message=f"Maximum saved searches ({store.max_items}) reached",
            code="SAVED_SEARCH_LIMIT",
        )
    return success_response(search, "Search saved")


@router.patch("/saved-searches/{search_id}")
async def update_saved_search(
    search_id: str,
    update: SavedSearchUpdate,
    store: SavedSearchStore = Depends(saved_search_store),
):
    search = store.update(search_id, **update.model_dump(exclude_unset=True, exclude_none=True))
    check_not_found(search, "Saved search", search_id)
    return success_response(search)


@router.post("/saved-searches/{search_id}/use")
async def use_saved_search(search_id: str, store: SavedSearchStore = Depends(saved_search_store)):
    search = store.use(search_id)
    check_not_found(search, "Saved search", search_id)
    return success_response(search)


@router.delete("/saved-searches/{search_id}")
async def delete_saved_search(search_id: str, store: SavedSearchStore = Depends(saved_search_store)):
    check_not_found(store.remove(search_id), "Saved search", search_id)
    return success_response({"id": search_id})


@router.get("/search")
async def get_search_preferences(store: SearchStore = Depends(search_store)):
    return success_response(store.snapshot())


@router.put("/search")
async def update_search_preferences(
    update: SearchPreferencesUpdate,
    store: SearchStore = Depends(search_store),
):
    if update.filters is not None:
        store.set_filters(**update.filters)
    if update.sort_by is not None:
        store.set_sort_by(update.sort_by)
    return success_response(store.snapshot())


@router.delete("/search/filters/{key}")
async def remove_search_filter(key: str, store: SearchStore = Depends(search_store)):
    store.remove_filter(key)
    return success_response(store.snapshot())


@router.delete("/search/filters")
async def clear_search_filters(store: SearchStore = Depends(search_store)):
    store.clear_filters()
    return success_response(store.snapshot())


@router.post("/search/history")
async def add_search_history(payload: SearchHistoryIn, store: SearchStore = Depends(search_store)):
    store.add_to_history(payload.query)
    return success_response({"history": store.state.history})


@router.delete("/search/history")
async def clear_search_history(store: SearchStore = Depends(search_store)):
    store.clear_history()
    return success_response({"history": []})


@router.post("/search/reset")
async def reset_search(store: SearchStore = Depends(search_store)):
    store.reset()
    return success_response(store.snapshot())


def _alert_data(store: AlertStore) -> dict:
    return {
        "alerts": store.state.alerts,
        "active_count": len(store.active()),
        "can_create_more": store.can_create_more(),
    }


@router.get("/alerts")
async def list_visitor_alerts(store: AlertStore = Depends(alert_store)):
    return success_response(_alert_data(store))


@router.post("/alerts")
async def create_visitor_alert(payload: ClientAlertIn, store: AlertStore = Depends(alert_store)):
    alert = store.add(**payload.model_dump())
    if alert is None:
        raise APIError(
            status_code=409,
            message=f"Maximum number of alerts ({MAX_ALERTS}) reached",
            code="ALERT_LIMIT",
        )
    return success_response(alert, "Alert created")


@router.patch("/alerts/{alert_id}")
async def update_visitor_alert(
    alert_id: str,
    update: ClientAlertUpdate,
    store: AlertStore = Depends(alert_store),
):
    alert = store.update(alert_id, **update.model_dump(exclude_unset=True, exclude_none=True))
    check_not_found(alert, "Alert", alert_id)
    return success_response(alert)


@router.post("/alerts/{alert_id}/toggle")
async def toggle_visitor_alert(alert_id: str, store: AlertStore = Depends(alert_store)):
    alert = store.toggle(alert_id)
    check_not_found(alert, "Alert", alert_id)
    return success_response(alert)


@router.delete("/alerts/{alert_id}")
async def delete_visitor_alert(alert_id: str, store: AlertStore = Depends(alert_store)):
    check_not_found(store.remove(alert_id), "Alert", alert_id)
    return success_response({"id": alert_id})


@router.delete("/alerts")
async def clear_visitor_alerts(store: AlertStore = Depends(alert_store)):
    store.clear()
    return success_response(_alert_data(store))

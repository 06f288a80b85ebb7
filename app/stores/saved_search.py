import json
import logging
import secrets
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel
from app.stores.base import PersistedStore

logger = logging.getLogger(__name__)

MAX_SAVED_SEARCHES = 20
MAX_QUICK_ACCESS = 5


class SavedSearch(BaseModel):
    id: str
    name: str
    query: Optional[str] = None
    filters: dict = {}
    sort_by: Optional[str] = None
    created_at: datetime
    last_used_at: Optional[datetime] = None
    use_count: int = 0
    notify_on_new: bool = False
    tags: List[str] = []


class SavedSearchState(BaseModel):
    searches: List[SavedSearch] = []
    quick_access_ids: List[str] = []
    is_managing: bool = False
    selected_id: Optional[str] = None


class SavedSearchStore(PersistedStore[SavedSearchState]):
    """Newest first, capped at 20. At the cap a save is refused with a warning."""

    name = "saved-searches"
    state_class = SavedSearchState
    persisted = {"searches", "quick_access_ids"}

    def __init__(self, *args, max_items: int = MAX_SAVED_SEARCHES, **kwargs):
        self.max_items = max_items
        super().__init__(*args, **kwargs)

    def save(
        self,
        name: str,
        filters: Optional[dict] = None,
        query: Optional[str] = None,
        sort_by: Optional[str] = None,
        notify_on_new: bool = False,
        tags: Optional[List[str]] = None,
    ) -> Optional[SavedSearch]:
        if not self.can_save_more():
            logger.warning(f"Maximum saved searches ({self.max_items}) reached")
            return None

        search = SavedSearch(
            id=f"search-{secrets.token_hex(6)}",
            name=name,
            query=query,
            filters=filters or {},
            sort_by=sort_by,
            created_at=self.clock(),
            notify_on_new=notify_on_new,
            tags=tags or [],
        )
        self.state.searches.insert(0, search)
        self.persist()
        return search

    def _replace(self, search_id: str, **changes) -> Optional[SavedSearch]:
        for index, search in enumerate(self.state.searches):
            if search.id == search_id:
                updated = search.model_copy(update=changes)
                self.state.searches[index] = updated
                self.persist()
                return updated
        return None

    def update(self, search_id: str, **changes) -> Optional[SavedSearch]:
        allowed = {k: v for k, v in changes.items() if k in SavedSearch.model_fields and k != "id"}
        return self._replace(search_id, **allowed)

    def rename(self, search_id: str, name: str) -> Optional[SavedSearch]:
        return self._replace(search_id, name=name)

    def remove(self, search_id: str) -> bool:
        before = len(self.state.searches)
        self.state.searches = [s for s in self.state.searches if s.id != search_id]
        self.state.quick_access_ids = [i for i in self.state.quick_access_ids if i != search_id]
        if self.state.selected_id == search_id:
            self.state.selected_id = None
        self.persist()
        return len(self.state.searches) < before

    def clear(self) -> None:
        self.state.searches = []
        self.state.quick_access_ids = []
        self.state.selected_id = None
        self.persist()

    def use(self, search_id: str) -> Optional[SavedSearch]:
        search = self.get(search_id)
        if search is None:
            return None
        return self._replace(search_id, last_used_at=self.clock(), use_count=search.use_count + 1)

    def toggle_notifications(self, search_id: str) -> Optional[SavedSearch]:
        search = self.get(search_id)
        if search is None:
            return None
        return self._replace(search_id, notify_on_new=not search.notify_on_new)

    def toggle_quick_access(self, search_id: str) -> None:
        ids = self.state.quick_access_ids
        if search_id in ids:
            ids.remove(search_id)
        else:
            self.state.quick_access_ids = [*ids, search_id][-MAX_QUICK_ACCESS:]
        self.persist()

    def reorder_quick_access(self, search_ids: List[str]) -> None:
        self.state.quick_access_ids = list(search_ids)
        self.persist()

    def can_save_more(self) -> bool:
        return len(self.state.searches) < self.max_items

    def get(self, search_id: str) -> Optional[SavedSearch]:
        return next((s for s in self.state.searches if s.id == search_id), None)

    def quick_access(self) -> List[SavedSearch]:
        found = (self.get(i) for i in self.state.quick_access_ids)
        return [s for s in found if s]

    def most_used(self, limit: int = 5) -> List[SavedSearch]:
        return sorted(self.state.searches, key=lambda s: s.use_count, reverse=True)[:limit]

    def recent(self, limit: int = 5) -> List[SavedSearch]:
        return sorted(
            self.state.searches,
            key=lambda s: s.last_used_at or s.created_at,
            reverse=True,
        )[:limit]

    def exists(self, filters: dict, query: Optional[str] = None) -> bool:
        wanted = json.dumps(filters, sort_keys=True, default=str)
        return any(
            json.dumps(s.filters, sort_keys=True, default=str) == wanted and s.query == query
            for s in self.state.searches
        )

from typing import List
from pydantic import BaseModel
from app.stores.base import PersistedStore

MAX_HISTORY = 20


class SearchState(BaseModel):
    query: str = ""
    filters: dict = {}
    sort_by: str = "relevance"
    page: int = 1
    page_size: int = 12
    total_results: int = 0
    history: List[str] = []


class SearchStore(PersistedStore[SearchState]):
    name = "vehicle-search"
    state_class = SearchState
    persisted = {"history", "filters", "sort_by", "page_size"}

    def set_query(self, query: str) -> None:
        self.state.query = query

    def set_filters(self, **filters) -> None:
        self.state.filters = {**self.state.filters, **filters}
        self.persist()

    def update_filter(self, key: str, value) -> None:
        self.set_filters(**{key: value})

    def remove_filter(self, key: str) -> None:
        self.state.filters.pop(key, None)
        self.persist()

    def clear_filters(self) -> None:
        self.state.filters = {}
        self.state.page = 1
        self.persist()

    def set_sort_by(self, sort_by: str) -> None:
        self.state.sort_by = sort_by
        self.state.page = 1
        self.persist()

    def set_page(self, page: int) -> None:
        self.state.page = max(1, page)

    def next_page(self) -> None:
        self.state.page += 1

    def previous_page(self) -> None:
        self.state.page = max(1, self.state.page - 1)

    def add_to_history(self, query: str) -> None:
        if not query.strip():
            return
        rest = [q for q in self.state.history if q != query]
        self.state.history = [query, *rest][:MAX_HISTORY]
        self.persist()

    def clear_history(self) -> None:
        self.state.history = []
        self.persist()

    def reset(self) -> None:
        """Back to defaults, keeping the search history."""
        self.state = SearchState(history=self.state.history)
        self.persist()

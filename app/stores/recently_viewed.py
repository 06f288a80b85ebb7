from collections import Counter
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel
from app.models.base import as_utc
from app.stores.base import PersistedStore, VehicleSnapshot

MAX_RECENTLY_VIEWED = 20

ViewSource = Literal["search", "direct", "comparison", "favorites", "external"]


class ViewedVehicle(BaseModel):
    vehicle: VehicleSnapshot
    viewed_at: datetime
    view_count: int = 1
    time_spent: int = 0
    source: Optional[ViewSource] = "direct"


class MakeCount(BaseModel):
    make: str
    count: int


class CurrentViewing(BaseModel):
    vehicle_id: int
    start_time: datetime


class RecentlyViewedState(BaseModel):
    viewed: List[ViewedVehicle] = []
    total_views: int = 0
    average_time_spent: float = 0.0
    most_viewed_makes: List[MakeCount] = []
    current_viewing: Optional[CurrentViewing] = None


class RecentlyViewedStore(PersistedStore[RecentlyViewedState]):
    """Most recent first, capped at 20; re-viewing promotes instead of duplicating."""

    name = "recently-viewed"
    state_class = RecentlyViewedState
    persisted = {"viewed", "total_views"}

    def __init__(self, *args, max_items: int = MAX_RECENTLY_VIEWED, **kwargs):
        self.max_items = max_items
        super().__init__(*args, **kwargs)

    def add(self, vehicle: VehicleSnapshot, source: ViewSource = "direct") -> ViewedVehicle:
        now = self.clock()
        existing = self.get(vehicle.id)
        if existing:
            self.state.viewed.remove(existing)
            entry = existing.model_copy(update={
                "vehicle": vehicle,
                "viewed_at": now,
                "view_count": existing.view_count + 1,
                "source": source,
            })
        else:
            entry = ViewedVehicle(vehicle=vehicle, viewed_at=now, source=source)

        self.state.viewed = [entry, *self.state.viewed][: self.max_items]
        self.state.total_views += 1
        self.persist()
        return entry

    def remove(self, vehicle_id: int) -> bool:
        entry = self.get(vehicle_id)
        if entry is None:
            return False
        self.state.viewed.remove(entry)
        self.persist()
        return True

    def clear(self) -> None:
        self.state.viewed = []
        self.state.total_views = 0
        self.state.average_time_spent = 0.0
        self.state.most_viewed_makes = []
        self.persist()

    def start_viewing(self, vehicle_id: int) -> None:
        self.state.current_viewing = CurrentViewing(vehicle_id=vehicle_id, start_time=self.clock())

    def end_viewing(self) -> int:
        """Credit the seconds since ``start_viewing`` to that vehicle."""
        current = self.state.current_viewing
        if current is None:
            return 0
        elapsed = int((as_utc(self.clock()) - as_utc(current.start_time)).total_seconds())
        entry = self.get(current.vehicle_id)
        if entry:
            entry.time_spent += elapsed
        self.state.current_viewing = None
        self.state.average_time_spent = self._average_time_spent()
        self.persist()
        return elapsed

    def get(self, vehicle_id: int) -> Optional[ViewedVehicle]:
        return next((v for v in self.state.viewed if v.vehicle.id == vehicle_id), None)

    def is_recently_viewed(self, vehicle_id: int) -> bool:
        return self.get(vehicle_id) is not None

    def view_count(self, vehicle_id: int) -> int:
        entry = self.get(vehicle_id)
        return entry.view_count if entry else 0

    def most_viewed(self, limit: int = 5) -> List[ViewedVehicle]:
        return sorted(self.state.viewed, key=lambda v: v.view_count, reverse=True)[:limit]

    def _average_time_spent(self) -> float:
        if not self.state.viewed:
            return 0.0
        return sum(v.time_spent for v in self.state.viewed) / len(self.state.viewed)

    def update_analytics(self) -> None:
        makes = Counter()
        for entry in self.state.viewed:
            makes[entry.vehicle.make] += entry.view_count
        self.state.most_viewed_makes = [
            MakeCount(make=make, count=count) for make, count in makes.most_common(5)
        ]
        self.state.average_time_spent = self._average_time_spent()

import logging
import secrets
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from app.stores.base import PersistedStore, VehicleSnapshot

logger = logging.getLogger(__name__)

MAX_COMPARE = 4


class CompareSlot(BaseModel):
    vehicle: VehicleSnapshot
    added_seq: int


class CompareState(BaseModel):
    slots: List[Optional[CompareSlot]] = Field(default_factory=lambda: [None] * MAX_COMPARE)
    next_seq: int = 0
    highlight_differences: bool = True
    show_only_differences: bool = False
    is_modal_open: bool = False
    comparison_id: Optional[str] = None
    created_at: Optional[datetime] = None
    last_modified: Optional[datetime] = None


class CompareStore(PersistedStore[CompareState]):
    """Four comparison slots; once full, a new vehicle overwrites the oldest-added one."""

    name = "vehicle-compare"
    state_class = CompareState
    persisted = {
        "slots", "next_seq", "highlight_differences", "show_only_differences",
        "comparison_id", "created_at", "last_modified",
    }

    @property
    def vehicles(self) -> List[Optional[VehicleSnapshot]]:
        return [slot.vehicle if slot else None for slot in self.state.slots]

    def _index_of(self, vehicle_id: int) -> Optional[int]:
        for index, slot in enumerate(self.state.slots):
            if slot and slot.vehicle.id == vehicle_id:
                return index
        return None

    def _place(self, index: int, vehicle: Optional[VehicleSnapshot]) -> None:
        now = self.clock()
        if vehicle is None:
            self.state.slots[index] = None
        else:
            self.state.slots[index] = CompareSlot(vehicle=vehicle, added_seq=self.state.next_seq)
            self.state.next_seq += 1
            if self.state.created_at is None:
                self.state.created_at = now
                self.state.comparison_id = f"cmp-{secrets.token_hex(6)}"
        self.state.last_modified = now

    def add(self, vehicle: VehicleSnapshot) -> int:
        """Return the slot index now holding ``vehicle``."""
        existing = self._index_of(vehicle.id)
        if existing is not None:
            return existing

        slots = self.state.slots
        empty = [i for i, slot in enumerate(slots) if slot is None]
        if empty:
            index = empty[0]
        else:
            index = min(range(len(slots)), key=lambda i: slots[i].added_seq)
        self._place(index, vehicle)
        self.persist()
        return index

    def remove(self, vehicle_id: int) -> bool:
        index = self._index_of(vehicle_id)
        if index is None:
            return False
        self._place(index, None)
        self.persist()
        return True

    def replace(self, index: int, vehicle: Optional[VehicleSnapshot]) -> bool:
        if index < 0 or index >= MAX_COMPARE:
            return False
        self._place(index, vehicle)
        self.persist()
        return True

    def clear(self) -> None:
        self.state.slots = [None] * MAX_COMPARE
        self.state.comparison_id = None
        self.state.created_at = None
        self.state.last_modified = None
        self.persist()

    def toggle_modal(self) -> None:
        self.state.is_modal_open = not self.state.is_modal_open

    def set_highlight_differences(self, value: bool) -> None:
        self.state.highlight_differences = value
        self.persist()

    def set_show_only_differences(self, value: bool) -> None:
        self.state.show_only_differences = value
        self.persist()

    def can_add_more(self) -> bool:
        return any(slot is None for slot in self.state.slots)

    def is_in_comparison(self, vehicle_id: int) -> bool:
        return self._index_of(vehicle_id) is not None

    def comparison_url(self, base_url: str) -> str:
        ids = ",".join(str(v.id) for v in self.vehicles if v)
        if not ids:
            return ""
        return f"{base_url.rstrip('/')}/compare?vehicles={ids}"

    def export(self, base_url: str) -> Optional[dict]:
        active = [v for v in self.vehicles if v]
        if not active:
            logger.warning("No vehicles to export")
            return None
        return {
            "vehicles": [v.model_dump(mode="json") for v in active],
            "created_at": self.state.created_at.isoformat() if self.state.created_at else None,
            "exported_at": self.clock().isoformat(),
            "url": self.comparison_url(base_url),
        }

"""Key/value storage and the persisted-state base shared by the visitor stores"""
import logging
import re
from pathlib import Path
from typing import Callable, ClassVar, Dict, Generic, Optional, Protocol, Set, Type, TypeVar, runtime_checkable
from datetime import datetime
from pydantic import BaseModel
from app.core.enums import BodyType, FuelType
from app.models.base import utcnow

logger = logging.getLogger(__name__)


@runtime_checkable
class Storage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self):
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JSONFileStorage:
    """One JSON file per key under ``directory``."""

    _UNSAFE = re.compile(r"[^A-Za-z0-9_.-]")

    def __init__(self, directory):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{self._UNSAFE.sub('_', key)}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class VehicleSnapshot(BaseModel):
    id: int
    slug: Optional[str] = None
    make: str
    model: str
    year: int
    price: int
    mileage: int = 0
    body_type: Optional[BodyType] = None
    fuel_type: Optional[FuelType] = None
    image: Optional[str] = None

    @classmethod
    def from_vehicle(cls, vehicle) -> "VehicleSnapshot":
        images = vehicle.images or []
        return cls(
            id=vehicle.id,
            slug=vehicle.slug,
            make=vehicle.make,
            model=vehicle.model,
            year=vehicle.year,
            price=vehicle.price,
            mileage=vehicle.mileage,
            body_type=vehicle.body_type,
            fuel_type=vehicle.fuel_type,
            image=images[0] if images else None,
        )


StateT = TypeVar("StateT", bound=BaseModel)


class PersistedStore(Generic[StateT]):
    """State model hydrated from and written back to a ``Storage`` under ``name``.

    Only the fields in ``persisted`` are written; the rest is session state
    that starts from its defaults on every load.
    """

    name: ClassVar[str]
    state_class: ClassVar[Type[BaseModel]]
    persisted: ClassVar[Optional[Set[str]]] = None

    def __init__(
        self,
        storage: Optional[Storage] = None,
        key_prefix: str = "",
        clock: Callable[[], datetime] = utcnow,
    ):
        self.storage = storage if storage is not None else MemoryStorage()
        self.key = f"{key_prefix}{self.name}"
        self.clock = clock
        self.state: StateT = self._hydrate()

    def _hydrate(self) -> StateT:
        raw = self.storage.get_item(self.key)
        if raw:
            try:
                return self.state_class.model_validate_json(raw)
            except ValueError as e:
                logger.warning(f"Discarding unreadable {self.name} state: {e}")
        return self.state_class()

    def persist(self) -> None:
        self.storage.set_item(self.key, self.state.model_dump_json(include=self.persisted))

    def snapshot(self) -> dict:
        return self.state.model_dump(mode="json")

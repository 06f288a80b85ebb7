import logging
import secrets
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel
from app.stores.base import PersistedStore

logger = logging.getLogger(__name__)

MAX_ALERTS = 10

Frequency = Literal["instant", "daily", "weekly"]


class ClientAlert(BaseModel):
    id: str
    email: str
    name: str
    filters: dict = {}
    frequency: Frequency = "instant"
    is_active: bool = True
    created_at: datetime
    last_notified_at: Optional[datetime] = None
    match_count: int = 0


class AlertState(BaseModel):
    alerts: List[ClientAlert] = []
    selected_id: Optional[str] = None


class AlertStore(PersistedStore[AlertState]):
    name = "inventory-alerts"
    state_class = AlertState
    persisted = {"alerts"}

    def add(
        self,
        email: str,
        name: str,
        filters: Optional[dict] = None,
        frequency: Frequency = "instant",
        is_active: bool = True,
    ) -> Optional[ClientAlert]:
        if not self.can_create_more():
            logger.warning(f"Maximum number of alerts ({MAX_ALERTS}) reached")
            return None
        alert = ClientAlert(
            id=f"alert-{secrets.token_hex(6)}",
            email=email,
            name=name,
            filters=filters or {},
            frequency=frequency,
            is_active=is_active,
            created_at=self.clock(),
        )
        self.state.alerts.append(alert)
        self.persist()
        return alert

    def _replace(self, alert_id: str, **changes) -> Optional[ClientAlert]:
        for index, alert in enumerate(self.state.alerts):
            if alert.id == alert_id:
                updated = alert.model_copy(update=changes)
                self.state.alerts[index] = updated
                self.persist()
                return updated
        return None

    def update(self, alert_id: str, **changes) -> Optional[ClientAlert]:
        allowed = {k: v for k, v in changes.items() if k in ClientAlert.model_fields and k != "id"}
        return self._replace(alert_id, **allowed)

    def remove(self, alert_id: str) -> bool:
        before = len(self.state.alerts)
        self.state.alerts = [a for a in self.state.alerts if a.id != alert_id]
        if self.state.selected_id == alert_id:
            self.state.selected_id = None
        self.persist()
        return len(self.state.alerts) < before

    def toggle(self, alert_id: str) -> Optional[ClientAlert]:
        alert = self.get(alert_id)
        if alert is None:
            return None
        return self._replace(alert_id, is_active=not alert.is_active)

    def clear(self) -> None:
        self.state.alerts = []
        self.state.selected_id = None
        self.persist()

    def can_create_more(self) -> bool:
        return len(self.state.alerts) < MAX_ALERTS

    def active(self) -> List[ClientAlert]:
        return [a for a in self.state.alerts if a.is_active]

    def get(self, alert_id: str) -> Optional[ClientAlert]:
        return next((a for a in self.state.alerts if a.id == alert_id), None)

    def update_last_notified(self, alert_id: str) -> Optional[ClientAlert]:
        return self._replace(alert_id, last_notified_at=self.clock())

    def increment_match_count(self, alert_id: str) -> Optional[ClientAlert]:
        alert = self.get(alert_id)
        if alert is None:
            return None
        return self._replace(alert_id, match_count=alert.match_count + 1)

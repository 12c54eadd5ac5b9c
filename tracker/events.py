from datetime import datetime
from typing import Callable, Dict, List, NamedTuple, Optional

from tracker.budgets import ALERT_HIGH, ALERT_OVER, BudgetStatus

__all__ = [
    'TRANSACTION_ADDED', 'BUDGET_ALERT', 'Event', 'EventBus',
    'budget_alert_payload', 'budget_alert_handler', 'register_default_handlers',
]

TRANSACTION_ADDED = "TRANSACTION_ADDED"
BUDGET_ALERT = "BUDGET_ALERT"

ALERT_MESSAGES = {
    ALERT_OVER: "Over budget",
    ALERT_HIGH: "Approaching budget limit",
}


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._subscribers: Dict[str, List[Handler]] = {}
        self._clock = clock

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name)
        if not handlers:
            return []
        event = Event(name=name, ts=self._clock().isoformat(), payload=payload)
        return [handler(event, payload) for handler in handlers]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


def budget_alert_payload(status: BudgetStatus, label: str) -> dict:
    return {
        "budget_id": status.budget.id,
        "label": label,
        "alert": status.alert,
        "spent": status.spent_current,
        "limit": status.limit,
        "used_pct": status.used_pct,
    }


def budget_alert_handler(event: Event, payload: dict) -> dict:
    message: Optional[str] = ALERT_MESSAGES.get(payload.get("alert"))
    if message is None:
        return {}
    return {
        "message": f"{message}: {payload.get('label')} ({payload.get('used_pct')}% used)",
        "budget_id": payload.get("budget_id"),
        "alert": payload.get("alert"),
    }


def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(BUDGET_ALERT, budget_alert_handler)
    return bus

"""MQTT topic helpers.

Topic construction lives in one place so the service and every terminal agree
on naming.

Topic layout under a configurable namespace (default: `counter/v0`):

Request/response:
- `<ns>/visitor/requests`
    Ticket issuance and ticket status lookups (no login needed).
- `<ns>/staff/requests`
    Staff login/logout and every staff action.
- `<ns>/responses/<client_id>`
    Point-to-point replies; each client subscribes to its own.

Broadcast:
- `<ns>/status/updates`
    The service publishes full queue snapshots here.

Several counters can share a broker by giving each its own namespace
(e.g. `--namespace clinic/east`).
"""

from __future__ import annotations

from .config import DEFAULT_NAMESPACE


def visitor_requests(namespace: str = DEFAULT_NAMESPACE) -> str:
    return f"{namespace}/visitor/requests"


def staff_requests(namespace: str = DEFAULT_NAMESPACE) -> str:
    return f"{namespace}/staff/requests"


def responses(client_id: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    return f"{namespace}/responses/{client_id}"


def status_updates(namespace: str = DEFAULT_NAMESPACE) -> str:
    """Broadcast queue snapshots. Displays subscribe to this topic."""
    return f"{namespace}/status/updates"

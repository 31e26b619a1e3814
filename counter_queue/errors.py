"""Shared error envelope and rejection reasons.

Two kinds of "no":
- a *rejected* action is a normal outcome (preconditions unmet, state unchanged),
  reported through `ActionResult.reason` with one of the codes below;
- an *error* is a request the service could not even interpret (bad payload,
  missing session, unknown type), reported with `ErrorResponse`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Rejection reasons (the action was a no-op).
NO_WAITING_TICKETS = "no_waiting_tickets"
ASSIGNMENT_IN_PROGRESS = "assignment_in_progress"
UNKNOWN_TICKET = "unknown_ticket"
TICKET_NOT_READY = "ticket_not_ready"
UNKNOWN_ROOM = "unknown_room"
ROOM_QUEUE_EMPTY = "room_queue_empty"

# Request errors (service layer only).
BAD_REQUEST = "bad_request"
UNAUTHORIZED = "unauthorized"
INVALID_CREDENTIALS = "invalid_credentials"
UNKNOWN_REQUEST = "unknown_request"


@dataclass(frozen=True)
class ErrorResponse:
    code: str
    message: str

    def to_message(self, *, corr_id: str | None = None) -> dict[str, Any]:
        msg: dict[str, Any] = {"type": "error", "code": self.code, "message": self.message}
        if corr_id is not None:
            msg["corr_id"] = corr_id
        return msg

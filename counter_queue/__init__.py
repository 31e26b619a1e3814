"""Service counter ticket queue.

The heart of the package is `QueueEngine`, an in-memory state machine for a
counter that runs either

- one-stage: visitors wait in one line and are called to a single serving point, or
- two-stage: visitors are first called to the front desk, routed to a room,
  and then called again inside that room.

Around it, an MQTT service (via a broker like Mosquitto) lets visitor and
staff terminals take tickets, drive the queue and follow its status.
"""

from .engine import QueueEngine
from .state import EngineState, QueueMode, Room, RoomDefinition, Ticket, TicketStatus
from .transitions import ActionResult

__all__ = [
    "ActionResult",
    "EngineState",
    "QueueEngine",
    "QueueMode",
    "Room",
    "RoomDefinition",
    "Ticket",
    "TicketStatus",
]

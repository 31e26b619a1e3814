"""Queue data model.

Everything here is an immutable value:
- `Ticket`, `Room`, `ServedRecord` are frozen dataclasses
- `EngineState` holds its maps behind `MappingProxyType`

A transition never edits a state in place; it builds the next one. That lets
the engine hand its current state to any reader as a consistent snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping


class TicketStatus(str, Enum):
    """Lifecycle of a ticket. There is no terminal "done" status."""

    WAITING = "waiting"
    READY_FOR_ASSIGNMENT = "ready_for_assignment"
    ASSIGNED = "assigned"
    SERVING = "serving"


class QueueMode(str, Enum):
    ONE_STAGE = "one_stage"
    TWO_STAGE = "two_stage"


# Forward-only moves. One-stage jumps straight from waiting to serving.
_FORWARD: dict[TicketStatus, frozenset[TicketStatus]] = {
    TicketStatus.WAITING: frozenset({TicketStatus.READY_FOR_ASSIGNMENT, TicketStatus.SERVING}),
    TicketStatus.READY_FOR_ASSIGNMENT: frozenset({TicketStatus.ASSIGNED}),
    TicketStatus.ASSIGNED: frozenset({TicketStatus.SERVING}),
    TicketStatus.SERVING: frozenset(),
}


def can_advance(current: TicketStatus, new: TicketStatus) -> bool:
    return new in _FORWARD[current]


@dataclass(frozen=True)
class Ticket:
    id: int
    status: TicketStatus = TicketStatus.WAITING

    def advanced_to(self, status: TicketStatus) -> Ticket:
        if not can_advance(self.status, status):
            raise ValueError(f"Invalid ticket status transition: {self.status.value} -> {status.value}")
        return replace(self, status=status)


@dataclass(frozen=True)
class RoomDefinition:
    """Static identity of a room, supplied by configuration."""

    room_id: str
    name: str


@dataclass(frozen=True)
class Room:
    room_id: str
    name: str
    queue: tuple[int, ...] = ()  # ticket ids in FIFO order
    currently_serving: int | None = None

    @classmethod
    def from_definition(cls, definition: RoomDefinition) -> Room:
        return cls(room_id=definition.room_id, name=definition.name)


@dataclass(frozen=True)
class ServedRecord:
    """One entry of the served log. `room_id` is None for one-stage calls."""

    ticket_id: int
    room_id: str | None = None


@dataclass(frozen=True)
class EngineState:
    tickets: Mapping[int, Ticket]
    rooms: Mapping[str, Room]
    mode: QueueMode = QueueMode.ONE_STAGE
    next_ticket_number: int = 101
    one_stage_serving: int | None = None
    served_log: tuple[ServedRecord, ...] = field(default=())

    def __post_init__(self) -> None:
        # Freeze whatever mapping we were given so callers only ever see read-only views.
        object.__setattr__(self, "tickets", MappingProxyType(dict(self.tickets)))
        object.__setattr__(self, "rooms", MappingProxyType(dict(self.rooms)))

    def evolve(self, **changes) -> EngineState:
        return replace(self, **changes)


def initial_state(rooms: Iterable[RoomDefinition], ticket_base: int) -> EngineState:
    return EngineState(
        tickets={},
        rooms={d.room_id: Room.from_definition(d) for d in rooms},
        mode=QueueMode.ONE_STAGE,
        next_ticket_number=ticket_base,
    )


# -------------------- derived views --------------------


def waiting_tickets(state: EngineState) -> list[Ticket]:
    """Waiting tickets in arrival (id) order."""
    return sorted(
        (t for t in state.tickets.values() if t.status is TicketStatus.WAITING),
        key=lambda t: t.id,
    )


def ticket_ready_for_assignment(state: EngineState) -> Ticket | None:
    for t in state.tickets.values():
        if t.status is TicketStatus.READY_FOR_ASSIGNMENT:
            return t
    return None


def room_holding(state: EngineState, ticket_id: int) -> Room | None:
    """Room whose queue or serving slot holds `ticket_id`."""
    for room in state.rooms.values():
        if ticket_id in room.queue or room.currently_serving == ticket_id:
            return room
    return None


def stranded_tickets(state: EngineState) -> list[Ticket]:
    """Two-stage tickets left mid-flow while the queue runs in one-stage mode."""
    if state.mode is not QueueMode.ONE_STAGE:
        return []
    mid_flow = (TicketStatus.READY_FOR_ASSIGNMENT, TicketStatus.ASSIGNED)
    return sorted((t for t in state.tickets.values() if t.status in mid_flow), key=lambda t: t.id)


def state_to_message(state: EngineState) -> dict:
    """JSON-ready snapshot, as broadcast to observers."""
    ready = ticket_ready_for_assignment(state)
    return {
        "type": "status_response",
        "mode": state.mode.value,
        "next_ticket_number": state.next_ticket_number,
        "one_stage_serving": state.one_stage_serving,
        "ticket_ready_for_assignment": ready.id if ready else None,
        "waiting": [t.id for t in waiting_tickets(state)],
        "tickets": {str(t.id): t.status.value for t in sorted(state.tickets.values(), key=lambda t: t.id)},
        "rooms": {
            room.room_id: {
                "name": room.name,
                "queue": list(room.queue),
                "currently_serving": room.currently_serving,
            }
            for room in state.rooms.values()
        },
        "stranded": [t.id for t in stranded_tickets(state)],
    }

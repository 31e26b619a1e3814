from __future__ import annotations

# Pure state transitions.
#
# Every function takes the current `EngineState` (plus arguments) and returns
# `(next_state, result)`. When the preconditions don't hold, the *same* state
# object comes back together with a rejected result, so "nothing changed" is
# both observable (`next is state`) and explained (`result.reason`).
#
# Nothing here locks, logs or raises on bad input; `QueueEngine` adds the lock.

from dataclasses import dataclass, replace
from typing import Iterable

from . import errors
from .state import (
    EngineState,
    QueueMode,
    RoomDefinition,
    ServedRecord,
    Ticket,
    TicketStatus,
    initial_state,
    ticket_ready_for_assignment,
    waiting_tickets,
)


@dataclass(frozen=True)
class ActionResult:
    applied: bool
    reason: str | None = None
    ticket_id: int | None = None

    @classmethod
    def ok(cls, ticket_id: int | None = None) -> ActionResult:
        return cls(applied=True, ticket_id=ticket_id)

    @classmethod
    def rejected(cls, reason: str, ticket_id: int | None = None) -> ActionResult:
        return cls(applied=False, reason=reason, ticket_id=ticket_id)

    def __bool__(self) -> bool:
        return self.applied

    def to_message(self) -> dict:
        return {"applied": self.applied, "reason": self.reason, "ticket_id": self.ticket_id}


Transition = tuple[EngineState, ActionResult]


def _with_ticket(state: EngineState, ticket: Ticket, **changes) -> EngineState:
    tickets = dict(state.tickets)
    tickets[ticket.id] = ticket
    return state.evolve(tickets=tickets, **changes)


# -------------------- issuance & mode --------------------


def take_ticket(state: EngineState) -> Transition:
    ticket = Ticket(id=state.next_ticket_number)
    nxt = _with_ticket(state, ticket, next_ticket_number=ticket.id + 1)
    return nxt, ActionResult.ok(ticket.id)


def set_mode(state: EngineState, mode: QueueMode) -> Transition:
    """Overwrite the mode. Tickets are left exactly where they are."""
    if state.mode is mode:
        return state, ActionResult.ok()
    return state.evolve(mode=mode), ActionResult.ok()


# -------------------- one-stage --------------------


def call_next_one_stage(state: EngineState) -> Transition:
    waiting = waiting_tickets(state)
    if not waiting:
        return state, ActionResult.rejected(errors.NO_WAITING_TICKETS)

    # The previous one_stage_serving ticket stays `serving`; the slot is simply overwritten.
    ticket = waiting[0].advanced_to(TicketStatus.SERVING)
    nxt = _with_ticket(
        state,
        ticket,
        one_stage_serving=ticket.id,
        served_log=state.served_log + (ServedRecord(ticket.id),),
    )
    return nxt, ActionResult.ok(ticket.id)


# -------------------- two-stage --------------------


def call_next_for_assignment(state: EngineState) -> Transition:
    calling = ticket_ready_for_assignment(state)
    if calling is not None:
        # Only one ticket may be called to the desk at a time.
        return state, ActionResult.rejected(errors.ASSIGNMENT_IN_PROGRESS, calling.id)

    waiting = waiting_tickets(state)
    if not waiting:
        return state, ActionResult.rejected(errors.NO_WAITING_TICKETS)

    ticket = waiting[0].advanced_to(TicketStatus.READY_FOR_ASSIGNMENT)
    return _with_ticket(state, ticket), ActionResult.ok(ticket.id)


def assign_ticket_to_room(state: EngineState, ticket_id: int, room_id: str) -> Transition:
    ticket = state.tickets.get(ticket_id)
    if ticket is None:
        return state, ActionResult.rejected(errors.UNKNOWN_TICKET, ticket_id)
    room = state.rooms.get(room_id)
    if room is None:
        return state, ActionResult.rejected(errors.UNKNOWN_ROOM, ticket_id)
    if ticket.status is not TicketStatus.READY_FOR_ASSIGNMENT:
        return state, ActionResult.rejected(errors.TICKET_NOT_READY, ticket_id)

    rooms = dict(state.rooms)
    rooms[room_id] = replace(room, queue=room.queue + (ticket_id,))
    nxt = _with_ticket(state, ticket.advanced_to(TicketStatus.ASSIGNED), rooms=rooms)
    return nxt, ActionResult.ok(ticket_id)


def call_next_in_room(state: EngineState, room_id: str) -> Transition:
    room = state.rooms.get(room_id)
    if room is None:
        return state, ActionResult.rejected(errors.UNKNOWN_ROOM)
    if not room.queue:
        return state, ActionResult.rejected(errors.ROOM_QUEUE_EMPTY)

    ticket_id, rest = room.queue[0], room.queue[1:]
    rooms = dict(state.rooms)
    # Previous currently_serving is overwritten, not re-queued.
    rooms[room_id] = replace(room, queue=rest, currently_serving=ticket_id)
    changes = {
        "rooms": rooms,
        "served_log": state.served_log + (ServedRecord(ticket_id, room_id),),
    }

    ticket = state.tickets.get(ticket_id)
    if ticket is None:
        return state.evolve(**changes), ActionResult.ok(ticket_id)
    return _with_ticket(state, ticket.advanced_to(TicketStatus.SERVING), **changes), ActionResult.ok(ticket_id)


# -------------------- reset --------------------


def reset_queue(state: EngineState, rooms: Iterable[RoomDefinition], ticket_base: int) -> Transition:
    """Drop every ticket and return to a fresh one-stage queue.

    `state` is accepted for symmetry with the other transitions; nothing from it survives.
    """
    return initial_state(rooms, ticket_base), ActionResult.ok()


__all__ = [
    "ActionResult",
    "Transition",
    "assign_ticket_to_room",
    "call_next_for_assignment",
    "call_next_in_room",
    "call_next_one_stage",
    "reset_queue",
    "set_mode",
    "take_ticket",
]

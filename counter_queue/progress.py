"""What a visitor holding a ticket should be told.

`describe_ticket()` turns a state snapshot into a small, display-ready summary:
a message, what the counter is currently serving, and how many people are
ahead. It reads the state only; nothing here changes the queue.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from .state import (
    EngineState,
    QueueMode,
    TicketStatus,
    room_holding,
    ticket_ready_for_assignment,
    waiting_tickets,
)

NOTHING_SERVING = "---"


@dataclass(frozen=True)
class TicketProgress:
    ticket_id: int
    status: TicketStatus
    message: str
    now_serving: str
    ahead: int | None
    your_turn: bool = False
    room_id: str | None = None

    def to_message(self) -> dict[str, Any]:
        msg = asdict(self)
        msg["status"] = self.status.value
        return msg


def _waiting_ahead(state: EngineState, ticket_id: int) -> int:
    return sum(1 for t in waiting_tickets(state) if t.id < ticket_id)


def _served_in_room(state: EngineState, ticket_id: int) -> str | None:
    """Room that last called `ticket_id`, even after its serving slot moved on."""
    for record in reversed(state.served_log):
        if record.ticket_id == ticket_id:
            return record.room_id
    return None


def describe_ticket(state: EngineState, ticket_id: int) -> TicketProgress | None:
    ticket = state.tickets.get(ticket_id)
    if ticket is None:
        return None

    if state.mode is QueueMode.ONE_STAGE:
        serving = state.one_stage_serving
        now_serving = str(serving) if serving is not None else NOTHING_SERVING
        if ticket.status is TicketStatus.SERVING:
            return TicketProgress(
                ticket_id, ticket.status, "It's your turn! Please proceed.", now_serving, 0, your_turn=True
            )
        if ticket.status in (TicketStatus.READY_FOR_ASSIGNMENT, TicketStatus.ASSIGNED):
            # One-stage calling never picks these up; they wait for two-stage to resume.
            room = room_holding(state, ticket_id)
            return TicketProgress(
                ticket_id,
                ticket.status,
                "Your ticket is on hold until two-stage calling resumes.",
                now_serving,
                None,
                room_id=room.room_id if room else None,
            )
        return TicketProgress(
            ticket_id, ticket.status, "Please wait for your number.", now_serving, _waiting_ahead(state, ticket_id)
        )

    room = room_holding(state, ticket_id)

    if ticket.status is TicketStatus.SERVING:
        room_id = room.room_id if room else _served_in_room(state, ticket_id)
        served_room = state.rooms.get(room_id) if room_id else None
        room_name = served_room.name if served_room else "the room"
        return TicketProgress(
            ticket_id,
            ticket.status,
            f"It's your turn in {room_name}!",
            f"Serving in {room_name}",
            0,
            your_turn=True,
            room_id=room_id,
        )

    if ticket.status is TicketStatus.READY_FOR_ASSIGNMENT:
        return TicketProgress(
            ticket_id,
            ticket.status,
            "You're being called! Please go to the front desk.",
            f"Now calling: {ticket_id}",
            0,
            your_turn=True,
        )

    if ticket.status is TicketStatus.ASSIGNED and room is not None:
        serving = str(room.currently_serving) if room.currently_serving is not None else NOTHING_SERVING
        return TicketProgress(
            ticket_id,
            ticket.status,
            f"Assigned to {room.name}.",
            f"Room serving: {serving}",
            room.queue.index(ticket_id),
            room_id=room.room_id,
        )

    calling = ticket_ready_for_assignment(state)
    return TicketProgress(
        ticket_id,
        ticket.status,
        "Waiting for your number to be called for assignment.",
        f"Assigning: {calling.id}" if calling else NOTHING_SERVING,
        _waiting_ahead(state, ticket_id),
    )

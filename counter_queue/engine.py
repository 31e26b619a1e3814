from __future__ import annotations

# The QueueEngine is the *authoritative owner* of the queue state.
#
# It holds exactly one `EngineState` value and a lock. Every action runs the
# matching pure transition under the lock and swaps in the result; readers grab
# the current (immutable) state under the same lock and can use it freely.
#
# No I/O here: transports, terminals and the staff gate live elsewhere.

import threading
from typing import Iterable, Mapping

from . import transitions
from .config import DEFAULT_ROOMS, DEFAULT_TICKET_BASE, validate_roster
from .progress import TicketProgress, describe_ticket
from .state import (
    EngineState,
    QueueMode,
    Room,
    RoomDefinition,
    Ticket,
    initial_state,
    state_to_message,
    stranded_tickets,
    ticket_ready_for_assignment,
    waiting_tickets,
)
from .transitions import ActionResult

# reset_queue is handled separately: it needs the engine's roster and base.
_STAFF_ACTIONS = {
    "set_mode": transitions.set_mode,
    "call_next_one_stage": transitions.call_next_one_stage,
    "call_next_for_assignment": transitions.call_next_for_assignment,
    "assign_ticket_to_room": transitions.assign_ticket_to_room,
    "call_next_in_room": transitions.call_next_in_room,
}


class QueueEngine:
    """Core queue logic (testable without a broker)."""

    def __init__(
        self,
        *,
        rooms: Iterable[RoomDefinition] | None = None,
        ticket_base: int = DEFAULT_TICKET_BASE,
    ) -> None:
        if ticket_base <= 0:
            raise ValueError("ticket_base must be > 0")
        self._room_definitions = validate_roster(DEFAULT_ROOMS if rooms is None else rooms)
        self._ticket_base = ticket_base

        self._lock = threading.Lock()
        self._state = initial_state(self._room_definitions, ticket_base)

    @property
    def ticket_base(self) -> int:
        return self._ticket_base

    @property
    def room_definitions(self) -> tuple[RoomDefinition, ...]:
        return self._room_definitions

    def _apply(self, step, *args) -> tuple[ActionResult, EngineState]:
        with self._lock:
            self._state, result = step(self._state, *args)
            return result, self._state

    def apply(self, action: str, *args) -> tuple[ActionResult, EngineState]:
        """Run one staff action by name.

        Returns the result together with the state that action produced, so a
        caller can report both without another action slipping in between.
        Raises KeyError for an unknown action name.
        """
        if action == "reset_queue":
            return self._apply(transitions.reset_queue, self._room_definitions, self._ticket_base)
        if action == "set_mode":
            # Coerce before locking so a bad value can't touch state.
            args = (QueueMode(args[0]),)
        return self._apply(_STAFF_ACTIONS[action], *args)

    # -------------------- actions --------------------

    def take_ticket(self) -> int:
        """Issue a new ticket and return its number."""
        with self._lock:
            ticket_id = self._state.next_ticket_number
            self._state, _result = transitions.take_ticket(self._state)
        return ticket_id

    def set_mode(self, mode: QueueMode | str) -> ActionResult:
        return self.apply("set_mode", mode)[0]

    def call_next_one_stage(self) -> ActionResult:
        return self.apply("call_next_one_stage")[0]

    def call_next_for_assignment(self) -> ActionResult:
        return self.apply("call_next_for_assignment")[0]

    def assign_ticket_to_room(self, ticket_id: int, room_id: str) -> ActionResult:
        return self.apply("assign_ticket_to_room", ticket_id, room_id)[0]

    def call_next_in_room(self, room_id: str) -> ActionResult:
        return self.apply("call_next_in_room", room_id)[0]

    def reset_queue(self) -> ActionResult:
        """Destructive: forget every ticket. Confirmation is the caller's job."""
        return self.apply("reset_queue")[0]

    # -------------------- queries --------------------

    def snapshot(self) -> EngineState:
        with self._lock:
            return self._state

    @property
    def tickets(self) -> Mapping[int, Ticket]:
        return self.snapshot().tickets

    @property
    def rooms(self) -> Mapping[str, Room]:
        return self.snapshot().rooms

    @property
    def mode(self) -> QueueMode:
        return self.snapshot().mode

    @property
    def one_stage_serving(self) -> int | None:
        return self.snapshot().one_stage_serving

    def ticket(self, ticket_id: int) -> Ticket | None:
        return self.snapshot().tickets.get(ticket_id)

    def waiting_tickets(self) -> list[Ticket]:
        return waiting_tickets(self.snapshot())

    def ticket_ready_for_assignment(self) -> Ticket | None:
        return ticket_ready_for_assignment(self.snapshot())

    def stranded_tickets(self) -> list[Ticket]:
        return stranded_tickets(self.snapshot())

    def progress(self, ticket_id: int) -> TicketProgress | None:
        return describe_ticket(self.snapshot(), ticket_id)

    def status(self) -> dict:
        """JSON-ready snapshot of the whole queue."""
        return state_to_message(self.snapshot())

import subprocess
import sys
import threading

import pytest

from counter_queue import errors
from counter_queue.config import DEFAULT_ROOMS
from counter_queue.engine import QueueEngine
from counter_queue.state import QueueMode, RoomDefinition, TicketStatus

ROOMS = [RoomDefinition("roomA", "Room A"), RoomDefinition("roomB", "Room B")]


def test_take_ticket_ids_strictly_increase_from_base():
    e = QueueEngine(rooms=ROOMS, ticket_base=101)
    ids = [e.take_ticket() for _ in range(10)]
    assert ids == list(range(101, 111))
    assert e.snapshot().next_ticket_number == 111
    assert all(e.ticket(i).status is TicketStatus.WAITING for i in ids)


def test_take_ticket_concurrently_never_repeats_an_id():
    e = QueueEngine(rooms=ROOMS, ticket_base=1)
    issued: list[int] = []
    issued_lock = threading.Lock()

    def worker() -> None:
        mine = [e.take_ticket() for _ in range(200)]
        with issued_lock:
            issued.extend(mine)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(issued) == list(range(1, 1601))
    assert e.snapshot().next_ticket_number == 1601


def test_defaults():
    e = QueueEngine()
    assert e.ticket_base == 101
    assert e.room_definitions == DEFAULT_ROOMS
    assert e.mode is QueueMode.ONE_STAGE


def test_bad_configuration_is_rejected():
    with pytest.raises(ValueError):
        QueueEngine(rooms=[])
    with pytest.raises(ValueError):
        QueueEngine(rooms=[RoomDefinition("a", "A"), RoomDefinition("a", "Again")])
    with pytest.raises(ValueError):
        QueueEngine(rooms=ROOMS, ticket_base=0)


def test_set_mode_accepts_enum_or_value():
    e = QueueEngine(rooms=ROOMS)
    assert e.set_mode("two_stage").applied
    assert e.mode is QueueMode.TWO_STAGE
    assert e.set_mode(QueueMode.ONE_STAGE).applied
    assert e.mode is QueueMode.ONE_STAGE

    before = e.snapshot()
    with pytest.raises(ValueError):
        e.set_mode("three_stage")
    assert e.snapshot() is before


def test_one_stage_call_next():
    e = QueueEngine(rooms=ROOMS, ticket_base=101)
    assert e.call_next_one_stage().reason == errors.NO_WAITING_TICKETS

    e.take_ticket()
    e.take_ticket()
    r = e.call_next_one_stage()
    assert r.applied and r.ticket_id == 101
    assert e.one_stage_serving == 101
    assert [t.id for t in e.waiting_tickets()] == [102]


def test_two_stage_flow():
    e = QueueEngine(rooms=ROOMS, ticket_base=101)
    e.set_mode(QueueMode.TWO_STAGE)
    e.take_ticket()

    assert e.call_next_for_assignment().applied
    assert e.ticket_ready_for_assignment().id == 101

    before = e.snapshot()
    assert not e.call_next_for_assignment().applied
    assert e.snapshot() is before

    assert e.assign_ticket_to_room(101, "roomA").applied
    assert e.rooms["roomA"].queue == (101,)
    assert e.ticket(101).status is TicketStatus.ASSIGNED
    assert e.ticket_ready_for_assignment() is None

    assert e.call_next_in_room("roomA").applied
    assert e.rooms["roomA"].queue == ()
    assert e.rooms["roomA"].currently_serving == 101
    assert e.ticket(101).status is TicketStatus.SERVING


def test_assign_non_ready_ticket_is_rejected_without_change():
    e = QueueEngine(rooms=ROOMS)
    tid = e.take_ticket()
    before = e.snapshot()

    r = e.assign_ticket_to_room(tid, "roomA")
    assert not r.applied and r.reason == errors.TICKET_NOT_READY
    assert e.snapshot() is before


def test_snapshot_is_not_affected_by_later_actions():
    e = QueueEngine(rooms=ROOMS)
    e.take_ticket()
    snap = e.snapshot()
    e.take_ticket()
    e.call_next_one_stage()
    assert list(snap.tickets) == [101]
    assert snap.tickets[101].status is TicketStatus.WAITING


def test_reset_queue_restores_initial_state():
    e = QueueEngine(rooms=ROOMS, ticket_base=500)
    e.set_mode(QueueMode.TWO_STAGE)
    for _ in range(3):
        e.take_ticket()
    e.call_next_for_assignment()
    e.assign_ticket_to_room(500, "roomB")
    e.call_next_for_assignment()
    e.call_next_in_room("roomB")

    assert e.reset_queue().applied

    s = e.snapshot()
    assert dict(s.tickets) == {}
    assert all(r.queue == () and r.currently_serving is None for r in s.rooms.values())
    assert list(s.rooms) == ["roomA", "roomB"]
    assert s.mode is QueueMode.ONE_STAGE
    assert s.next_ticket_number == 500
    assert s.one_stage_serving is None
    assert s.served_log == ()
    assert e.take_ticket() == 500


def test_mode_switch_mid_flow_strands_then_resumes():
    e = QueueEngine(rooms=ROOMS, ticket_base=101)
    e.set_mode(QueueMode.TWO_STAGE)
    for _ in range(3):
        e.take_ticket()
    e.call_next_for_assignment()  # 101 -> ready
    e.assign_ticket_to_room(101, "roomA")
    e.call_next_for_assignment()  # 102 -> ready

    e.set_mode(QueueMode.ONE_STAGE)
    assert [t.id for t in e.stranded_tickets()] == [101, 102]

    # One-stage only ever considers waiting tickets.
    r = e.call_next_one_stage()
    assert r.ticket_id == 103
    assert e.ticket(102).status is TicketStatus.READY_FOR_ASSIGNMENT

    e.set_mode(QueueMode.TWO_STAGE)
    assert e.stranded_tickets() == []
    assert e.assign_ticket_to_room(102, "roomA").applied
    assert e.rooms["roomA"].queue == (101, 102)


def test_status_message():
    e = QueueEngine(rooms=ROOMS)
    e.take_ticket()
    msg = e.status()
    assert msg["type"] == "status_response"
    assert msg["waiting"] == [101]
    assert set(msg["rooms"]) == {"roomA", "roomB"}


def test_apply_returns_the_state_its_action_produced():
    e = QueueEngine(rooms=ROOMS)
    e.take_ticket()
    result, state = e.apply("call_next_one_stage")
    assert result.applied
    assert state.one_stage_serving == result.ticket_id == 101

    e.take_ticket()
    assert 102 not in state.tickets

    with pytest.raises(KeyError):
        e.apply("make_coffee")


def test_take_ticket_under_optimized_python():
    proc = subprocess.run(
        [sys.executable, "-O", "-c", "from counter_queue import QueueEngine; e = QueueEngine(); e.take_ticket(); print(e.take_ticket())"],
        capture_output=True,
        text=True,
        check=False,
    )
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout.strip() == "102"

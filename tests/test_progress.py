from counter_queue.engine import QueueEngine
from counter_queue.state import QueueMode, RoomDefinition

ROOMS = [RoomDefinition("roomA", "Room A"), RoomDefinition("roomB", "Room B")]


def test_unknown_ticket_has_no_progress():
    e = QueueEngine(rooms=ROOMS)
    assert e.progress(101) is None


def test_one_stage_progress():
    e = QueueEngine(rooms=ROOMS)
    for _ in range(3):
        e.take_ticket()

    p = e.progress(103)
    assert p.ahead == 2
    assert p.now_serving == "---"
    assert not p.your_turn

    e.call_next_one_stage()
    p = e.progress(103)
    assert p.ahead == 1
    assert p.now_serving == "101"

    p = e.progress(101)
    assert p.your_turn and p.ahead == 0


def test_two_stage_progress_follows_the_ticket():
    e = QueueEngine(rooms=ROOMS)
    e.set_mode(QueueMode.TWO_STAGE)
    for _ in range(3):
        e.take_ticket()

    p = e.progress(102)
    assert p.ahead == 1 and p.now_serving == "---"

    e.call_next_for_assignment()
    p = e.progress(101)
    assert p.your_turn and "front desk" in p.message
    assert e.progress(102).now_serving == "Assigning: 101"
    assert e.progress(102).ahead == 0

    e.assign_ticket_to_room(101, "roomB")
    e.call_next_for_assignment()
    e.assign_ticket_to_room(102, "roomB")

    p = e.progress(102)
    assert p.room_id == "roomB"
    assert p.message == "Assigned to Room B."
    assert p.ahead == 1
    assert p.now_serving == "Room serving: ---"

    e.call_next_in_room("roomB")
    p = e.progress(102)
    assert p.ahead == 0
    assert p.now_serving == "Room serving: 101"

    p = e.progress(101)
    assert p.your_turn and p.room_id == "roomB"
    assert p.message == "It's your turn in Room B!"


def test_progress_message_is_json_friendly():
    e = QueueEngine(rooms=ROOMS)
    e.take_ticket()
    msg = e.progress(101).to_message()
    assert msg["ticket_id"] == 101
    assert msg["status"] == "waiting"
    assert msg["ahead"] == 0


def test_stranded_tickets_are_on_hold_in_one_stage():
    e = QueueEngine(rooms=ROOMS)
    e.set_mode(QueueMode.TWO_STAGE)
    for _ in range(3):
        e.take_ticket()
    e.call_next_for_assignment()
    e.assign_ticket_to_room(101, "roomA")
    e.call_next_for_assignment()  # 102 called to the desk

    e.set_mode(QueueMode.ONE_STAGE)
    e.call_next_one_stage()  # serves 103

    p = e.progress(101)
    assert "on hold" in p.message
    assert p.ahead is None
    assert p.room_id == "roomA"
    assert not p.your_turn
    assert p.now_serving == "103"

    p = e.progress(102)
    assert "on hold" in p.message
    assert p.ahead is None
    assert p.room_id is None


def test_served_ticket_keeps_its_room_after_the_next_call():
    e = QueueEngine(rooms=ROOMS)
    e.set_mode(QueueMode.TWO_STAGE)
    for tid in (101, 102):
        e.take_ticket()
        e.call_next_for_assignment()
        e.assign_ticket_to_room(tid, "roomA")
    e.call_next_in_room("roomA")
    e.call_next_in_room("roomA")

    p = e.progress(101)
    assert p.your_turn
    assert p.room_id == "roomA"
    assert p.message == "It's your turn in Room A!"

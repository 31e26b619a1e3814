from counter_queue.engine import QueueEngine
from counter_queue.staff import format_result, format_status
from counter_queue.visitor import format_progress


def test_format_progress():
    e = QueueEngine()
    e.take_ticket()
    e.take_ticket()
    text = format_progress(e.progress(102).to_message())
    assert text.startswith("ticket 102: Please wait")
    assert "people ahead: 1" in text


def test_format_result():
    applied = {"type": "action_result", "action": "call_next_one_stage", "applied": True, "reason": None, "ticket_id": 101}
    assert format_result(applied) == "call_next_one_stage: done ticket=101"

    rejected = {"type": "action_result", "action": "call_next_in_room", "applied": False, "reason": "room_queue_empty", "ticket_id": None}
    assert format_result(rejected) == "call_next_in_room: no change (room_queue_empty)"

    assert format_result({"type": "error", "code": "unauthorized", "message": "Staff login required"}) == (
        "error unauthorized: Staff login required"
    )


def test_format_status_lists_rooms():
    e = QueueEngine()
    text = format_status(e.status())
    assert "mode: one_stage" in text
    assert "Room 1 [room-1]" in text

import argparse

import pytest

from counter_queue.config import add_engine_args, parse_room, validate_roster
from counter_queue.state import RoomDefinition


def test_parse_room():
    assert parse_room("room-1=Room 1") == RoomDefinition("room-1", "Room 1")
    assert parse_room(" xray = X-Ray ") == RoomDefinition("xray", "X-Ray")
    assert parse_room("lab") == RoomDefinition("lab", "lab")


def test_parse_room_rejects_bad_input():
    with pytest.raises(argparse.ArgumentTypeError):
        parse_room("=Nameless")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_room("lab=")


def test_validate_roster():
    assert validate_roster([RoomDefinition("a", "A")]) == (RoomDefinition("a", "A"),)
    with pytest.raises(ValueError):
        validate_roster([])
    with pytest.raises(ValueError):
        validate_roster([RoomDefinition("a", "A"), RoomDefinition("a", "B")])


def test_engine_args():
    p = argparse.ArgumentParser()
    add_engine_args(p)
    args = p.parse_args(["--room", "a=Alpha", "--room", "b", "--ticket-base", "1"])
    assert args.rooms == [RoomDefinition("a", "Alpha"), RoomDefinition("b", "b")]
    assert args.ticket_base == 1

    args = p.parse_args([])
    assert args.rooms is None
    assert args.ticket_base == 101

"""Defaults and command-line helpers shared by all entry points.

The room roster is static for the lifetime of a service: it is read from
`--room id=Name` flags at startup (or falls back to `DEFAULT_ROOMS`) and
reused verbatim on every reset.
"""

from __future__ import annotations

import argparse
from typing import Iterable

from .state import RoomDefinition

DEFAULT_TICKET_BASE = 101

DEFAULT_ROOMS: tuple[RoomDefinition, ...] = (
    RoomDefinition("room-1", "Room 1"),
    RoomDefinition("room-2", "Room 2"),
    RoomDefinition("room-3", "Room 3"),
)

DEFAULT_MQTT_HOST = "127.0.0.1"
DEFAULT_MQTT_PORT = 1883
DEFAULT_NAMESPACE = "counter/v0"

DEFAULT_STAFF_USERNAME = "admin"
DEFAULT_STAFF_PASSWORD = "password123"


def parse_room(text: str) -> RoomDefinition:
    """Parse `id=Display Name` (or a bare `id`) into a RoomDefinition.

    Usable directly as an argparse `type=`.
    """
    room_id, sep, name = text.partition("=")
    room_id = room_id.strip()
    name = name.strip()
    if not room_id:
        raise argparse.ArgumentTypeError(f"room id required in {text!r}")
    if sep and not name:
        raise argparse.ArgumentTypeError(f"room name required after '=' in {text!r}")
    return RoomDefinition(room_id=room_id, name=name or room_id)


def validate_roster(rooms: Iterable[RoomDefinition]) -> tuple[RoomDefinition, ...]:
    roster = tuple(rooms)
    if not roster:
        raise ValueError("at least one room is required")
    seen: set[str] = set()
    for r in roster:
        if r.room_id in seen:
            raise ValueError(f"duplicate room id: {r.room_id}")
        seen.add(r.room_id)
    return roster


def add_broker_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--mqtt-host", default=DEFAULT_MQTT_HOST)
    p.add_argument("--mqtt-port", type=int, default=DEFAULT_MQTT_PORT)
    p.add_argument("--namespace", default=DEFAULT_NAMESPACE)


def add_engine_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--room",
        dest="rooms",
        action="append",
        type=parse_room,
        default=None,
        metavar="ID=NAME",
        help="room in the roster (repeatable); defaults to room-1..room-3",
    )
    p.add_argument("--ticket-base", type=int, default=DEFAULT_TICKET_BASE, help="first ticket number")

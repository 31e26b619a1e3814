from __future__ import annotations

# Staff terminal.
#
# Each invocation logs in, runs a single staff action, prints the outcome and
# logs out again:
#
#     python -m counter_queue.staff mode two_stage
#     python -m counter_queue.staff call-for-assignment
#     python -m counter_queue.staff assign 101 room-1
#     python -m counter_queue.staff call-room room-1
#
# A rejected action (e.g. calling next in an empty room) is not an error: the
# queue simply didn't change, and the reason is printed.

import argparse
import time
from typing import Any

from .config import DEFAULT_NAMESPACE, DEFAULT_STAFF_PASSWORD, DEFAULT_STAFF_USERNAME, add_broker_args
from .mqtt_client import MqttClient
from .topics import responses, staff_requests


class StaffConsole:
    """Logged-in staff session over MQTT."""

    def __init__(self, *, mqtt_host: str, mqtt_port: int, namespace: str = DEFAULT_NAMESPACE) -> None:
        self.namespace = namespace
        self.client_id = f"staff-{int(time.time() * 1000)}"
        self._mqtt = MqttClient(client_id=self.client_id, host=mqtt_host, port=mqtt_port)
        self._reply_topic = responses(self.client_id, namespace)
        self._token: str | None = None

    def _request(self, message: dict[str, Any]) -> dict[str, Any]:
        if self._token is not None:
            message = {**message, "token": self._token}
        return self._mqtt.request(
            request_topic=staff_requests(self.namespace),
            response_topic=self._reply_topic,
            message=message,
            timeout=5.0,
        )

    def open(self, *, username: str, password: str) -> None:
        self._mqtt.start()
        self._mqtt.subscribe(self._reply_topic)
        resp = self._request({"type": "staff_login", "username": username, "password": password})
        if resp.get("type") != "staff_session":
            self._mqtt.stop()
            raise RuntimeError(f"Login failed: {resp.get('message', resp)}")
        self._token = str(resp["token"])

    def close(self) -> None:
        try:
            if self._token is not None:
                self._request({"type": "staff_logout"})
        finally:
            self._token = None
            self._mqtt.stop()

    def send(self, action: str, **fields: Any) -> dict[str, Any]:
        return self._request({"type": action, **fields})


def format_result(resp: dict[str, Any]) -> str:
    if resp.get("type") == "error":
        return f"error {resp.get('code')}: {resp.get('message')}"
    if resp.get("type") != "action_result":
        return str(resp)

    outcome = "done" if resp.get("applied") else f"no change ({resp.get('reason')})"
    ticket = f" ticket={resp['ticket_id']}" if resp.get("ticket_id") is not None else ""
    return f"{resp.get('action')}: {outcome}{ticket}"


def format_status(status: dict[str, Any]) -> str:
    lines = [
        f"mode: {status.get('mode')}",
        f"waiting: {status.get('waiting')}",
        f"one-stage serving: {status.get('one_stage_serving') or '---'}",
        f"ready for assignment: {status.get('ticket_ready_for_assignment') or '---'}",
    ]
    for room_id, room in (status.get("rooms") or {}).items():
        lines.append(
            f"{room.get('name', room_id)} [{room_id}]: queue={room.get('queue')} "
            f"serving={room.get('currently_serving') or '---'}"
        )
    if status.get("stranded"):
        lines.append(f"stranded mid-flow: {status['stranded']}")
    return "\n".join(lines)


def main() -> None:
    parser = argparse.ArgumentParser(description="Staff terminal (MQTT)")
    add_broker_args(parser)
    parser.add_argument("--username", default=DEFAULT_STAFF_USERNAME)
    parser.add_argument("--password", default=DEFAULT_STAFF_PASSWORD)
    sub = parser.add_subparsers(dest="action", required=True)

    p_mode = sub.add_parser("mode", help="switch queue mode")
    p_mode.add_argument("mode", choices=["one_stage", "two_stage"])
    sub.add_parser("call-next", help="one-stage: call the next waiting ticket")
    sub.add_parser("call-for-assignment", help="two-stage: call the next ticket to the front desk")
    p_assign = sub.add_parser("assign", help="two-stage: route the called ticket to a room")
    p_assign.add_argument("ticket_id", type=int)
    p_assign.add_argument("room_id")
    p_room = sub.add_parser("call-room", help="two-stage: call the next ticket in a room")
    p_room.add_argument("room_id")
    p_reset = sub.add_parser("reset", help="drop every ticket and start over")
    p_reset.add_argument("--yes", action="store_true", help="confirm the reset")
    sub.add_parser("status", help="print the current queue")

    args = parser.parse_args()

    if args.action == "reset" and not args.yes:
        parser.error("reset drops every ticket; pass --yes to confirm")

    console = StaffConsole(mqtt_host=args.mqtt_host, mqtt_port=args.mqtt_port, namespace=args.namespace)
    console.open(username=args.username, password=args.password)
    try:
        if args.action == "status":
            print(format_status(console.send("status")))
            return
        if args.action == "mode":
            resp = console.send("set_mode", mode=args.mode)
        elif args.action == "call-next":
            resp = console.send("call_next_one_stage")
        elif args.action == "call-for-assignment":
            resp = console.send("call_next_for_assignment")
        elif args.action == "assign":
            resp = console.send("assign_ticket", ticket_id=args.ticket_id, room_id=args.room_id)
        elif args.action == "call-room":
            resp = console.send("call_next_in_room", room_id=args.room_id)
        else:
            resp = console.send("reset_queue")
        print(f"[staff] {format_result(resp)}")
    finally:
        console.close()


if __name__ == "__main__":
    main()

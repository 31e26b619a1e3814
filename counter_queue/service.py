from __future__ import annotations

# Queue service: the MQTT-facing shell around QueueEngine.
#
# This file contains two layers:
# 1) `MqttQueueService` (message routing, easy to test with a fake client)
# 2) `main()` (wiring to a real broker)
#
# The service holds no queue rules. It decodes a request, checks the staff
# session where one is needed, calls exactly one engine method and replies.

import argparse
import threading
import time
from typing import Any, Protocol

from . import errors
from .config import (
    DEFAULT_NAMESPACE,
    DEFAULT_STAFF_PASSWORD,
    DEFAULT_STAFF_USERNAME,
    add_broker_args,
    add_engine_args,
)
from .engine import QueueEngine
from .errors import ErrorResponse
from .gate import StaffGate
from .state import EngineState, QueueMode, state_to_message
from .topics import staff_requests, status_updates, visitor_requests
from .transitions import ActionResult


class Broker(Protocol):
    def subscribe(self, topic: str) -> None: ...

    def publish(self, topic: str, message: dict[str, Any]) -> None: ...

    def add_handler(self, handler) -> None: ...


class BadRequest(ValueError):
    pass


def _int_field(msg: dict[str, Any], key: str) -> int:
    value = msg.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise BadRequest(f"{key} required")
    try:
        return int(value)
    except ValueError as e:
        raise BadRequest(f"{key} must be an integer") from e


def _str_field(msg: dict[str, Any], key: str) -> str:
    value = msg.get(key)
    if not isinstance(value, str) or not value:
        raise BadRequest(f"{key} required")
    return value


class MqttQueueService:
    """MQTT adapter around the QueueEngine."""

    def __init__(
        self,
        *,
        mqtt: Broker,
        engine: QueueEngine,
        gate: StaffGate,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self.mqtt = mqtt
        self.engine = engine
        self.gate = gate
        self.namespace = namespace

        self._stop_event = threading.Event()
        self._status_thread: threading.Thread | None = None

    def start(self, *, publish_status_every: float = 2.0) -> None:
        self.mqtt.subscribe(visitor_requests(self.namespace))
        self.mqtt.subscribe(staff_requests(self.namespace))
        self.mqtt.add_handler(self._handle_message)

        self._status_thread = threading.Thread(
            target=self._status_publisher_loop,
            args=(publish_status_every,),
            daemon=True,
        )
        self._status_thread.start()

    def stop(self) -> None:
        """Stop background threads. Call before disconnecting MQTT."""
        self._stop_event.set()
        t = self._status_thread
        if t and t.is_alive():
            t.join(timeout=1.0)

    def publish_status(self) -> None:
        self.mqtt.publish(status_updates(self.namespace), self.engine.status())

    def _status_publisher_loop(self, interval: float) -> None:
        while not self._stop_event.is_set():
            try:
                self.publish_status()
            except Exception as e:
                print(f"[service] status publish failed: {e!r}")
            self._stop_event.wait(interval)

    def _reply(self, reply_to: str, corr_id: str | None, message: dict[str, Any]) -> None:
        msg = dict(message)
        if corr_id is not None:
            msg["corr_id"] = corr_id
        self.mqtt.publish(reply_to, msg)

    # -------------------- routing --------------------

    def _handle_message(self, topic: str, msg: dict[str, Any]) -> None:
        corr_id = msg.get("corr_id") if isinstance(msg.get("corr_id"), str) else None
        reply_to = msg.get("reply_to") if isinstance(msg.get("reply_to"), str) else None
        if not reply_to:
            # Every request expects a reply; anything else isn't for us.
            return

        if topic == visitor_requests(self.namespace):
            handler = self._handle_visitor
        elif topic == staff_requests(self.namespace):
            handler = self._handle_staff
        else:
            return

        try:
            reply = handler(msg)
        except BadRequest as e:
            reply = ErrorResponse(errors.BAD_REQUEST, str(e)).to_message()

        if reply.get("type") == "error":
            print(f"[service] rejected {msg.get('type')!r}: {reply['code']} ({reply['message']})")
        self._reply(reply_to, corr_id, reply)

    def _handle_visitor(self, msg: dict[str, Any]) -> dict[str, Any]:
        mtype = msg.get("type")

        if mtype == "take_ticket":
            ticket_id = self.engine.take_ticket()
            return {"type": "ticket_issued", "ticket_id": ticket_id}

        if mtype == "ticket_status":
            ticket_id = _int_field(msg, "ticket_id")
            progress = self.engine.progress(ticket_id)
            if progress is None:
                return ErrorResponse(errors.UNKNOWN_TICKET, f"No ticket {ticket_id}").to_message()
            return {"type": "ticket_status", "ticket_id": ticket_id, "progress": progress.to_message()}

        return ErrorResponse(errors.UNKNOWN_REQUEST, f"Unknown visitor request {mtype!r}").to_message()

    def _handle_staff(self, msg: dict[str, Any]) -> dict[str, Any]:
        mtype = msg.get("type")

        # -------- session --------
        if mtype == "staff_login":
            token = self.gate.login(str(msg.get("username", "")), str(msg.get("password", "")))
            if token is None:
                return ErrorResponse(errors.INVALID_CREDENTIALS, "Invalid username or password.").to_message()
            print("[service] staff logged in")
            return {"type": "staff_session", "token": token}

        token = msg.get("token") if isinstance(msg.get("token"), str) else None
        if not self.gate.is_authorized(token):
            return ErrorResponse(errors.UNAUTHORIZED, "Staff login required").to_message()

        if mtype == "staff_logout":
            self.gate.logout(token)
            print("[service] staff logged out")
            return {"type": "staff_logged_out"}

        if mtype == "status":
            return self.engine.status()

        # -------- actions --------
        if mtype == "set_mode":
            raw = _str_field(msg, "mode")
            try:
                mode = QueueMode(raw)
            except ValueError as e:
                raise BadRequest(f"unknown mode {raw!r}") from e
            outcome = self.engine.apply("set_mode", mode)
        elif mtype == "call_next_one_stage":
            outcome = self.engine.apply("call_next_one_stage")
        elif mtype == "call_next_for_assignment":
            outcome = self.engine.apply("call_next_for_assignment")
        elif mtype == "assign_ticket":
            ticket_id, room_id = _int_field(msg, "ticket_id"), _str_field(msg, "room_id")
            outcome = self.engine.apply("assign_ticket_to_room", ticket_id, room_id)
        elif mtype == "call_next_in_room":
            outcome = self.engine.apply("call_next_in_room", _str_field(msg, "room_id"))
        elif mtype == "reset_queue":
            outcome = self.engine.apply("reset_queue")
        else:
            return ErrorResponse(errors.UNKNOWN_REQUEST, f"Unknown staff request {mtype!r}").to_message()

        return self._action_reply(str(mtype), *outcome)

    def _action_reply(self, action: str, result: ActionResult, state: EngineState) -> dict[str, Any]:
        # Reply and broadcast both describe the state this action produced.
        status = state_to_message(state)
        if result.applied:
            suffix = f" ticket={result.ticket_id}" if result.ticket_id is not None else ""
            print(f"[service] {action} applied{suffix}")
            # Displays shouldn't wait for the next periodic broadcast.
            self.mqtt.publish(status_updates(self.namespace), status)
        return {"type": "action_result", "action": action, **result.to_message(), "status": status}


def main() -> None:
    # Import MQTT dependencies only when running the real service.
    from .mqtt_client import MqttClient

    parser = argparse.ArgumentParser(description="Queue service (MQTT)")
    add_broker_args(parser)
    add_engine_args(parser)
    parser.add_argument("--staff-username", default=DEFAULT_STAFF_USERNAME)
    parser.add_argument("--staff-password", default=DEFAULT_STAFF_PASSWORD)
    parser.add_argument(
        "--publish-status-every",
        type=float,
        default=2.0,
        help="seconds between broadcast status updates",
    )
    args = parser.parse_args()

    try:
        engine = QueueEngine(rooms=args.rooms, ticket_base=args.ticket_base)
    except ValueError as e:
        parser.error(str(e))

    mqtt_client = MqttClient(client_id=f"counter-service-{int(time.time())}", host=args.mqtt_host, port=args.mqtt_port)
    mqtt_client.start()

    service = MqttQueueService(
        mqtt=mqtt_client,
        engine=engine,
        gate=StaffGate(username=args.staff_username, password=args.staff_password),
        namespace=args.namespace,
    )
    service.start(publish_status_every=args.publish_status_every)

    rooms = ", ".join(f"{d.room_id} ({d.name})" for d in engine.room_definitions)
    print(f"[service] connected to MQTT {args.mqtt_host}:{args.mqtt_port}, namespace={args.namespace}")
    print(f"[service] rooms: {rooms}; first ticket {engine.ticket_base}")

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        service.stop()
        mqtt_client.stop()


if __name__ == "__main__":
    main()

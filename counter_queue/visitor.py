from __future__ import annotations

# Visitor terminal.
#
# A visitor is a short-lived process:
# - connect to broker
# - either take a new ticket, or look up an existing one (`--ticket-id`)
# - print the answer and exit
#
# Remembering "my ticket" between runs is up to the visitor (or whatever
# kiosk/app wraps this); the service never stores who took which ticket.

import argparse
import time
from typing import Any

from .config import DEFAULT_NAMESPACE, add_broker_args
from .mqtt_client import MqttClient
from .topics import responses, visitor_requests


def _visitor_request(*, mqtt_host: str, mqtt_port: int, namespace: str, message: dict[str, Any]) -> dict[str, Any]:
    client_id = f"visitor-{int(time.time() * 1000)}"
    mqtt = MqttClient(client_id=client_id, host=mqtt_host, port=mqtt_port)
    mqtt.start()

    reply_topic = responses(client_id, namespace)
    mqtt.subscribe(reply_topic)

    try:
        return mqtt.request(
            request_topic=visitor_requests(namespace),
            response_topic=reply_topic,
            message=message,
            timeout=5.0,
        )
    finally:
        mqtt.stop()


def take_ticket(*, mqtt_host: str, mqtt_port: int, namespace: str = DEFAULT_NAMESPACE) -> int:
    resp = _visitor_request(mqtt_host=mqtt_host, mqtt_port=mqtt_port, namespace=namespace, message={"type": "take_ticket"})
    if resp.get("type") != "ticket_issued":
        raise RuntimeError(f"Ticket issuance failed: {resp}")
    return int(resp["ticket_id"])


def check_ticket(*, mqtt_host: str, mqtt_port: int, ticket_id: int, namespace: str = DEFAULT_NAMESPACE) -> dict[str, Any]:
    return _visitor_request(
        mqtt_host=mqtt_host,
        mqtt_port=mqtt_port,
        namespace=namespace,
        message={"type": "ticket_status", "ticket_id": ticket_id},
    )


def format_progress(progress: dict[str, Any]) -> str:
    ahead = progress.get("ahead")
    return (
        f"ticket {progress['ticket_id']}: {progress['message']} "
        f"| currently serving: {progress['now_serving']} "
        f"| people ahead: {ahead if ahead is not None else '---'}"
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Visitor terminal (MQTT)")
    add_broker_args(parser)
    parser.add_argument("--ticket-id", type=int, default=None, help="check this ticket instead of taking a new one")
    args = parser.parse_args()

    if args.ticket_id is None:
        ticket_id = take_ticket(mqtt_host=args.mqtt_host, mqtt_port=args.mqtt_port, namespace=args.namespace)
        print(f"[visitor] your ticket number is {ticket_id}")
        return

    resp = check_ticket(
        mqtt_host=args.mqtt_host,
        mqtt_port=args.mqtt_port,
        namespace=args.namespace,
        ticket_id=args.ticket_id,
    )
    if resp.get("type") == "ticket_status":
        print(f"[visitor] {format_progress(resp['progress'])}")
    else:
        print(f"[visitor] error: {resp}")


if __name__ == "__main__":
    main()

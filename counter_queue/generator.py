from __future__ import annotations

# Visitor generator.
#
# Simulates walk-in visitors for demos and load runs. Each simulated visitor
# takes a ticket through the same visitor request topic as the interactive
# `visitor` terminal; arrivals follow a Poisson process (see arrival.py).

import argparse
import random
import time

from .arrival import sample_interarrival_seconds
from .config import DEFAULT_NAMESPACE, add_broker_args
from .mqtt_client import MqttClient
from .topics import responses, visitor_requests


def run_generator(
    *,
    mqtt_host: str,
    mqtt_port: int,
    namespace: str = DEFAULT_NAMESPACE,
    visitors_per_minute: float,
    max_visitors: int | None = None,
    seed: int | None = None,
) -> list[int]:
    """Issue tickets until interrupted (or `max_visitors` is reached).

    Returns the ticket numbers handed out.
    """
    rng = random.Random(seed) if seed is not None else None

    client_id = f"generator-{int(time.time())}"
    mqtt = MqttClient(client_id=client_id, host=mqtt_host, port=mqtt_port)
    mqtt.start()

    reply_topic = responses(client_id, namespace)
    mqtt.subscribe(reply_topic)

    print(
        f"[generator] connected to MQTT {mqtt_host}:{mqtt_port}, namespace={namespace}, "
        f"rate={visitors_per_minute} visitors/min"
    )

    issued: list[int] = []
    try:
        while max_visitors is None or len(issued) < max_visitors:
            dt = sample_interarrival_seconds(visitors_per_minute=visitors_per_minute, rng=rng)
            time.sleep(dt)

            resp = mqtt.request(
                request_topic=visitor_requests(namespace),
                response_topic=reply_topic,
                message={"type": "take_ticket"},
                timeout=5.0,
            )
            if resp.get("type") == "ticket_issued":
                issued.append(int(resp["ticket_id"]))
                print(f"[generator] visitor took ticket {resp['ticket_id']} (dt={dt:0.1f}s)")
            else:
                print(f"[generator] error {resp} (dt={dt:0.1f}s)")

        print(f"[generator] reached max_visitors={max_visitors}, stopping")
    except KeyboardInterrupt:
        pass
    finally:
        mqtt.stop()
    return issued


def main() -> None:
    parser = argparse.ArgumentParser(description="Visitor generator (Poisson arrivals over MQTT)")
    add_broker_args(parser)
    parser.add_argument(
        "--rate",
        type=float,
        required=True,
        help="arrival rate in visitors/minute (Poisson process)",
    )
    parser.add_argument("--max-visitors", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    run_generator(
        mqtt_host=args.mqtt_host,
        mqtt_port=args.mqtt_port,
        namespace=args.namespace,
        visitors_per_minute=args.rate,
        max_visitors=args.max_visitors,
        seed=args.seed,
    )


if __name__ == "__main__":
    main()

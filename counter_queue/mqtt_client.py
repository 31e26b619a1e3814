"""MQTT helper built on paho-mqtt.

- `MqttClient` owns the connection and paho's background network loop.
- `publish()` / handlers speak JSON objects, not raw payloads.
- `request()` layers blocking request/response on top of pub/sub: the message
  carries a `corr_id` and a `reply_to` topic, and the caller waits for the
  reply with the same `corr_id`.

Subscriptions are remembered and re-issued whenever paho reconnects, so a
broker restart doesn't silently leave the service deaf.
"""

from __future__ import annotations

import json
import queue
import threading
import uuid
from typing import Any, Callable

import paho.mqtt.client as mqtt

MessageHandler = Callable[[str, dict[str, Any]], None]


class MqttClient:
    """paho-mqtt wrapper with JSON publish/subscribe and correlated requests."""

    def __init__(
        self,
        *,
        client_id: str,
        host: str,
        port: int,
        keepalive: int = 30,
        qos: int = 0,
    ) -> None:
        self.client_id = client_id
        self.host = host
        self.port = port
        self.keepalive = keepalive
        self.qos = qos

        self._client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id, clean_session=True)
        self._client.on_connect = self._on_connect
        self._client.on_message = self._on_message

        self._lock = threading.Lock()
        self._handlers: list[MessageHandler] = []
        self._topics: list[str] = []
        self._waiting: dict[str, "queue.Queue[dict[str, Any]]"] = {}
        self._running = False

    def start(self) -> None:
        if self._running:
            return
        self._client.connect(self.host, self.port, keepalive=self.keepalive)
        self._client.loop_start()
        self._running = True

    def stop(self) -> None:
        if not self._running:
            return
        self._client.loop_stop()
        self._client.disconnect()
        self._running = False

    def add_handler(self, handler: MessageHandler) -> None:
        with self._lock:
            self._handlers.append(handler)

    def subscribe(self, topic: str) -> None:
        with self._lock:
            if topic not in self._topics:
                self._topics.append(topic)
        self._client.subscribe(topic, qos=self.qos)

    def publish(self, topic: str, message: dict[str, Any]) -> None:
        payload = json.dumps(message, separators=(",", ":"))
        self._client.publish(topic, payload=payload.encode("utf-8"), qos=self.qos)

    def request(
        self,
        *,
        request_topic: str,
        response_topic: str,
        message: dict[str, Any],
        timeout: float = 5.0,
    ) -> dict[str, Any]:
        """Publish `message` and block until the correlated reply arrives.

        The caller must already be subscribed to `response_topic`.
        """
        corr_id = uuid.uuid4().hex
        inbox: "queue.Queue[dict[str, Any]]" = queue.Queue(maxsize=1)
        with self._lock:
            self._waiting[corr_id] = inbox

        try:
            self.publish(request_topic, {**message, "corr_id": corr_id, "reply_to": response_topic})
            return inbox.get(timeout=timeout)
        except queue.Empty as e:
            raise TimeoutError(f"No reply to {message.get('type')!r} within {timeout}s") from e
        finally:
            with self._lock:
                self._waiting.pop(corr_id, None)

    # -------------------- paho callbacks (network thread) --------------------

    def _on_connect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if reason_code.is_failure:
            return
        with self._lock:
            topics = list(self._topics)
        for topic in topics:
            client.subscribe(topic, qos=self.qos)

    def _on_message(self, client, userdata, msg: mqtt.MQTTMessage) -> None:
        try:
            data = json.loads(msg.payload.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            return
        if not isinstance(data, dict):
            return

        corr_id = data.get("corr_id")
        if isinstance(corr_id, str):
            with self._lock:
                inbox = self._waiting.get(corr_id)
            if inbox is not None:
                try:
                    inbox.put_nowait(data)
                except queue.Full:
                    pass
                return

        with self._lock:
            handlers = list(self._handlers)
        for h in handlers:
            try:
                h(msg.topic, data)
            except Exception as e:
                # A failing handler must not take down paho's network thread.
                print(f"[mqtt {self.client_id}] handler error on {msg.topic}: {e!r}")

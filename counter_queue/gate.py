from __future__ import annotations

# Staff gate.
#
# Decides *who* may send staff actions to the service; the engine itself never
# checks. A successful login hands out an opaque session token that the staff
# terminal sends along with every action.
#
# Sessions live here, not in the engine, so resetting the queue leaves staff
# logged in.

import hmac
import threading
import uuid


class StaffGate:
    def __init__(self, *, username: str, password: str) -> None:
        self._username = username
        self._password = password
        self._lock = threading.Lock()
        self._sessions: set[str] = set()

    def login(self, username: str, password: str) -> str | None:
        """Return a new session token, or None if the credentials don't match."""
        ok_user = hmac.compare_digest(username.encode("utf-8"), self._username.encode("utf-8"))
        ok_pass = hmac.compare_digest(password.encode("utf-8"), self._password.encode("utf-8"))
        if not (ok_user and ok_pass):
            return None
        token = str(uuid.uuid4())
        with self._lock:
            self._sessions.add(token)
        return token

    def logout(self, token: str) -> bool:
        with self._lock:
            if token in self._sessions:
                self._sessions.discard(token)
                return True
            return False

    def is_authorized(self, token: str | None) -> bool:
        if not token:
            return False
        with self._lock:
            return token in self._sessions

    @property
    def active_sessions(self) -> int:
        with self._lock:
            return len(self._sessions)

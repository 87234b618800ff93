from __future__ import annotations
import threading

OK = 200
UNAVAILABLE = 503

def _flip(code: int) -> int:
    if code == OK:
        return UNAVAILABLE
    if code == UNAVAILABLE:
        return OK
    return code

class HealthState:
    """Health and readiness of the demo server, kept as HTTP status codes."""

    def __init__(self, healthz: int = OK, readiness: int = OK):
        self._lock = threading.Lock()
        self._healthz = healthz
        self._readiness = readiness

    def healthz_status(self) -> int:
        with self._lock:
            return self._healthz

    def readiness_status(self) -> int:
        with self._lock:
            return self._readiness

    def set_healthz_status(self, code: int) -> None:
        with self._lock:
            self._healthz = code

    def set_readiness_status(self, code: int) -> None:
        with self._lock:
            self._readiness = code

    def toggle_healthz(self) -> int:
        with self._lock:
            self._healthz = _flip(self._healthz)
            return self._healthz

    def toggle_readiness(self) -> int:
        with self._lock:
            self._readiness = _flip(self._readiness)
            return self._readiness

    def shutdown(self) -> None:
        with self._lock:
            self._healthz = UNAVAILABLE
            self._readiness = UNAVAILABLE

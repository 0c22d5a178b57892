"""In-memory provider for tests."""

from typing import Dict, List, Optional, Tuple

from ..errors import MonitorNotFoundError
from ..models import Monitor
from . import Provider


class FakeProvider(Provider):
    """Keeps monitors in a dict and records every call.

    Monitors get sequential IDs on creation. ``errors`` maps a method name to
    an exception raised by the next calls of that method.
    """

    def __init__(self, monitors: Optional[List[Monitor]] = None, ip_source_ranges: Optional[List[str]] = None):
        self.monitors: Dict[str, Monitor] = {m.name: m for m in monitors or []}
        self.ip_source_ranges = list(ip_source_ranges or [])
        self.calls: List[Tuple[str, object]] = []
        self.errors: Dict[str, Exception] = {}
        self._next_id = 1

    def _record(self, method: str, arg: object) -> None:
        self.calls.append((method, arg))
        if method in self.errors:
            raise self.errors[method]

    def called(self, method: str) -> List[object]:
        return [arg for name, arg in self.calls if name == method]

    def create(self, monitor: Monitor) -> None:
        self._record("create", monitor)
        created = monitor.model_copy(update={"id": str(self._next_id)})
        self._next_id += 1
        self.monitors[created.name] = created

    def get(self, name: str) -> Monitor:
        self._record("get", name)
        if name not in self.monitors:
            raise MonitorNotFoundError(name)
        return self.monitors[name]

    def update(self, monitor: Monitor) -> None:
        self._record("update", monitor)
        self.monitors[monitor.name] = monitor

    def delete(self, name: str) -> None:
        self._record("delete", name)
        if name not in self.monitors:
            raise MonitorNotFoundError(name)
        del self.monitors[name]

    def get_ip_source_ranges(self, monitor: Monitor) -> List[str]:
        self._record("get_ip_source_ranges", monitor)
        return list(self.ip_source_ranges)

import dataclasses
import os as _os
import sys

import pytest

# Ensure project root is importable (so `import cli` works without installing the package)
_project_root = _os.path.dirname(_os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from svcheal import db, reconciler  # noqa: E402
from svcheal.control import ServiceAccessError  # noqa: E402
from svcheal.models import ServiceDescriptor, ServiceState  # noqa: E402
from svcheal.settings import settings  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the event log at a per-test sqlite file and keep email off."""
    test_settings = dataclasses.replace(
        settings,
        db_path=str(tmp_path / "events.db"),
        enable_event_log=True,
        enable_email=False,
    )
    monkeypatch.setattr(db, "settings", test_settings)
    monkeypatch.setattr(reconciler, "settings", test_settings)
    return test_settings


class FakeControl:
    """Scriptable in-memory service manager.

    `states` maps name -> ServiceState; names missing from it do not exist.
    """

    def __init__(
        self,
        states=None,
        start_works=True,
        restart_works=True,
        unreachable=(),
        failing_commands=(),
    ):
        self.states = dict(states or {})
        self.start_works = start_works
        self.restart_works = restart_works
        self.unreachable = set(unreachable)
        self.failing_commands = set(failing_commands)
        self.calls = []

    def query(self, name):
        self.calls.append(("query", name))
        if name in self.unreachable:
            raise ServiceAccessError("Access is denied")
        state = self.states.get(name)
        if state is None:
            return ServiceDescriptor(name=name, state=ServiceState.NOT_FOUND, detail="not-found")
        return ServiceDescriptor(name=name, state=state, detail=state.value)

    def start(self, name):
        self.calls.append(("start", name))
        if name in self.failing_commands:
            raise ServiceAccessError("start job failed")
        if self.start_works:
            self.states[name] = ServiceState.RUNNING

    def restart(self, name, force=True):
        self.calls.append(("restart", name, force))
        if name in self.failing_commands:
            raise ServiceAccessError("restart job failed")
        self.states[name] = ServiceState.RUNNING if self.restart_works else ServiceState.NOT_RUNNING


@pytest.fixture
def fake_control():
    return FakeControl

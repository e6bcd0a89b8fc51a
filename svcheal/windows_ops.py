from __future__ import annotations

import pywintypes
import win32service
import win32serviceutil

from .control import ServiceAccessError
from .models import ServiceDescriptor, ServiceState
from .settings import settings


ERROR_SERVICE_DOES_NOT_EXIST = 1060

_STATE_NAMES = {
    win32service.SERVICE_STOPPED: "STOPPED",
    win32service.SERVICE_START_PENDING: "START_PENDING",
    win32service.SERVICE_STOP_PENDING: "STOP_PENDING",
    win32service.SERVICE_RUNNING: "RUNNING",
    win32service.SERVICE_CONTINUE_PENDING: "CONTINUE_PENDING",
    win32service.SERVICE_PAUSE_PENDING: "PAUSE_PENDING",
    win32service.SERVICE_PAUSED: "PAUSED",
}


class WindowsControl:
    """Service control through the Windows Service Control Manager."""

    def __init__(self, machine: str | None = None, timeout_s: int | None = None):
        self.machine = machine
        self.timeout_s = timeout_s if timeout_s is not None else settings.action_timeout_s

    def query(self, name: str) -> ServiceDescriptor:
        try:
            status = win32serviceutil.QueryServiceStatus(name, self.machine)
        except pywintypes.error as e:
            if e.winerror == ERROR_SERVICE_DOES_NOT_EXIST:
                return ServiceDescriptor(name=name, state=ServiceState.NOT_FOUND, detail="does not exist")
            raise ServiceAccessError(f"Querying '{name}' failed: {e.strerror} ({e.winerror})") from e

        current = status[1]
        detail = _STATE_NAMES.get(current, str(current))
        if current == win32service.SERVICE_RUNNING:
            return ServiceDescriptor(name=name, state=ServiceState.RUNNING, detail=detail)
        return ServiceDescriptor(name=name, state=ServiceState.NOT_RUNNING, detail=detail)

    def start(self, name: str) -> None:
        try:
            current = win32serviceutil.QueryServiceStatus(name, self.machine)[1]
            if current == win32service.SERVICE_PAUSED:
                # A paused service rejects StartService (1056); it has to be continued instead.
                win32serviceutil.ControlService(name, win32service.SERVICE_CONTROL_CONTINUE, self.machine)
            else:
                win32serviceutil.StartService(name, None, self.machine)
            self._wait_running(name)
        except pywintypes.error as e:
            raise ServiceAccessError(f"Starting '{name}' failed: {e.strerror} ({e.winerror})") from e

    def restart(self, name: str, force: bool = True) -> None:
        try:
            if force:
                win32serviceutil.StopServiceWithDeps(name, self.machine, self.timeout_s)
            else:
                win32serviceutil.StopService(name, self.machine)
                win32serviceutil.WaitForServiceStatus(name, win32service.SERVICE_STOPPED, self.timeout_s, self.machine)
            win32serviceutil.StartService(name, None, self.machine)
            self._wait_running(name)
        except pywintypes.error as e:
            raise ServiceAccessError(f"Restarting '{name}' failed: {e.strerror} ({e.winerror})") from e

    def _wait_running(self, name: str) -> None:
        # StartService returns once the request is accepted, usually in START_PENDING.
        win32serviceutil.WaitForServiceStatus(name, win32service.SERVICE_RUNNING, self.timeout_s, self.machine)

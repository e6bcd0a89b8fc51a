from __future__ import annotations

from typing import Protocol

from .models import ServiceDescriptor


BACKENDS = ("systemd", "docker", "windows")


class ServiceControlError(Exception):
    pass


class ServiceAccessError(ServiceControlError):
    """The service manager could not be reached or refused the call."""


class ServiceControl(Protocol):
    """Query/start/restart capability the reconciler depends on.

    query() reports unknown names as ServiceState.NOT_FOUND instead of raising;
    every platform failure surfaces as ServiceAccessError.
    """

    def query(self, name: str) -> ServiceDescriptor: ...

    def start(self, name: str) -> None: ...

    def restart(self, name: str, force: bool = True) -> None: ...


def get_control(backend: str) -> ServiceControl:
    backend = backend.strip().lower()
    if backend == "systemd":
        from .systemd_ops import SystemdControl

        return SystemdControl()
    if backend == "docker":
        from .docker_ops import DockerControl

        return DockerControl()
    if backend == "windows":
        from .windows_ops import WindowsControl

        return WindowsControl()
    raise ValueError(f"Unknown service backend '{backend}'. Choose one of: {', '.join(BACKENDS)}.")

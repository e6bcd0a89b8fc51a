from __future__ import annotations

import subprocess

from .control import ServiceAccessError
from .models import ServiceDescriptor, ServiceState
from .settings import settings


def unit_name(name: str) -> str:
    """`nginx` -> `nginx.service`; names that already carry a unit suffix are kept."""
    name = name.strip()
    return name if "." in name else f"{name}.service"


def parse_show_output(text: str) -> dict[str, str]:
    props: dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            props[key.strip()] = value.strip()
    return props


class SystemdControl:
    """Service control backed by `systemctl`."""

    def __init__(self, systemctl: str | None = None, timeout_s: float | None = None):
        self.systemctl = systemctl or settings.systemctl
        self.timeout_s = timeout_s if timeout_s is not None else settings.action_timeout_s

    def _run(self, *args: str) -> subprocess.CompletedProcess[str]:
        cmd = [self.systemctl, *args]
        try:
            p = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout_s)
        except FileNotFoundError as e:
            raise ServiceAccessError(f"'{self.systemctl}' not found on PATH; cannot manage services") from e
        except subprocess.TimeoutExpired as e:
            raise ServiceAccessError(f"'{' '.join(cmd)}' timed out after {self.timeout_s}s") from e
        if p.returncode != 0:
            err = (p.stderr or p.stdout or "").strip()
            raise ServiceAccessError(f"'{' '.join(cmd)}' failed (rc={p.returncode}): {err}")
        return p

    def query(self, name: str) -> ServiceDescriptor:
        unit = unit_name(name)
        p = self._run("show", unit, "--property=LoadState,ActiveState,SubState")
        props = parse_show_output(p.stdout)

        if props.get("LoadState") == "not-found":
            return ServiceDescriptor(name=name, state=ServiceState.NOT_FOUND, detail="not-found")

        active = props.get("ActiveState", "")
        detail = f"{active}/{props.get('SubState', '')}"
        if active == "active":
            return ServiceDescriptor(name=name, state=ServiceState.RUNNING, detail=detail)
        return ServiceDescriptor(name=name, state=ServiceState.NOT_RUNNING, detail=detail)

    def start(self, name: str) -> None:
        self._run("start", unit_name(name))

    def restart(self, name: str, force: bool = True) -> None:
        # systemctl restart already stops and starts dependants, so force needs no extra flag.
        self._run("restart", unit_name(name))

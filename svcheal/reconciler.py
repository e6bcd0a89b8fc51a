from __future__ import annotations

import sys
import time
from collections.abc import Callable

from . import db
from .alerts import send_outcome_alert
from .control import ServiceControl, ServiceControlError
from .models import AggregateOutcome, ReconciliationResult, RunConfig, ServiceOutcome, ServiceState
from .settings import settings


# Results that set the "action failed" flag. NOT_FOUND sets "invalid name" instead.
_ACTION_FAILURES = frozenset(
    {
        ReconciliationResult.ACCESS_ERROR,
        ReconciliationResult.ACTION_FAILED,
        ReconciliationResult.SKIPPED_NOT_RUNNING,
    }
)
_SUCCESSES = frozenset({ReconciliationResult.STARTED, ReconciliationResult.RESTARTED})


class Reconciler:
    """Brings each named service to the running state, once.

    Running services are restarted, stopped ones are started only when
    `force_start` is set. Failures are recorded per service and never stop
    the pass.
    """

    def __init__(self, control: ServiceControl, sleep: Callable[[float], None] | None = None):
        self.control = control
        self.sleep = sleep or time.sleep

    def run(self, config: RunConfig) -> AggregateOutcome:
        if config.delay_s > 0:
            self._note("INFO", f"Waiting {config.delay_s:g}s before reconciling {len(config.services)} service(s)")
        self.sleep(config.delay_s)

        results = [self._reconcile_one(name.strip(), config.force_start) for name in config.services]
        outcome = AggregateOutcome(
            results=tuple(results),
            invalid_name=any(r.result == ReconciliationResult.NOT_FOUND for r in results),
            action_failed=any(r.result in _ACTION_FAILURES for r in results),
        )
        self._maybe_email(outcome)
        return outcome

    def _reconcile_one(self, name: str, force_start: bool) -> ServiceOutcome:
        try:
            desc = self.control.query(name)
        except ServiceControlError as e:
            return self._record(name, ReconciliationResult.ACCESS_ERROR, f"Cannot query service: {e}")

        if desc.state == ServiceState.NOT_FOUND:
            return self._record(name, ReconciliationResult.NOT_FOUND, "Service not found")

        if desc.state != ServiceState.RUNNING:
            if not force_start:
                return self._record(
                    name,
                    ReconciliationResult.SKIPPED_NOT_RUNNING,
                    f"Service is not running ({desc.detail}); pass --force-start to start it",
                )
            self._note("INFO", f"Service is not running ({desc.detail}), starting", name)
            return self._act_and_verify(name, self.control.start, ReconciliationResult.STARTED, "start")

        self._note("INFO", f"Service is running ({desc.detail}), restarting", name)
        return self._act_and_verify(
            name, lambda n: self.control.restart(n, force=True), ReconciliationResult.RESTARTED, "restart"
        )

    def _act_and_verify(
        self,
        name: str,
        action: Callable[[str], None],
        success: ReconciliationResult,
        verb: str,
    ) -> ServiceOutcome:
        try:
            action(name)
            after = self.control.query(name)
        except ServiceControlError as e:
            return self._record(name, ReconciliationResult.ACTION_FAILED, f"Failed to {verb}: {e}")

        if after.state == ServiceState.RUNNING:
            return self._record(name, success, f"Service {success.value} and running")
        return self._record(
            name,
            ReconciliationResult.ACTION_FAILED,
            f"Service is not running after {verb} ({after.detail or after.state.value})",
        )

    def _record(self, name: str, result: ReconciliationResult, message: str) -> ServiceOutcome:
        level = "INFO" if result in _SUCCESSES else "WARN"
        self._note(level, message, name)
        return ServiceOutcome(name=name, result=result, message=message)

    def _note(self, level: str, message: str, service: str | None = None) -> None:
        line = f"[{service}] {message}" if service else message
        if level == "INFO":
            print(line)
        else:
            print(f"WARNING: {line}", file=sys.stderr)
        db.log_event(level, message, service_name=service)

    def _maybe_email(self, outcome: AggregateOutcome) -> None:
        if outcome.ok or not settings.enable_email:
            return
        if not send_outcome_alert(outcome):
            self._note("WARN", "Failure alert email could not be sent")


def reconcile(
    config: RunConfig,
    control: ServiceControl,
    sleep: Callable[[float], None] | None = None,
) -> AggregateOutcome:
    return Reconciler(control, sleep=sleep).run(config)

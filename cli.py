from __future__ import annotations

import argparse
import json
import sys

from pydantic import ValidationError

from svcheal import db
from svcheal.control import BACKENDS, get_control
from svcheal.models import RunConfig, parse_service_names
from svcheal.reconciler import reconcile
from svcheal.settings import settings


def _print(obj) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def _service_list(raw: str) -> tuple[str, ...]:
    names = parse_service_names(raw)
    if not names:
        raise argparse.ArgumentTypeError("expected at least one service name")
    return names


def _delay(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid delay: {raw!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError("delay must be >= 0")
    return value


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Ensure named services are running")
    sub = p.add_subparsers(dest="cmd", required=True)

    s_run = sub.add_parser("run", help="Restart running services, optionally start stopped ones")
    s_run.add_argument("--services", required=True, type=_service_list, help="Comma-separated service names")
    s_run.add_argument("--delay", type=_delay, default=settings.delay_s, help="Seconds to wait before acting")
    s_run.add_argument("--force-start", action="store_true", help="Start services that are not running")
    s_run.add_argument("--backend", choices=BACKENDS, default=settings.backend, help="Service manager to drive")
    s_run.add_argument("--json", action="store_true", help="Print the outcome as JSON")

    s_ev = sub.add_parser("events", help="Show recent events")
    s_ev.add_argument("--limit", type=int, default=20)

    args = p.parse_args(argv)

    if args.cmd == "events":
        _print(db.latest_events(args.limit))
        return 0

    if args.cmd == "run":
        # Defaults taken from SVCHEAL_* variables never pass through the argparse type checks.
        try:
            config = RunConfig(services=args.services, delay_s=args.delay, force_start=args.force_start)
        except ValidationError as e:
            problems = "; ".join(f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}" for err in e.errors())
            p.error(f"invalid run configuration: {problems}")
        try:
            control = get_control(args.backend)
        except ValueError as e:
            p.error(str(e))
        except ImportError as e:
            p.error(f"backend '{args.backend}' is not available on this host: {e}")

        outcome = reconcile(config, control)
        if args.json:
            _print(outcome.to_dict())
        if outcome.ok:
            print(f"All {len(outcome.results)} service(s) are running.")
        return outcome.exit_code

    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))

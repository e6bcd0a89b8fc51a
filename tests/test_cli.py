import dataclasses
import json

import pytest

import cli
from svcheal import reconciler
from svcheal.models import ServiceState


@pytest.fixture
def use_control(monkeypatch):
    """Make the CLI drive a fake service manager and skip real sleeping."""

    def _install(control):
        monkeypatch.setattr(cli, "get_control", lambda backend: control)
        monkeypatch.setattr(reconciler.time, "sleep", lambda s: None)
        return control

    return _install


def test_run_success(use_control, fake_control, capsys):
    use_control(fake_control({"web": ServiceState.RUNNING}))
    code = cli.main(["run", "--services", "web", "--delay", "0"])
    assert code == 0
    assert "All 1 service(s) are running." in capsys.readouterr().out


def test_run_invalid_name_exit_code(use_control, fake_control):
    use_control(fake_control({"Svc1": ServiceState.RUNNING}))
    assert cli.main(["run", "--services", "Svc1,Svc2", "--delay", "0"]) == 2


def test_run_force_start_failure_exit_code(use_control, fake_control):
    use_control(fake_control({"Svc1": ServiceState.NOT_RUNNING}, start_works=False))
    assert cli.main(["run", "--services", "Svc1", "--delay", "0", "--force-start"]) == 11


def test_run_json_output(use_control, fake_control, capsys):
    use_control(fake_control({"a": ServiceState.NOT_RUNNING}))
    code = cli.main(["run", "--services", " a , b ", "--delay", "0", "--force-start", "--json"])
    out = capsys.readouterr().out

    payload = json.loads(out[out.index("{") : out.rindex("}") + 1])
    assert code == 2
    assert [r["result"] for r in payload["results"]] == ["started", "not_found"]
    assert payload["invalid_name"] is True
    assert payload["exit_code"] == 2


def test_default_delay_is_passed_to_sleep(monkeypatch, fake_control):
    slept = []
    monkeypatch.setattr(cli, "get_control", lambda backend: fake_control({"a": ServiceState.RUNNING}))
    monkeypatch.setattr(reconciler.time, "sleep", slept.append)

    cli.main(["run", "--services", "a", "--delay", "1.5"])
    assert slept == [1.5]


@pytest.mark.parametrize(
    "argv",
    [
        ["run", "--services", "a", "--delay", "-1"],
        ["run", "--services", "a", "--delay", "soon"],
        ["run", "--services", " , "],
        ["run", "--services", "a", "--backend", "launchd"],
        ["run"],
    ],
)
def test_bad_arguments_are_rejected(argv, monkeypatch):
    monkeypatch.setattr(cli, "get_control", lambda backend: pytest.fail("no service should be touched"))
    with pytest.raises(SystemExit) as exc:
        cli.main(argv)
    assert exc.value.code == 2


def test_events_command(use_control, fake_control, capsys):
    use_control(fake_control({}))
    cli.main(["run", "--services", "ghost", "--delay", "0"])
    capsys.readouterr()

    assert cli.main(["events", "--limit", "5"]) == 0
    rows = json.loads(capsys.readouterr().out)
    assert rows[0]["service_name"] == "ghost"
    assert rows[0]["level"] == "WARN"


def test_negative_delay_from_environment_is_a_usage_error(monkeypatch, capsys):
    monkeypatch.setattr(cli, "settings", dataclasses.replace(cli.settings, delay_s=-5.0))
    monkeypatch.setattr(cli, "get_control", lambda backend: pytest.fail("no service should be touched"))

    with pytest.raises(SystemExit) as exc:
        cli.main(["run", "--services", "a"])
    assert exc.value.code == 2
    assert "invalid run configuration: delay_s" in capsys.readouterr().err

import json
import sys

import pytest

from pysway.client import format_output, main
from pysway.models import ExitCode, Mode, Output

from .testtools import FakeSway, make_frame


@pytest.fixture
def run(capsys):
    "Run the CLI, return (exit code, stdout)"

    def run(*argv):
        with pytest.raises(SystemExit) as exc:
            main(list(argv))
        return exc.value.code, capsys.readouterr().out

    return run


@pytest.fixture
def sway_path(tmp_path, no_swaysock):
    return tmp_path / "sway.sock"


def test_outputs(run, sway_path, outputs_reply, monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    with FakeSway(sway_path, outputs_reply):
        code, out = run("--socket", str(sway_path), "outputs")
    assert code == ExitCode.SUCCESS
    assert "DP-1 (on)" in out
    assert "HDMI-A-1 (off)" in out
    assert "  * 3440x1440 @ 99.982 Hz" in out
    assert "    3440x1440 @ 59.973 Hz" in out
    assert "Microstep MAG342CQPV DB6H513700137" in out


def test_outputs_is_the_default(run, sway_path, outputs_reply, monkeypatch):
    monkeypatch.setenv("SWAYSOCK", str(sway_path))
    with FakeSway(sway_path, outputs_reply):
        code, out = run()
    assert code == ExitCode.SUCCESS
    assert "HDMI-A-1" in out


def test_outputs_json(run, sway_path, outputs_reply):
    with FakeSway(sway_path, outputs_reply):
        code, out = run("--socket", str(sway_path), "outputs", "--json")
    assert code == ExitCode.SUCCESS
    data = json.loads(out)
    assert data[0]["current_mode"] == {"width": 3440, "height": 1440, "refresh": 99982}
    # only modelled fields are kept
    assert "rect" not in data[0]


def test_raw(run, sway_path):
    with FakeSway(sway_path, make_frame(7, '{"human_readable": "1.9"}')) as sway:
        code, out = run("--socket", str(sway_path), "raw", "get-version")
    assert code == ExitCode.SUCCESS
    assert json.loads(out) == {"human_readable": "1.9"}
    assert sway.received[10:14] == (7).to_bytes(4, sys.byteorder)


@pytest.mark.parametrize("name", ["get_windows", "42", "²"])
def test_raw_unknown_type(run, name):
    code, _ = run("raw", name)
    assert code == ExitCode.USAGE_ERROR


def test_no_swaysock(run, no_swaysock):
    code, out = run("outputs")
    assert code == ExitCode.ENV_ERROR
    assert out == ""


def test_connection_error(run, sway_path):
    code, _ = run("--socket", str(sway_path))
    assert code == ExitCode.CONNECTION_ERROR


def test_protocol_error(run, sway_path):
    with FakeSway(sway_path, make_frame(4, "{}")):
        code, _ = run("--socket", str(sway_path))
    assert code == ExitCode.PROTOCOL_ERROR


def test_bad_config(run, tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[ipc]\ntimeout = -1\n")
    code, _ = run("--config", str(path), "--socket", "/tmp/x.sock")
    assert code == ExitCode.USAGE_ERROR


def test_print_completion(run):
    code, out = run("--print-completion", "bash")
    assert code == 0
    assert "pysway" in out


def test_format_output():
    current = Mode(1920, 1200, 59950)
    output = Output(
        active=True, id=3, name="eDP-1", make="", model="", serial="", scale=1.25, transform="normal", current_mode=current, modes=[]
    )
    text = format_output(output)
    assert text.splitlines() == [
        "eDP-1 (on)",
        "  unknown display",
        "  scale 1.25, transform normal",
        "  * 1920x1200 @ 59.950 Hz",
    ]
    assert "\x1b[" in format_output(output, color=True)


def test_empty_socket_option(run, no_swaysock, caplog):
    code, _ = run("--socket", "")
    assert code == ExitCode.USAGE_ERROR
    assert "given explicitly" in caplog.text
    assert "ipc.socket" not in caplog.text

import io
import logging

import pytest

import pysway
from pysway.errors import ChannelError
from pysway.ipc import Connection
from pysway.logging_setup import ScreenFormatter, debug_requested, get_logger, init_logger


def test_library_loggers_are_namespaced():
    assert get_logger().name == "pysway"
    assert get_logger("ipc").name == "pysway.ipc"
    assert get_logger("pysway.config").name == "pysway.config"
    assert get_logger("ipc").propagate


def test_package_logger_has_a_null_handler():
    logger = logging.getLogger(pysway.__name__)
    assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)
    assert not any(type(h) is logging.StreamHandler for h in logger.handlers)


def test_get_logger_leaves_the_configuration_alone(package_logger):
    handler = logging.NullHandler()
    ipc = logging.getLogger("pysway.ipc")
    ipc.addHandler(handler)
    try:
        ipc.setLevel(logging.ERROR)
        assert get_logger("ipc") is ipc
        assert ipc.handlers == [handler]
        assert ipc.level == logging.ERROR
    finally:
        ipc.removeHandler(handler)
        ipc.setLevel(logging.NOTSET)


def test_connect_failure_is_silent_without_handlers(tmp_path, monkeypatch, capsys, package_logger):
    # stop at the package logger, as if the application never configured logging
    monkeypatch.setattr(package_logger, "propagate", False)
    last_resort = logging.StreamHandler(io.StringIO())
    monkeypatch.setattr(logging, "lastResort", last_resort)
    with pytest.raises(ChannelError):
        Connection.connect(tmp_path / "nope.sock")
    assert last_resort.stream.getvalue() == ""
    assert capsys.readouterr().err == ""


def test_connect_failure_reaches_the_application(tmp_path, caplog):
    with caplog.at_level(logging.CRITICAL, logger="pysway"), pytest.raises(ChannelError):
        Connection.connect(tmp_path / "nope.sock")
    (record,) = caplog.records
    assert record.name == "pysway.ipc"
    assert "Cannot connect" in record.getMessage()


def test_init_logger_with_file(tmp_path, monkeypatch):
    monkeypatch.delenv("DEBUG", raising=False)
    log_file = tmp_path / "pysway.log"
    logger = init_logger(str(log_file))
    assert logger is logging.getLogger("pysway")
    assert logger.level == logging.WARNING
    assert sum(not isinstance(h, logging.NullHandler) for h in logger.handlers) == 2

    get_logger("ipc").warning("sway is %s", "gone")
    get_logger("ipc").debug("not written")
    for handler in logger.handlers:
        handler.flush()
    content = log_file.read_text()
    assert "[WARNING] pysway.ipc :: sway is gone" in content
    assert "not written" not in content

    # repeated initialization replaces the handlers
    init_logger(force_debug=True)
    assert sum(not isinstance(h, logging.NullHandler) for h in logger.handlers) == 1
    assert logger.level == logging.DEBUG


def test_debug_environment(monkeypatch):
    assert debug_requested({"DEBUG": "1"})
    assert not debug_requested({"DEBUG": ""})
    assert not debug_requested({})
    monkeypatch.setenv("DEBUG", "1")
    assert init_logger().level == logging.DEBUG


def test_screen_formatter_colors():
    record = logging.LogRecord("pysway.ipc", logging.ERROR, __file__, 1, "bad %s", ("magic",), None)
    assert ScreenFormatter(color=True).format(record) == "\x1b[31;2mbad magic\x1b[0m"
    assert ScreenFormatter().format(record) == "bad magic"
    assert ScreenFormatter(verbose=True).format(record).startswith("     pysway.ipc - bad magic // ")

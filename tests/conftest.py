" generic fixtures "
import json
import logging
import socket
from copy import deepcopy

import pytest

from .testtools import make_frame

SAMPLE_OUTPUT = {
    "active": True,
    "id": 1,
    "name": "eDP-1",
    "modes": [{"width": 1920, "height": 1080, "refresh": 60000}],
    "make": "X",
    "model": "Y",
    "serial": "Z",
    "scale": 1.0,
    "transform": "normal",
    "current_mode": {"width": 1920, "height": 1080, "refresh": 60000},
}

# As sent by sway 1.9, with extra keys the client doesn't model
SWAY_OUTPUTS = [
    {
        "id": 4,
        "type": "output",
        "orientation": "none",
        "name": "DP-1",
        "rect": {"x": 0, "y": 0, "width": 3440, "height": 1440},
        "active": True,
        "dpms": True,
        "power": True,
        "primary": False,
        "make": "Microstep",
        "model": "MAG342CQPV",
        "serial": "DB6H513700137",
        "modes": [
            {"width": 3440, "height": 1440, "refresh": 59973, "picture_aspect_ratio": "none"},
            {"width": 3440, "height": 1440, "refresh": 99982, "picture_aspect_ratio": "none"},
            {"width": 1920, "height": 1080, "refresh": 60000, "picture_aspect_ratio": "16:9"},
        ],
        "current_mode": {"width": 3440, "height": 1440, "refresh": 99982, "picture_aspect_ratio": "none"},
        "scale": 1,
        "scale_filter": "nearest",
        "transform": "normal",
        "adaptive_sync_status": "disabled",
        "current_workspace": "1",
    },
    {
        "id": 5,
        "type": "output",
        "name": "HDMI-A-1",
        "active": False,
        "make": "BNQ",
        "model": "BenQ PJ",
        "serial": "0x01010101",
        "modes": [{"width": 1920, "height": 1080, "refresh": 60000}],
        "current_mode": {"width": 1920, "height": 1080, "refresh": 60000},
        "scale": 1.5,
        "transform": "90",
    },
]


def pytest_configure():
    "Runs once before all: log every frame, through pytest's capture"
    logging.getLogger("pysway").setLevel(logging.DEBUG)


@pytest.fixture(autouse=True)
def package_logger():
    "Drop the handlers `init_logger` installs during a test"
    logger = logging.getLogger("pysway")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture
def sample_output():
    return deepcopy(SAMPLE_OUTPUT)


@pytest.fixture
def outputs_reply():
    "A complete GET_OUTPUTS reply frame"
    return make_frame(3, json.dumps(SWAY_OUTPUTS))


@pytest.fixture
def socket_pair():
    "(client side, sway side) of a connected socket pair"
    client, peer = socket.socketpair(socket.AF_UNIX, socket.SOCK_STREAM)
    yield client, peer
    client.close()
    peer.close()


@pytest.fixture
def no_swaysock(monkeypatch, tmp_path):
    "No SWAYSOCK and no default config file"
    monkeypatch.delenv("SWAYSOCK", raising=False)
    monkeypatch.setattr("pysway.config.CONFIG_FILE", tmp_path / "missing.toml")

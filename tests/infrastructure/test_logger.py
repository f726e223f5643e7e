import json
import logging

import pytest
import structlog

from cluster_hibernation.config.schemas import LogDestination, LogFileConfig, LogFormat, LoggingConfig
from cluster_hibernation.infrastructure.logging import get_logger, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    structlog.reset_defaults()


def test_json_file_logging(tmp_path, restore_logging):
    log_path = tmp_path / "logs" / "hibernation.log"
    setup_logging(LoggingConfig(
        level="info",
        destination=LogDestination.FILE,
        format=LogFormat.JSON,
        file=LogFileConfig(path=str(log_path)),
    ))

    get_logger("cluster_hibernation.test").info("Power action requested", cloud="ibmcloud", count=2)
    get_logger("cluster_hibernation.test").debug("filtered out")
    for handler in logging.getLogger().handlers:
        handler.flush()

    lines = [json.loads(line) for line in log_path.read_text().splitlines()]
    assert len(lines) == 1
    assert lines[0]["event"] == "Power action requested"
    assert lines[0]["cloud"] == "ibmcloud"
    assert lines[0]["count"] == 2
    assert lines[0]["level"] == "info"
    assert lines[0]["logger"] == "cluster_hibernation.test"
    assert lines[0]["func_name"] == "test_json_file_logging"


def test_level_names_are_case_insensitive():
    assert LoggingConfig(level="warning").level.value == "WARNING"

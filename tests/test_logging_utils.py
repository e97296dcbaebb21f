from __future__ import annotations

import logging

from devbox_provisioner.logging_utils import PACKAGE_LOGGER, configure_logging


def _file_handlers():
    return [h for h in logging.getLogger(PACKAGE_LOGGER).handlers if isinstance(h, logging.FileHandler)]


def test_console_only_by_default():
    assert configure_logging() is None
    assert _file_handlers() == []


def test_file_log_receives_package_records(tmp_path):
    path = tmp_path / "logs" / "provision.log"
    assert configure_logging(str(path)) == str(path)

    logging.getLogger("devbox_provisioner.lib.command").info("CMD apt-get update")
    for h in _file_handlers():
        h.flush()
    assert "CMD apt-get update" in path.read_text()


def test_unwritable_log_falls_back_to_console(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    assert configure_logging(str(blocker / "provision.log")) is None
    assert _file_handlers() == []


def test_reconfigure_replaces_handlers_and_leaves_root_alone(tmp_path):
    root_handlers = list(logging.getLogger().handlers)
    configure_logging(str(tmp_path / "a.log"))
    configure_logging(str(tmp_path / "b.log"), verbose=True)

    logger = logging.getLogger(PACKAGE_LOGGER)
    assert [h.baseFilename for h in _file_handlers()] == [str(tmp_path / "b.log")]
    assert len(logger.handlers) == 2
    assert logger.level == logging.DEBUG
    assert logging.getLogger().handlers == root_handlers

# tests/test_logging_setup.py

from __future__ import annotations

import logging

import pytest

from content_desk.logging_setup import console_floor, setup_logging


@pytest.mark.parametrize(
    ("name", "floor"),
    [
        ("content_desk.tasks.task_store", logging.DEBUG),
        ("content_desk.connectors.matrix_connector", logging.WARNING),
        ("uvicorn.error", logging.INFO),
        ("uvicorn.access", logging.WARNING),
        ("content_deskish", logging.ERROR),
        ("nio.rooms", logging.ERROR),
        ("py.warnings", logging.ERROR),
    ],
)
def test_console_floor(name, floor) -> None:
    assert console_floor(name) == floor


def test_setup_logging_writes_file(tmp_path) -> None:
    root = logging.getLogger()
    saved = (list(root.handlers), root.level)
    try:
        log_file = setup_logging(log_dir=tmp_path / "logs")
        assert len(root.handlers) == 2

        logging.getLogger("nio.rooms").debug("sync detail")
        for h in root.handlers:
            h.flush()
        assert "sync detail" in log_file.read_text(encoding="utf-8")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            if h not in saved[0]:
                h.close()
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])
        logging.captureWarnings(False)

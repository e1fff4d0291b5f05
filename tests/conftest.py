"""Shared pytest fixtures and configuration for all tests."""

import logging
from pathlib import Path

import pytest

from jstyle.config import JStyleConfig


UNSORTED_IMPORTS = '''package com.example;
import java.util.List;
import java.util.ArrayList;
public class Foo {
    private int x;
    public int getX() { return x; }
}
'''

CANONICAL_IMPORTS = '''package com.example;

import java.util.ArrayList;
import java.util.List;

public class Foo {
    private int x;

    public int getX() {
        return x;
    }
}
'''


@pytest.fixture
def write_java(tmp_path):
    """Write a Java source file under ``tmp_path`` and return its path."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(text.encode("utf-8"))
        return path

    return _write


@pytest.fixture
def single_worker_config():
    """Configuration that processes files on one worker thread."""
    return JStyleConfig(workers=1)


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo logger changes made by CLI runs so caplog keeps working."""
    logger = logging.getLogger("jstyle")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate

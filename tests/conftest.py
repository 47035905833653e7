import os
import sys

import pytest

# Add src to path so we can import the modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import wdbx.utils.logging as wdbx_logging


@pytest.fixture(autouse=True)
def isolated_log_file(tmp_path, monkeypatch):
    """Keep error.log writes inside the test's temp directory."""
    log_file = os.path.join(str(tmp_path), "error.log")
    monkeypatch.setattr(wdbx_logging, "_log_file", log_file)
    return log_file

"""
Pytest configuration and shared fixtures for devenv tests.
"""

import io
import os
import sys
from pathlib import Path

import pytest


# Add project paths to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "shared"))

from devenv.terminal import LinePrinter  # noqa: E402


@pytest.fixture
def project_dir(tmp_path):
    """A temporary project directory containing a flake.nix anchor."""
    (tmp_path / "flake.nix").write_text("{ }\n")
    return tmp_path


@pytest.fixture
def printer():
    """A colorless printer writing to in-memory streams, 60 columns wide."""
    return LinePrinter(out=io.StringIO(), err=io.StringIO(), width=60, use_colors=False)


@pytest.fixture
def clean_environ():
    """Restore os.environ after a test that loads .env files into it."""
    saved = dict(os.environ)
    yield os.environ
    os.environ.clear()
    os.environ.update(saved)


@pytest.fixture
def no_figlet(monkeypatch):
    """Pretend the figlet binary is not installed."""
    monkeypatch.setattr("devenv.terminal.shutil.which", lambda name: None)

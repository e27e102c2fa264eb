from __future__ import annotations

from pathlib import Path

import pytest

from odo_cli.wizard import Wizard
from tests.fakes import FakeConsole, FakeRegistry, default_catalog


@pytest.fixture
def catalog() -> FakeRegistry:
    return default_catalog()


@pytest.fixture
def component_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "my-component"
    directory.mkdir()
    return directory


@pytest.fixture
def python_dir(component_dir: Path) -> Path:
    """The python source example: requirements.txt and wsgi.py."""
    (component_dir / "requirements.txt").write_text("flask\n", encoding="utf-8")
    (component_dir / "wsgi.py").write_text("from app import app\n", encoding="utf-8")
    return component_dir


@pytest.fixture
def run_wizard(catalog: FakeRegistry):
    """Run the interactive wizard in ``directory`` with scripted ``answers``."""

    def _run(directory: Path, answers):
        console = FakeConsole(answers)
        wizard = Wizard(console, catalog, directory)
        result = wizard.run()
        return wizard, console, result

    return _run


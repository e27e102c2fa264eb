from __future__ import annotations

import logging
from pathlib import Path

import pytest

from odo_cli.errors import InitError
from odo_cli.log import level_from_env, setup_logging, to_logging_level
from odo_cli.preferences import DEFAULT_REGISTRY_NAME, DEFAULT_REGISTRY_URL, Preferences, Registry


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GLOBALODOCONFIG", raising=False)
    monkeypatch.delenv("ODO_REGISTRY_URL", raising=False)


def test_missing_preference_file_uses_default_registry(tmp_path: Path):
    prefs = Preferences.load(tmp_path / "preference.yaml")

    assert prefs.registries == [Registry(DEFAULT_REGISTRY_NAME, DEFAULT_REGISTRY_URL)]


def test_preference_file_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    path = tmp_path / "prefs.yaml"
    path.write_text(
        "OdoSettings:\n"
        "  RegistryCacheTime: 5\n"
        "  RegistryList:\n"
        "    - Name: Staging\n"
        "      URL: https://staging.example.test/\n"
        "    - Name: DefaultDevfileRegistry\n"
        "      URL: https://registry.devfile.io\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("GLOBALODOCONFIG", str(path))

    prefs = Preferences.load()

    assert prefs.path == path
    assert prefs.registry_cache_time == 5
    assert prefs.registries == [
        Registry("Staging", "https://staging.example.test"),
        Registry("DefaultDevfileRegistry", "https://registry.devfile.io"),
    ]
    assert prefs.select("Staging") == [Registry("Staging", "https://staging.example.test")]
    assert len(prefs.select(None)) == 2


def test_registry_url_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ODO_REGISTRY_URL", "http://localhost:8080/")

    prefs = Preferences.load(tmp_path / "none.yaml")

    assert prefs.registries == [Registry(DEFAULT_REGISTRY_NAME, "http://localhost:8080")]


def test_unknown_registry_selection(tmp_path: Path):
    prefs = Preferences.load(tmp_path / "none.yaml")

    with pytest.raises(InitError):
        prefs.select("Nope")


@pytest.mark.parametrize(
    "content",
    ["OdoSettings: [", "- a list\n", "OdoSettings:\n  RegistryList:\n    - Name: NoUrl\n"],
)
def test_malformed_preference_file(tmp_path: Path, content: str):
    path = tmp_path / "preference.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(InitError):
        Preferences.load(path)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("", 0), ("0", 0), ("3", 3), ("9", 9), ("-2", 0), ("loud", 0)],
)
def test_level_from_env(raw: str, expected: int):
    assert level_from_env({"ODO_LOG_LEVEL": raw}) == expected


def test_logging_levels():
    assert to_logging_level(0) == logging.WARNING
    assert to_logging_level(2) == logging.INFO
    assert to_logging_level(4) == logging.DEBUG


def test_setup_logging_is_idempotent():
    logger = setup_logging(0)
    setup_logging(5)

    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert not logger.propagate

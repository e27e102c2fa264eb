from __future__ import annotations

import pytest
import yaml

from odo_cli.devfile import Container, Devfile
from odo_cli.errors import InitError
from tests.fakes import PYTHON_DEVFILE


@pytest.fixture
def devfile() -> Devfile:
    return Devfile.parse(PYTHON_DEVFILE)


def test_parse_rejects_non_devfiles():
    with pytest.raises(InitError):
        Devfile.parse(b"just: yaml\n")
    with pytest.raises(InitError):
        Devfile.parse(b"schemaVersion: [unclosed\n")


def test_containers(devfile: Devfile):
    assert devfile.containers() == [Container("py-web", [8080], {})]


def test_set_name(devfile: Devfile):
    devfile.set_name("my-python-app")

    assert devfile.name == "my-python-app"
    assert yaml.safe_load(devfile.dump())["metadata"]["name"] == "my-python-app"


def test_set_name_without_metadata():
    devfile = Devfile.parse(b"schemaVersion: 2.2.0\n")

    devfile.set_name("bare")

    assert devfile.data["metadata"] == {"name": "bare"}


def test_port_edits(devfile: Devfile):
    devfile.add_port("py-web", 9090)
    devfile.add_port("py-web", 9090)
    assert devfile.containers()[0].ports == [8080, 9090]

    devfile.delete_port("py-web", 8080)
    assert devfile.containers()[0].ports == [9090]


def test_env_edits(devfile: Devfile):
    devfile.add_env("py-web", "DEBUG", "1")
    devfile.add_env("py-web", "DEBUG", "2")
    devfile.add_env("py-web", "MODE", "dev")
    assert devfile.containers()[0].env == {"DEBUG": "2", "MODE": "dev"}

    devfile.delete_env("py-web", "DEBUG")
    assert devfile.containers()[0].env == {"MODE": "dev"}


def test_unknown_container(devfile: Devfile):
    with pytest.raises(InitError):
        devfile.add_port("missing", 1234)


def test_dump_keeps_other_sections(devfile: Devfile):
    data = yaml.safe_load(devfile.dump())

    assert data["schemaVersion"] == "2.2.0"
    assert data["commands"][0]["id"] == "run"

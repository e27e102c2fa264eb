"""Minimal devfile (2.x) view used to personalize a downloaded descriptor."""

from dataclasses import dataclass, field
from typing import Optional

import yaml

from .errors import InitError

DEVFILE_NAME = "devfile.yaml"


@dataclass
class Container:
    name: str
    ports: list[int] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)


class Devfile:
    def __init__(self, data: dict):
        self.data = data

    @classmethod
    def parse(cls, content: bytes, source: str = DEVFILE_NAME) -> "Devfile":
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise InitError(f"Invalid devfile {source}: {e}") from e
        if not isinstance(data, dict) or "schemaVersion" not in data:
            raise InitError(f"Invalid devfile {source}: missing schemaVersion")
        return cls(data)

    @property
    def name(self) -> Optional[str]:
        return (self.data.get("metadata") or {}).get("name")

    def set_name(self, name: str) -> None:
        metadata = self.data.get("metadata")
        if not isinstance(metadata, dict):
            metadata = self.data["metadata"] = {}
        metadata["name"] = name

    def _container_specs(self) -> list[tuple[str, dict]]:
        specs = []
        for component in self.data.get("components") or []:
            if isinstance(component, dict) and isinstance(component.get("container"), dict):
                specs.append((component.get("name", ""), component["container"]))
        return specs

    def _container(self, name: str) -> dict:
        for component_name, spec in self._container_specs():
            if component_name == name:
                return spec
        raise InitError(f"Container '{name}' not found in devfile")

    def containers(self) -> list[Container]:
        containers = []
        for name, spec in self._container_specs():
            ports = [int(ep["targetPort"]) for ep in spec.get("endpoints") or [] if "targetPort" in ep]
            env = {var["name"]: str(var.get("value", "")) for var in spec.get("env") or [] if "name" in var}
            containers.append(Container(name, ports, env))
        return containers

    def add_port(self, container: str, port: int) -> None:
        spec = self._container(container)
        endpoints = spec.setdefault("endpoints", [])
        if any(int(ep.get("targetPort", -1)) == port for ep in endpoints):
            return
        endpoints.append({"name": f"port-{port}-tcp", "targetPort": port})

    def delete_port(self, container: str, port: int) -> None:
        spec = self._container(container)
        spec["endpoints"] = [ep for ep in spec.get("endpoints") or [] if int(ep.get("targetPort", -1)) != port]

    def add_env(self, container: str, name: str, value: str) -> None:
        spec = self._container(container)
        env = [var for var in spec.get("env") or [] if var.get("name") != name]
        env.append({"name": name, "value": value})
        spec["env"] = env

    def delete_env(self, container: str, name: str) -> None:
        spec = self._container(container)
        spec["env"] = [var for var in spec.get("env") or [] if var.get("name") != name]

    def dump(self) -> bytes:
        return yaml.safe_dump(self.data, sort_keys=False).encode("utf-8")

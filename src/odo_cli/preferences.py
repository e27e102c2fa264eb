"""User preferences: the list of devfile registries odo consults."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import platformdirs
import yaml

from .errors import InitError

log = logging.getLogger(__name__)

PREFERENCE_ENV = "GLOBALODOCONFIG"
REGISTRY_URL_ENV = "ODO_REGISTRY_URL"
DEFAULT_REGISTRY_NAME = "DefaultDevfileRegistry"
DEFAULT_REGISTRY_URL = "https://registry.devfile.io"


@dataclass(frozen=True)
class Registry:
    name: str
    url: str


@dataclass
class Preferences:
    registries: list[Registry] = field(default_factory=list)
    registry_cache_time: int = 15
    path: Optional[Path] = None

    @staticmethod
    def default_path() -> Path:
        override = os.getenv(PREFERENCE_ENV)
        if override:
            return Path(override).expanduser()
        return platformdirs.user_config_path("odo") / "preference.yaml"

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Preferences":
        """Read the preference file, falling back to the default registry when it is absent."""
        path = path or cls.default_path()
        default_url = (os.getenv(REGISTRY_URL_ENV) or DEFAULT_REGISTRY_URL).rstrip("/")
        if not path.exists():
            log.debug("no preference file at %s, using %s", path, default_url)
            return cls([Registry(DEFAULT_REGISTRY_NAME, default_url)], path=path)

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise InitError(f"Failed to read preference file {path}: {e}") from e
        if not isinstance(data, dict):
            raise InitError(f"Preference file {path} must contain a mapping")

        settings = data.get("OdoSettings") or {}
        registries = []
        for item in settings.get("RegistryList") or []:
            if not isinstance(item, dict) or not item.get("Name") or not item.get("URL"):
                raise InitError(f"Invalid registry entry in {path}: {item!r}")
            url = str(item["URL"]).rstrip("/")
            if item["Name"] == DEFAULT_REGISTRY_NAME and os.getenv(REGISTRY_URL_ENV):
                url = default_url
            registries.append(Registry(str(item["Name"]), url))
        if not registries:
            registries.append(Registry(DEFAULT_REGISTRY_NAME, default_url))

        try:
            cache_time = int(settings.get("RegistryCacheTime", 15))
        except (TypeError, ValueError) as e:
            raise InitError(f"Invalid RegistryCacheTime in {path}: {e}") from e
        return cls(registries, registry_cache_time=cache_time, path=path)

    def select(self, name: Optional[str]) -> list[Registry]:
        """Restrict to the named registry; every registry when ``name`` is empty."""
        if not name:
            return list(self.registries)
        chosen = [r for r in self.registries if r.name == name]
        if not chosen:
            known = ", ".join(r.name for r in self.registries)
            raise InitError(f"Registry '{name}' is not configured. Choose from: {known}")
        return chosen

"""Devfile registry catalog access.

Talks to devfile registries over the v2 index API:

    GET {url}/v2index                                  stack catalog (JSON)
    GET {url}/devfiles/{stack}                         devfile (YAML)
    GET {url}/devfiles/{stack}/starter-projects/{name} starter project (zip)

Nothing is cached between calls; every lookup goes back to the registry.
"""

import io
import logging
import ssl
import zipfile
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Iterable, Optional

import httpx
import truststore

from .errors import NotFound, RegistryUnavailable
from .preferences import Registry

log = logging.getLogger(__name__)

INDEX_TIMEOUT = 30
ARCHIVE_TIMEOUT = 60


@dataclass(frozen=True)
class StarterProject:
    name: str
    url: str


@dataclass(frozen=True)
class TemplateEntry:
    name: str
    language: str
    project_type: str
    registry: str
    registry_url: str
    display_name: str = ""
    description: str = ""
    starters: tuple[str, ...] = field(default_factory=tuple)
    default_starter: Optional[str] = None

    @property
    def devfile_url(self) -> str:
        return f"{self.registry_url}/devfiles/{self.name}"


def build_client(skip_tls: bool = False) -> httpx.Client:
    verify = False if skip_tls else truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    return httpx.Client(verify=verify, follow_redirects=True)


def _parse_index(registry: Registry, payload) -> list[TemplateEntry]:
    if not isinstance(payload, list):
        raise RegistryUnavailable(f"Registry {registry.name} returned an index that is not a list")
    entries = []
    seen: set[tuple[str, str]] = set()
    for stack in payload:
        if not isinstance(stack, dict) or stack.get("type", "stack") != "stack":
            continue
        language, project_type = stack.get("language"), stack.get("projectType")
        if not stack.get("name") or not language or not project_type:
            log.debug("skipping incomplete index entry %r in %s", stack.get("name"), registry.name)
            continue
        # language + project type identifies at most one stack per registry
        key = (language.lower(), project_type.lower())
        if key in seen:
            continue
        seen.add(key)
        entries.append(
            TemplateEntry(
                name=stack["name"],
                language=language,
                project_type=project_type,
                registry=registry.name,
                registry_url=registry.url,
                display_name=stack.get("displayName", ""),
                description=stack.get("description", ""),
                starters=tuple(stack.get("starterProjects") or ()),
                default_starter=stack.get("defaultStarterProject"),
            )
        )
    return entries


def extract_archive(content: bytes) -> list[tuple[str, bytes]]:
    """Unpack a zip in memory into ``(relative_path, data)`` pairs.

    A single top-level directory (GitHub-style archives) is flattened.
    Entries escaping the archive root are dropped.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as archive:
            members = [(info.filename, archive.read(info)) for info in archive.infolist() if not info.is_dir()]
    except (zipfile.BadZipFile, OSError) as e:
        raise RegistryUnavailable(f"Starter project archive is not a valid zip: {e}") from e

    paths = [PurePosixPath(name) for name, _ in members]
    roots = {path.parts[0] for path in paths if path.parts}
    flatten = len(roots) == 1 and all(len(path.parts) > 1 for path in paths)

    files = []
    for path, (_, data) in zip(paths, members):
        parts = path.parts[1:] if flatten else path.parts
        if not parts or path.is_absolute() or ".." in parts:
            log.warning("ignoring unsafe archive entry %s", path)
            continue
        files.append(("/".join(parts), data))
    return files


class RegistryClient:
    """Catalog lookups across the configured registries, in preference order."""

    def __init__(self, registries: Iterable[Registry], client: Optional[httpx.Client] = None, *, skip_tls: bool = False):
        self.registries = list(registries)
        self.client = client or build_client(skip_tls)

    def _get(self, url: str, timeout: int = INDEX_TIMEOUT) -> httpx.Response:
        log.debug("GET %s", url)
        try:
            response = self.client.get(url, timeout=timeout)
        except httpx.HTTPError as e:
            raise RegistryUnavailable(f"Failed to reach {url}: {e}") from e
        if response.status_code == 404:
            raise NotFound(f"{url} was not found in the registry")
        if response.status_code != 200:
            raise RegistryUnavailable(f"Registry returned {response.status_code} for {url}")
        return response

    def _index(self, registry: Registry) -> list[TemplateEntry]:
        try:
            response = self._get(f"{registry.url}/v2index")
        except NotFound as e:
            raise RegistryUnavailable(f"Registry {registry.name} has no v2 index at {registry.url}") from e
        try:
            payload = response.json()
        except ValueError as e:
            raise RegistryUnavailable(f"Failed to parse index of registry {registry.name}: {e}") from e
        return _parse_index(registry, payload)

    def list_templates(self, language: Optional[str] = None, project_type: Optional[str] = None) -> list[TemplateEntry]:
        """Catalog entries, optionally filtered by language and project type (case-insensitive)."""
        entries = []
        for registry in self.registries:
            for entry in self._index(registry):
                if language and entry.language.lower() != language.lower():
                    continue
                if project_type and entry.project_type.lower() != project_type.lower():
                    continue
                entries.append(entry)
        if not entries:
            wanted = "/".join(filter(None, (language, project_type))) or "any language"
            raise NotFound(f"No devfile found for {wanted} in registries: {', '.join(r.name for r in self.registries)}")
        return entries

    def get_template(self, name: str) -> TemplateEntry:
        for entry in self.list_templates():
            if entry.name == name:
                return entry
        raise NotFound(f"Devfile '{name}' not found in registries: {', '.join(r.name for r in self.registries)}")

    def list_starters(self, entry: TemplateEntry) -> list[StarterProject]:
        return [StarterProject(name, f"{entry.devfile_url}/starter-projects/{name}") for name in entry.starters]

    def fetch_starter(self, starter: StarterProject) -> list[tuple[str, bytes]]:
        response = self._get(starter.url, timeout=ARCHIVE_TIMEOUT)
        files = extract_archive(response.content)
        log.info("starter project %s: %d file(s)", starter.name, len(files))
        return files

    def fetch_template_descriptor(self, entry: TemplateEntry) -> bytes:
        return self._get(entry.devfile_url).content

    def fetch_url(self, url: str) -> bytes:
        """Download a devfile given by URL (``--devfile-path https://...``)."""
        return self._get(url).content

    def close(self) -> None:
        self.client.close()

"""Write the devfile and starter project files into the component directory.

Nothing that exists before the write is ever overwritten or removed.
Each file is created exclusively and either fully written or removed again.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Iterable

from .devfile import DEVFILE_NAME
from .errors import WriteError

log = logging.getLogger(__name__)


@dataclass
class ScaffoldResult:
    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    ignored: list[str] = field(default_factory=list)
    preserved: list[str] = field(default_factory=list)


def _existing_entries(target: Path) -> list[str]:
    # top level only; nested collisions are checked per file
    return sorted(p.name for p in target.iterdir())


def _write_file(destination: Path, data: bytes) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    # "x" refuses to clobber a file that appeared since the collision check
    fh = open(destination, "xb")
    try:
        with fh:
            fh.write(data)
    except BaseException:
        destination.unlink(missing_ok=True)
        raise


def write(target_dir, descriptor: bytes, starter_files: Iterable[tuple[str, bytes]] = ()) -> ScaffoldResult:
    """Write ``devfile.yaml`` and ``starter_files`` under ``target_dir``.

    Starter files colliding with existing files are skipped and recorded in
    ``result.skipped``. Entries that are never written (paths leaving the
    directory, the starter's own devfile) go to ``result.ignored``. A
    failing write raises ``WriteError`` carrying the partial result; files
    already written stay in place.
    """
    target = Path(target_dir)
    result = ScaffoldResult(preserved=_existing_entries(target))
    existing = set(result.preserved)

    if DEVFILE_NAME in existing:
        raise WriteError(f"{target / DEVFILE_NAME} already exists", result)

    plan: list[tuple[str, bytes]] = []
    for relative, data in starter_files:
        path = PurePosixPath(relative)
        if path.is_absolute() or ".." in path.parts:
            log.warning("refusing to write outside the component directory: %s", relative)
            result.ignored.append(relative)
            continue
        relative = path.as_posix()
        if relative == DEVFILE_NAME:
            log.debug("starter project devfile ignored, the registry devfile is used")
            result.ignored.append(relative)
            continue
        if relative in existing or (target / relative).exists():
            log.warning("%s already exists, starter project version not written", relative)
            result.skipped.append(relative)
            continue
        plan.append((relative, data))
    plan.append((DEVFILE_NAME, descriptor))

    for relative, data in plan:
        destination = target / relative
        try:
            _write_file(destination, data)
        except OSError as e:
            raise WriteError(f"Failed to write {destination}: {e}", result) from e
        result.written.append(relative)
        log.debug("wrote %s (%d bytes)", relative, len(data))

    return result

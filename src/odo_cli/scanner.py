"""Top-level inventory of the directory being initialized."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DirectoryInventory:
    """Sorted names of the immediate children of ``path`` at scan time."""

    path: Path
    entries: tuple[str, ...]

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def __contains__(self, name: str) -> bool:
        return name in self.entries

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def scan(path) -> DirectoryInventory:
    """Snapshot the entries of ``path`` (non-recursive, read-only).

    Raises ``FileNotFoundError``/``NotADirectoryError``/``PermissionError``
    when the directory cannot be listed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Directory does not exist: {path}")
    if not path.is_dir():
        raise NotADirectoryError(f"Not a directory: {path}")
    # Sorted so classification is deterministic across filesystems.
    entries = tuple(sorted(entry.name for entry in path.iterdir()))
    return DirectoryInventory(path=path, entries=entries)

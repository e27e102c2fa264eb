"""Failure kinds raised while running ``odo init``."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .scaffold import ScaffoldResult


class InitError(Exception):
    """Base class for every failure the init flow reports to the user."""

    title = "Initialization Error"


class RegistryUnavailable(InitError):
    title = "Registry Unavailable"


class NotFound(InitError):
    title = "Not Found"


class InvalidSelection(InitError):
    """Answer to a select prompt that matches no option. Re-prompted."""

    title = "Invalid Selection"


class InvalidName(InitError):
    """Component name rejected by the name syntax. Re-prompted."""

    title = "Invalid Name"


class InputClosed(InitError):
    title = "Input Closed"

    def __init__(self, message: str = "input stream closed before the wizard completed"):
        super().__init__(message)


class DevfileExists(InitError):
    title = "Devfile Exists"


class WriteError(InitError):
    """A scaffold write failed; ``result`` holds what was written before it."""

    title = "Write Error"

    def __init__(self, message: str, result: Optional["ScaffoldResult"] = None):
        super().__init__(message)
        self.result = result


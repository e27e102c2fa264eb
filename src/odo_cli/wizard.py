"""The ``odo init`` wizard.

A run walks forward through ``Phase`` once: look at the directory, settle
on a language and project type (detected or asked), pick the devfile and
an optional starter project, let the user adjust container settings, ask
for a component name and write everything out. Every question goes
through a ``Prompter``; every catalog lookup through a registry client.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Optional, Protocol

from . import scaffold
from .classifier import Classification, classify
from .devfile import DEVFILE_NAME, Devfile
from .errors import DevfileExists, InitError, InvalidName, InvalidSelection, NotFound
from .prompts import Console, Prompter
from .registry import StarterProject, TemplateEntry
from .scaffold import ScaffoldResult
from .scanner import DirectoryInventory, scan

log = logging.getLogger(__name__)

EMPTY_DIR_MSG = "The current directory is empty. odo will help you start a new project."
NON_EMPTY_DIR_MSG = (
    "The current directory already contains source code. "
    "odo will try to autodetect the language and project type in order to select the best suited Devfile for your project."
)
DETECTED_MSG = "Based on the files in the current directory odo detected"
SUCCESS_MSG = 'Your new component "{name}" is ready in the current directory.'

NO_STARTER = "none"
NO_CONTAINER = "NONE - configuration is correct"
NO_CHANGE = "NOTHING - configuration is correct"
ADD_PORT = "Add new port"
ADD_ENV = "Add new environment variable"

NAME_MAX_LENGTH = 63
NAME_PATTERN = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9-]*[A-Za-z0-9])?$")
ENV_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Phase(IntEnum):
    START = 0
    DIRECTORY_EMPTY = 1
    DIRECTORY_NON_EMPTY = 2
    LANGUAGE_SELECTION = 3
    PROJECT_TYPE_SELECTION = 4
    STARTER_PROJECT_SELECTION = 5
    POST_CONFIGURATION = 6
    COMPONENT_NAMING = 7
    SCAFFOLDING = 8
    DONE = 9
    ABORTED = 10


class Catalog(Protocol):
    def list_templates(self, language: Optional[str] = None, project_type: Optional[str] = None) -> list[TemplateEntry]: ...

    def get_template(self, name: str) -> TemplateEntry: ...

    def list_starters(self, entry: TemplateEntry) -> list[StarterProject]: ...

    def fetch_starter(self, starter: StarterProject) -> list[tuple[str, bytes]]: ...

    def fetch_template_descriptor(self, entry: TemplateEntry) -> bytes: ...

    def fetch_url(self, url: str) -> bytes: ...


@dataclass
class WizardSession:
    directory: Path
    phase: Phase = Phase.START
    inventory: Optional[DirectoryInventory] = None
    classification: Optional[Classification] = None
    language: Optional[str] = None
    project_type: Optional[str] = None
    template: Optional[TemplateEntry] = None
    devfile: Optional[Devfile] = None
    starter: Optional[StarterProject] = None
    starter_files: list[tuple[str, bytes]] = field(default_factory=list)
    component_name: Optional[str] = None
    result: Optional[ScaffoldResult] = None

    def advance(self, phase: Phase) -> None:
        if phase < self.phase:
            raise RuntimeError(f"wizard cannot move back from {self.phase.name} to {phase.name}")
        log.debug("phase %s -> %s", self.phase.name, phase.name)
        self.phase = phase

    @property
    def directory_was_empty(self) -> bool:
        return self.inventory is None or self.inventory.is_empty


def validate_component_name(name: str) -> None:
    if not name:
        raise InvalidName("Component name is required")
    if len(name) > NAME_MAX_LENGTH:
        raise InvalidName(f"Component name must be at most {NAME_MAX_LENGTH} characters")
    if not NAME_PATTERN.match(name):
        raise InvalidName(
            f"'{name}' is not a valid component name: use letters, digits and '-', "
            "and do not start or end with '-'"
        )


def suggest_component_name(directory: Path) -> Optional[str]:
    name = re.sub(r"[^a-z0-9-]+", "-", directory.resolve().name.lower()).strip("-")[:NAME_MAX_LENGTH].rstrip("-")
    return name or None


def _validate_port(answer: str) -> None:
    if not answer.isdigit() or not 1 <= int(answer) <= 65535:
        raise InvalidSelection(f"'{answer}' is not a valid port number")


def _validate_env_name(answer: str) -> None:
    if not ENV_NAME_PATTERN.match(answer):
        raise InvalidSelection(f"'{answer}' is not a valid environment variable name")


class Wizard:
    def __init__(self, console: Console, catalog: Catalog, directory, prompter: Optional[Prompter] = None):
        self.console = console
        self.catalog = catalog
        self.prompter = prompter or Prompter(console)
        self.session = WizardSession(directory=Path(directory))

    # -- Entry points ------------------------------------------------------

    def run(self) -> ScaffoldResult:
        """Run the interactive flow; raises on any unrecoverable failure."""
        session = self.session
        try:
            self._start()
            self._select_language()
            self._select_project_type()
            self._select_starter()
            self._post_configuration()
            self._name_component()
            return self._finish()
        except BaseException:
            session.advance(Phase.ABORTED)
            raise

    def run_non_interactive(
        self,
        name: str,
        devfile: Optional[str] = None,
        devfile_path: Optional[str] = None,
        starter: Optional[str] = None,
    ) -> ScaffoldResult:
        """Same guarantees as ``run`` with every answer supplied up front."""
        session = self.session
        try:
            validate_component_name(name)
            if bool(devfile) == bool(devfile_path):
                raise InitError("Exactly one of --devfile or --devfile-path is required")
            if starter and not devfile:
                raise InitError("--starter can only be used with --devfile")
            self._start()

            session.advance(Phase.PROJECT_TYPE_SELECTION)
            if devfile:
                session.template = self.catalog.get_template(devfile)
                session.language = session.template.language
                session.project_type = session.template.project_type
                self._fetch_descriptor()
            else:
                content = self._read_devfile_path(devfile_path)
                session.devfile = Devfile.parse(content, source=devfile_path)

            session.advance(Phase.STARTER_PROJECT_SELECTION)
            if starter:
                starters = {s.name: s for s in self.catalog.list_starters(session.template)}
                if starter not in starters:
                    raise NotFound(f"Starter project '{starter}' not found in devfile '{devfile}'")
                self._use_starter(starters[starter])

            session.advance(Phase.COMPONENT_NAMING)
            session.component_name = name
            return self._finish()
        except BaseException:
            session.advance(Phase.ABORTED)
            raise

    # -- Phases ------------------------------------------------------------

    def _start(self) -> None:
        session = self.session
        session.inventory = scan(session.directory)
        if DEVFILE_NAME in session.inventory:
            raise DevfileExists(f"a devfile already exists in {session.directory}")
        session.classification = classify(session.inventory)
        log.debug("inventory %s -> %s", session.inventory.entries, session.classification)

        if session.inventory.is_empty:
            session.advance(Phase.DIRECTORY_EMPTY)
            self.console.display(EMPTY_DIR_MSG)
        else:
            session.advance(Phase.DIRECTORY_NON_EMPTY)
            self.console.display(NON_EMPTY_DIR_MSG)

    def _detected_template(self) -> Optional[TemplateEntry]:
        candidate = self.session.classification.detected
        if candidate is None or self.session.directory_was_empty:
            return None
        try:
            return self.catalog.list_templates(candidate.language, candidate.project_type)[0]
        except NotFound:
            log.info("no devfile for detected %s/%s, asking instead", candidate.language, candidate.project_type)
            return None

    def _select_language(self) -> None:
        session = self.session
        session.advance(Phase.LANGUAGE_SELECTION)

        entry = self._detected_template()
        if entry is not None:
            self.console.display()
            self.console.display(DETECTED_MSG + ":")
            self.console.display(f"Language: {entry.language}")
            self.console.display(f"Project type: {entry.project_type}")
            self.console.display()
            self.console.display(f'The devfile "{entry.name}" from the registry "{entry.registry}" will be downloaded.')
            if self.prompter.confirm("Is this correct"):
                session.template = entry
                session.language = entry.language
                session.project_type = entry.project_type
                return

        languages: list[str] = []
        for template in self.catalog.list_templates():
            if template.language not in languages:
                languages.append(template.language)
        languages.sort(key=str.lower)

        default = None
        for language in session.classification.languages:
            matches = [known for known in languages if known.lower() == language.lower()]
            if matches:
                default = matches[0]
                break
        session.language = self.prompter.select("Select language", languages, default)

    def _select_project_type(self) -> None:
        session = self.session
        session.advance(Phase.PROJECT_TYPE_SELECTION)
        if session.template is None:
            entries = self.catalog.list_templates(language=session.language)
            types = [entry.project_type for entry in entries]
            labels = [
                entry.project_type if types.count(entry.project_type) == 1 else f"{entry.project_type} ({entry.registry})"
                for entry in entries
            ]
            label = self.prompter.select("Select project type", labels, labels[0])
            session.template = entries[labels.index(label)]
            session.project_type = session.template.project_type
        self._fetch_descriptor()

    def _fetch_descriptor(self) -> None:
        entry = self.session.template
        log.info("downloading devfile %s from registry %s", entry.name, entry.registry)
        content = self.catalog.fetch_template_descriptor(entry)
        self.session.devfile = Devfile.parse(content, source=entry.devfile_url)

    def _select_starter(self) -> None:
        session = self.session
        session.advance(Phase.STARTER_PROJECT_SELECTION)
        if not session.directory_was_empty:
            return
        starters = self.catalog.list_starters(session.template)
        if not starters:
            return
        names = [starter.name for starter in starters]
        default = session.template.default_starter if session.template.default_starter in names else NO_STARTER
        choice = self.prompter.select("Which starter project do you want to use", names + [NO_STARTER], default)
        if choice != NO_STARTER:
            self._use_starter(starters[names.index(choice)])

    def _use_starter(self, starter: StarterProject) -> None:
        self.session.starter = starter
        self.session.starter_files = self.catalog.fetch_starter(starter)

    def _show_configuration(self) -> None:
        self.console.display()
        self.console.display("Current component configuration:")
        for container in self.session.devfile.containers():
            self.console.display(f'Container "{container.name}":')
            self.console.display("  Opened ports:")
            for port in container.ports:
                self.console.display(f"   - {port}")
            self.console.display("  Environment variables:")
            for name, value in container.env.items():
                self.console.display(f"   - {name} = {value}")

    def _post_configuration(self) -> None:
        session = self.session
        session.advance(Phase.POST_CONFIGURATION)
        if session.directory_was_empty or not session.devfile.containers():
            return
        while True:
            self._show_configuration()
            names = [container.name for container in session.devfile.containers()]
            choice = self.prompter.select(
                "Select container for which you want to change configuration", names + [NO_CONTAINER], NO_CONTAINER
            )
            if choice == NO_CONTAINER:
                return
            self._edit_container(choice)

    def _edit_container(self, name: str) -> None:
        devfile = self.session.devfile
        while True:
            container = next(c for c in devfile.containers() if c.name == name)
            operations = {NO_CHANGE: None, ADD_PORT: None}
            operations.update({f"Delete port {port}": port for port in container.ports})
            operations[ADD_ENV] = None
            operations.update({f"Delete environment variable {var}": var for var in container.env})

            choice = self.prompter.select("What configuration do you want to change", list(operations), NO_CHANGE)
            if choice == NO_CHANGE:
                return
            if choice == ADD_PORT:
                port = self.prompter.ask("Enter port number", validate=_validate_port)
                devfile.add_port(name, int(port))
            elif choice == ADD_ENV:
                var = self.prompter.ask("Enter new environment variable name", validate=_validate_env_name)
                value = self.prompter.ask(f"Enter value for {var} environment variable")
                devfile.add_env(name, var, value)
            elif choice.startswith("Delete port"):
                devfile.delete_port(name, operations[choice])
            else:
                devfile.delete_env(name, operations[choice])

    def _name_component(self) -> None:
        session = self.session
        session.advance(Phase.COMPONENT_NAMING)
        default = None if session.directory_was_empty else suggest_component_name(session.directory)
        session.component_name = self.prompter.ask("Enter component name", validate=validate_component_name, default=default)

    def _finish(self) -> ScaffoldResult:
        session = self.session
        session.advance(Phase.SCAFFOLDING)
        session.devfile.set_name(session.component_name)
        result = scaffold.write(session.directory, session.devfile.dump(), session.starter_files)
        session.result = result
        for skipped in result.skipped:
            self.console.display(f"Warning: {skipped} already exists and was not overwritten", style="yellow")

        session.advance(Phase.DONE)
        self.console.display()
        self.console.display(SUCCESS_MSG.format(name=session.component_name), style="bold green")
        return result

    def _read_devfile_path(self, path: str) -> bytes:
        if path.startswith(("http://", "https://")):
            return self.catalog.fetch_url(path)
        source = Path(path)
        if not source.is_absolute():
            source = self.session.directory / source
        return source.read_bytes()

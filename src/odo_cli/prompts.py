"""Prompt I/O for the init wizard.

The wizard only needs two capabilities from the terminal: show a line of
text and read a line of input. ``Prompter`` builds select/ask/confirm
questions on top of that, re-asking until the answer is valid.
``ArrowPrompter`` swaps select questions for arrow-key navigation when a
real keyboard is attached.
"""

from typing import Callable, Optional, Protocol, Sequence

import readchar
from rich.console import Console as RichTerminal
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .errors import InputClosed, InvalidName, InvalidSelection


class Console(Protocol):
    def display(self, text: str = "", style: Optional[str] = None) -> None: ...

    def read_line(self) -> Optional[str]:
        """Next input line without its newline, or ``None`` at end of input."""
        ...


class RichConsole:
    """Console backed by rich. Text is printed verbatim: no markup, no wrapping."""

    def __init__(self, console: Optional[RichTerminal] = None):
        self.console = console or RichTerminal(highlight=False)

    def display(self, text: str = "", style: Optional[str] = None) -> None:
        self.console.print(Text(text, style=style or ""), soft_wrap=True, highlight=False)

    def read_line(self) -> Optional[str]:
        try:
            return self.console.input("> " if self.console.is_terminal else "")
        except EOFError:
            return None


class Prompter:
    def __init__(self, console: Console):
        self.console = console

    def _read(self) -> str:
        line = self.console.read_line()
        if line is None:
            raise InputClosed()
        return line.strip()

    def _retry(self, error: Exception) -> None:
        self.console.display(f"X {error}", style="red")

    @staticmethod
    def match(answer: str, options: Sequence[str], default: Optional[str] = None) -> str:
        """Resolve ``answer`` to one of ``options`` by value or 1-based index."""
        if not answer:
            if default is None:
                raise InvalidSelection("Please select an option")
            return default
        for option in options:
            if option.lower() == answer.lower():
                return option
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return options[int(answer) - 1]
        raise InvalidSelection(f"'{answer}' is not a valid option. Choose from: {', '.join(options)}")

    def select(self, message: str, options: Sequence[str], default: Optional[str] = None) -> str:
        while True:
            self.console.display(f"? {message}:", style="bold")
            for index, option in enumerate(options, start=1):
                suffix = " (default)" if option == default else ""
                self.console.display(f"  {index}) {option}{suffix}")
            try:
                return self.match(self._read(), options, default)
            except InvalidSelection as e:
                self._retry(e)

    def ask(
        self,
        message: str,
        validate: Optional[Callable[[str], None]] = None,
        default: Optional[str] = None,
    ) -> str:
        """Free-text question; ``validate`` raises InvalidName/InvalidSelection to re-ask."""
        while True:
            suffix = f" ({default})" if default else ""
            self.console.display(f"? {message}{suffix}:", style="bold")
            answer = self._read() or (default or "")
            try:
                if validate:
                    validate(answer)
                return answer
            except (InvalidName, InvalidSelection) as e:
                self._retry(e)

    def confirm(self, message: str, default: bool = True) -> bool:
        hint = "Y/n" if default else "y/N"
        while True:
            self.console.display(f"? {message}? ({hint})", style="bold")
            answer = self._read().lower()
            if not answer:
                return default
            if answer in ("y", "yes"):
                return True
            if answer in ("n", "no"):
                return False
            self._retry(InvalidSelection(f"'{answer}' is not a valid answer, type yes or no"))


def get_key():
    """Get a single keypress in a cross-platform way using readchar."""
    key = readchar.readkey()
    if key == readchar.key.UP:
        return "up"
    if key == readchar.key.DOWN:
        return "down"
    if key in (readchar.key.ENTER, "\n", "\r"):
        return "enter"
    if key == readchar.key.ESC:
        return "escape"
    if key in (readchar.key.BACKSPACE, "\x08", "\x7f"):
        return "backspace"
    if key == readchar.key.CTRL_C:
        raise KeyboardInterrupt
    return key


def _is_typed(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


class ArrowPrompter(Prompter):
    """Select questions driven by arrow keys on an interactive terminal.

    Typing narrows the highlight to the first option starting with the
    typed text; Enter then accepts the typed answer the same way line mode
    does (option value or 1-based index), falling back to the highlighted
    prefix match.
    """

    def __init__(self, console: RichConsole):
        super().__init__(console)
        self.terminal = console.console

    def select(self, message: str, options: Sequence[str], default: Optional[str] = None) -> str:
        selected = options.index(default) if default in options else 0
        typed = ""

        def prefix_match() -> Optional[int]:
            for i, option in enumerate(options):
                if option.lower().startswith(typed.lower()):
                    return i
            return None

        def render():
            table = Table.grid(padding=(0, 2))
            table.add_column(style="cyan", justify="left", width=3)
            table.add_column(style="white", justify="left")
            for i, option in enumerate(options):
                table.add_row("▶" if i == selected else " ", Text(option, style="cyan" if i == selected else ""))
            table.add_row("", "")
            if typed:
                table.add_row("", Text(f"> {typed}", style="bold"))
            table.add_row("", Text("Use ↑/↓ or type to choose, Enter to select, Esc to cancel", style="dim"))
            return Panel(table, title=Text(f"? {message}", style="bold"), border_style="cyan", padding=(1, 2))

        with Live(render(), console=self.terminal, transient=True, auto_refresh=False) as live:
            while True:
                key = get_key()
                if key == "up":
                    selected = (selected - 1) % len(options)
                    typed = ""
                elif key == "down":
                    selected = (selected + 1) % len(options)
                    typed = ""
                elif key == "enter":
                    if not typed:
                        break
                    try:
                        choice = self.match(typed, options)
                        selected = options.index(choice)
                        break
                    except InvalidSelection as e:
                        match = prefix_match()
                        if match is not None:
                            selected = match
                            break
                        self._retry(e)
                        typed = ""
                elif key == "escape":
                    raise InputClosed("Selection cancelled")
                elif key == "backspace":
                    typed = typed[:-1]
                elif _is_typed(key):
                    typed += key
                    match = prefix_match()
                    if match is not None:
                        selected = match
                live.update(render(), refresh=True)

        choice = options[selected]
        self.console.display(f"? {message}: {choice}", style="bold")
        return choice

"""
Thicket reporter: the dispatcher's output sink and exit-code decision.

The parsing/validation core never prints or exits. Everything user-visible
(help pages, version lines, diagnostics) and the final process status go
through a Reporter, which the root command owns and tests can replace.

Options
- stdout / stderr: rich Console instances (defaults write to the process streams).
- colorful: when False, styles are stripped from every render.
- fancy: wrap help pages and diagnostics in rich panels.
- exit: callable receiving the final status (defaults to sys.exit).

Broken pipes (e.g. `app --help | head -1`) are swallowed silently: the console
goes quiet and its stream is pointed at devnull.
"""
import logging
import os
import sys

from rich.console import Console

from .helper import render_help, render_usage, render_version
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


def _silence(console):
    console.quiet = True
    logger.debug("broken pipe while printing, output dropped")
    # the interpreter's final flush must not hit the closed pipe again
    try:
        fileno = console.file.fileno()
    except (AttributeError, OSError, ValueError):
        return
    devnull = os.open(os.devnull, os.O_WRONLY)
    try:
        os.dup2(devnull, fileno)
    except OSError:
        logger.debug("could not redirect fd %d to devnull", fileno)
    finally:
        os.close(devnull)


class Terminal(Console):
    """rich Console that goes quiet on a broken pipe instead of exiting the process."""

    def on_broken_pipe(self):
        _silence(self)


class Reporter:
    """output sink plus exit decision used by Command.execute/Command.run."""

    def __init__(self, *, stdout=Unset, stderr=Unset, colorful=True, fancy=False, exit=sys.exit):
        self.stdout = coalesce(stdout) or Terminal()
        self.stderr = coalesce(stderr) or Terminal(stderr=True)
        self.colorful = bool(colorful)
        self.fancy = bool(fancy)
        self._exit = exit

    def __repr__(self):
        return f"Reporter(colorful={self.colorful!r}, fancy={self.fancy!r})"

    def print(self, renderable, /, *, stderr=False):
        console = self.stderr if stderr else self.stdout
        try:
            console.print(renderable)
        except BrokenPipeError:
            _silence(console)

    def help(self, command, /):
        self.print(render_help(command, colorful=self.colorful, fancy=self.fancy))

    def version(self, command, /):
        self.print(render_version(command, colorful=self.colorful))

    def report(self, fault, /):
        """render a CommandException and, when known, the failing command's usage line to stderr."""
        width = None
        if self.fancy:
            width = int(self.stderr.width * 2 / 3)
        self.print(fault.render(colorful=self.colorful, fancy=self.fancy, width=width), stderr=True)
        if fault.command is not None:
            self.print(render_usage(fault.command, colorful=self.colorful), stderr=True)

    def exit(self, status, /):
        logger.debug("exiting with status %d", status)
        return self._exit(status)


__all__ = (
    "Reporter",
    "Terminal",
)

"""
Thicket command layer: build, compose, and run command trees.

What this module provides
- Command: a node of the dispatch tree with:
  • typed flags (persistent to descendants) and positional definitions,
  • owned child commands (matched by name, shortcut, or alias),
  • a handler receiving a Context,
  • transient per-pass parsed state, rebuilt on every execute().
- Factories and helpers:
  • command(...): create a Command from a handler, or a decorator that does.
  • invoke(cmd, prompt): convenience runner accepting a shell-like string or tokens.

Dispatch (Command.execute)
1. register the root's --version flag (once, only when a version is configured);
2. resolve the deepest command matching the leading non-flag tokens;
3. reset that command's parsed state, parse the remaining tokens, validate;
4. --help renders help; --version prints the version; otherwise the handler
   runs with a Context and its result is returned.
Parse/validation failures leave the command's parsed state cleared and raise a
CommandException carrying the failing command. Command.run() turns those into
a rendered diagnostic and exit status 1.

Quick start
    from thicket import command, Flag, Positional

    @command(version="1.0.0")
    def tool(context):
        "A small tool."

    @tool.command(aliases=("hi",))
    def greet(context):
        "Greet someone."
        for _ in range(context.get_flag("times")):
            print("hello", context.get_arg("name"))

    greet.flag("times", "how many greetings", int, 1, shortcut="n")
    greet.positional("name", "who to greet", required=True)

    if __name__ == "__main__":
        tool.run()
"""
import functools
import inspect
import logging
import operator
import re
import shlex
import sys
import weakref
from collections.abc import Iterable

from .arguments import Flag, Positional
from .context import Context
from .faults import *
from .parser import Scanner, parse, validate
from .reporting import Reporter
from .utils import *

logger = logging.getLogger(__name__)


class CommandType(type):
    """
    Metaclass providing read-only introspection for Command.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics; the
      __displayable__ subset is used to keep reprs compact (and acyclic: the
      parent is never displayed).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}(%s)" % (
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Command(metaclass=CommandType):
    """
    A named node of the command tree.

    Lifecycle
    - Built once: construct, add flags/positionals, attach children. A child is
      attached to exactly one parent; re-attachment raises.
    - Executed many times: each execute() overwrites only the transient parsed
      state of the resolved command, so one tree can be run repeatedly.

    Ownership
    - Children are held by the parent's child list; the parent is held weakly
      (weakref), so the tree is released with its root.
    - A child kept without any reference to its root loses its ancestry: its
      parent becomes None and the ancestors' persistent flags are no longer
      visible from it. Hold the root for as long as the tree is used.

    Runtime options (read from the root)
    - strict: reject value-taking shortcuts that are not last in a group.
    - reporter: the Reporter used for help/version output and diagnostics.
    """

    __introspectable__ = (
        "name",
        "descr",
        "handler",
        "aliases",
        "shortcut",
        "version",
        "section",
        "strict",
        "flags",
        "positionals",
        "children",
        "parsed_flags",
        "parsed_positionals",
    )

    __displayable__ = (
        "name",
        "descr",
        "aliases",
        "shortcut",
        "version",
        "section",
        "flags",
        "positionals",
        "children",
    )

    def __init__(
            self,
            name,
            descr="",
            handler=None,
            *,
            aliases=(),
            shortcut=None,
            version=None,
            section="Commands",
            strict=False,
            reporter=Unset,
    ):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} name must be a string")
        elif not (name := name.strip()):
            raise EmptyNameError(f"{type(self).__typename__} name cannot be empty")
        elif re.search(r"\s", name) or name.startswith("-"):
            raise ValueError(f"{type(self).__typename__} name must not contain spaces or start with '-'")

        if not isinstance(descr, str):
            raise TypeError(f"{type(self).__typename__} descr must be a string")

        if handler is not None and not callable(handler):
            raise TypeError(f"{type(self).__typename__} handler must be callable")

        if isinstance(aliases, str) or not isinstance(aliases, Iterable):
            raise TypeError(f"{type(self).__typename__} aliases must be an iterable of strings")
        aliases = tuple(aliases)
        for alias in aliases:
            if not isinstance(alias, str):
                raise TypeError(f"{type(self).__typename__} aliases must be strings")
            # blank aliases are reported by add()
            if alias.strip() and (re.search(r"\s", alias) or alias.startswith("-")):
                raise ValueError(f"{type(self).__typename__} alias {alias!r} must not contain spaces or start with '-'")
        if len(set(aliases)) != len(aliases):
            raise ValueError(f"{type(self).__typename__} aliases cannot contain duplicates")

        if shortcut is not None and (not isinstance(shortcut, str) or len(shortcut) != 1 or shortcut == "-"):
            raise ValueError(f"{type(self).__typename__} shortcut must be a single character other than '-'")

        if version is not None and not isinstance(version, str):
            raise TypeError(f"{type(self).__typename__} version must be a string")

        if not isinstance(section, str) or not (section := section.strip()):
            raise ValueError(f"{type(self).__typename__} section must be a non-empty string")

        if reporter is not Unset and not isinstance(reporter, Reporter):
            raise TypeError(f"{type(self).__typename__} reporter must be a Reporter")

        self._name = name
        self._descr = descr.strip()
        self._handler = handler
        self._aliases = aliases
        self._shortcut = shortcut
        self._version = version
        self._section = section
        self._strict = bool(strict)
        self._reporter = reporter

        self._parent = None
        self._flags = []
        self._positionals = []
        self._children = []
        self._parsed_flags = []
        self._parsed_positionals = []
        self._versioner = None

        self.add_flag(Flag("help", "Shows help information for this command", shortcut="h"))

    @property
    def parent(self):
        """the parent command, or None for a root (or a parent already released)."""
        if self._parent is None:
            return None
        return self._parent()

    @property
    def root(self):
        """
        Return the topmost command in the current command hierarchy.

        Runtime options (strict, reporter) are always read from the root.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the full ancestry from root to this command as a tuple.

        The first element is the root command, the last is the current node.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def reporter(self):
        """the root's Reporter, created on first use when none was given."""
        root = self.root
        if root._reporter is Unset:
            root._reporter = Reporter()
        return root._reporter

    def walk(self):
        """yield this command and every descendant, depth-first."""
        yield self
        for child in self._children:
            yield from child.walk()

    # --- building ---------------------------------------------------------

    def add(self, child, /):
        """
        Attach 'child' under this command and return it.

        Raises
        - CommandAlreadyHasParentError: the child is already attached somewhere.
        - EmptyAliasError: the child declares an empty alias.
        - ValueError: the child is this command or one of its ancestors.
        """
        if not isinstance(child, Command):
            raise TypeError("add() argument must be a command")
        if child.parent is not None or child._parent is not None:
            raise CommandAlreadyHasParentError(f"command {child.name!r} already has a parent")
        if any(not alias.strip() for alias in child.aliases):
            raise EmptyAliasError(f"command {child.name!r} declares an empty alias")
        if child in self.path:
            raise ValueError(f"command {child.name!r} cannot be attached under itself")

        child._parent = weakref.ref(self)
        self._children.append(child)
        logger.debug("attached %r under %r", child.name, self.name)
        return child

    def add_flag(self, flag, /):
        """
        Register 'flag' on this command and return it.

        Only this command's own flags are checked: shadowing a flag of an
        ancestor is allowed (the closest definition wins on lookup).

        Raises
        - DuplicateFlagError: name or shortcut already used on this command.
        """
        if not isinstance(flag, Flag):
            raise TypeError("add_flag() argument must be a flag")
        for existing in self._flags:
            if existing.name == flag.name:
                raise DuplicateFlagError(f"command {self.name!r} already has a flag named {flag.name!r}")
            if flag.shortcut is not None and existing.shortcut == flag.shortcut:
                raise DuplicateFlagError(
                    f"command {self.name!r} already has a flag with shortcut {flag.shortcut!r} ({existing.name!r})"
                )
        self._flags.append(flag)
        return flag

    def add_positional(self, definition, /):
        """
        Append a positional definition and return it.

        Raises
        - VariadicArgumentNotLastError: a variadic definition is already last.
        - RequiredArgumentAfterOptionalError: a required definition follows an optional one.
        """
        if not isinstance(definition, Positional):
            raise TypeError("add_positional() argument must be a positional")
        if self._positionals and self._positionals[-1].variadic:
            raise VariadicArgumentNotLastError(
                f"command {self.name!r} cannot take {definition.name!r} after variadic {self._positionals[-1].name!r}"
            )
        if definition.required and any(not existing.required for existing in self._positionals):
            raise RequiredArgumentAfterOptionalError(
                f"command {self.name!r} cannot take required {definition.name!r} after an optional argument"
            )
        self._positionals.append(definition)
        return definition

    def flag(self, *args, **kwargs):
        """build a Flag from the arguments, register it, and return this command (chainable)."""
        self.add_flag(Flag(*args, **kwargs))
        return self

    def positional(self, *args, **kwargs):
        """build a Positional from the arguments, register it, and return this command (chainable)."""
        self.add_positional(Positional(*args, **kwargs))
        return self

    def command(self, source=Unset, /, *args, **kwargs):
        """
        Create a child command bound to this one.

        Works as a direct call (self.command(handler, ...)) or as a decorator
        (@self.command(...)); see the module-level command().
        """
        if source is Unset:
            @rename("command")
            def wrapper(source, /):
                return self.add(command(source, *args, **kwargs))
            return wrapper
        return self.add(command(source, *args, **kwargs))

    # --- lookups ----------------------------------------------------------

    def find_child(self, token, /):
        """
        Return the child matched by 'token', or None.

        Each child is tried in order against its name, then its shortcut, then
        its aliases; the first child that matches wins.
        """
        for child in self._children:
            if child.name == token:
                return child
            if child.shortcut is not None and child.shortcut == token:
                return child
            if token in child.aliases:
                return child
        return None

    def find_flag(self, name, /):
        """Return the closest flag named 'name', searching this command then its ancestors."""
        command = self
        while command is not None:
            for flag in command._flags:
                if flag.name == name:
                    return flag
            command = command.parent
        return None

    def find_flag_by_shortcut(self, shortcut, /):
        """Return the closest flag with 'shortcut', searching this command then its ancestors."""
        command = self
        while command is not None:
            for flag in command._flags:
                if flag.shortcut is not None and flag.shortcut == shortcut:
                    return flag
            command = command.parent
        return None

    # --- dispatch ---------------------------------------------------------

    def reset(self):
        """clear the transient parsed state."""
        self._parsed_flags.clear()
        self._parsed_positionals.clear()

    def resolve(self, scanner, /):
        """
        Descend from this command while the next token names a child.

        Flag-like tokens (leading '-') stop the descent, and so does the first
        token that matches no child: it is left for the parser as a positional.
        """
        command = self
        while (token := scanner.peek()) is not None and not token.startswith("-"):
            if (child := command.find_child(token)) is None:
                break
            scanner.advance()
            command = child
        return command

    def _register_versioner(self):
        root = self.root
        if root._versioner is not None or root.version is None:
            return
        if any(flag.name == "version" for flag in root._flags):
            return
        root._versioner = root.add_flag(Flag("version", "Shows version information"))

    def execute(self, argv, /, data=None, *, environ=Unset):
        """
        Run one dispatch pass over 'argv' (program name excluded).

        Parameters
        - argv: iterable of string tokens.
        - data: opaque shared state exposed through Context.get_context_data().
        - environ: mapping consulted for env-backed flags (defaults to os.environ).

        Returns
        - the handler's result, or None when help/version was shown.

        Raises
        - CommandException: parse/validation failure; 'fault.command' is the
          command that was being parsed.
        - anything the handler raises, unchanged.
        """
        self._register_versioner()

        # no state from a previous pass may leak into this one
        for command in self.walk():
            command.reset()

        scanner = Scanner(argv)
        target = self.resolve(scanner)
        logger.debug("resolved %r from %r", " ".join(step.name for step in target.path), scanner.tokens)

        try:
            parse(target, scanner, strict=self.root.strict)
            validate(target)
        except CommandException as fault:
            fault.command = target
            target.reset()
            logger.debug("pass failed on %r: %s", target.name, fault.message)
            raise

        context = Context(target, data, environ=environ)

        if context.get_flag("help"):
            self.reporter.help(target)
            return None

        versioner = self.root._versioner
        if versioner is not None and target.find_flag("version") is versioner and context.get_flag("version"):
            self.reporter.version(self.root)
            return None

        if target.handler is None:
            # nothing to run: a grouping command shows its help
            self.reporter.help(target)
            return None

        return target.handler(context)

    def run(self, data=None, *, environ=Unset):
        """
        Execute with the process arguments and finish through the reporter.

        A CommandException is rendered as a diagnostic (plus the failing
        command's usage line) and the reporter exits with status 1; otherwise
        it exits with status 0.
        """
        try:
            self.execute(sys.argv[1:], data, environ=environ)
        except CommandException as fault:
            self.reporter.report(fault)
            return self.reporter.exit(1)
        return self.reporter.exit(0)


def _describe(handler):
    # first paragraph of the handler docstring, if any
    if not (doc := inspect.getdoc(handler)):
        return ""
    return doc.split("\n\n", 1)[0].replace("\n", " ").strip()


def command(source=Unset, /, *args, **kwargs):
    """
    Create a Command from a handler, or return a decorator to build it later.

    Invocation modes
    - Direct:
        cmd = command(handler, name="x", ...)
    - Decorator:
        @command(name="x", ...)
        def handler(context): ...
    - Bare decorator:
        @command
        def handler(context): ...

    Defaults
    - name: the handler's __name__ with underscores turned into hyphens.
    - descr: the first paragraph of the handler's docstring.
    Remaining keyword arguments are forwarded to Command.
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        options = dict(kwargs)
        if not args:
            options.setdefault("name", source.__name__.replace("_", "-"))
        if len(args) < 2:
            options.setdefault("descr", _describe(source))
        return Command(*args, handler=source, **options)

    return wrapper(source) if source is not Unset else wrapper


def invoke(object, prompt=Unset, /, data=None, *, environ=Unset):
    """
    Convenience runner for commands.

    Parameters
    - object: a Command.
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: use items as tokens (each must be str).

    Returns the handler result (see Command.execute).
    """
    if not isinstance(object, Command):
        raise TypeError("invoke() first argument must be a command")

    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("invoke() second argument must be a string or an iterable of strings")
    else:
        raise TypeError("invoke() second argument must be a string or an iterable of strings")

    return object.execute(tokens, data, environ=environ)


__all__ = (
    "Command",
    "command",
    "invoke",
)

# keep the metaclass out of star-imports and docs; not part of the public API
del CommandType

"""
Thicket help and version renderers (rich-based).

Layout of a help page
- description (bold) and, when configured, the version (dim)
- usage line: route, [flags], <required> [optional] [variadic...], [command]
- Arguments: aligned name/description with (required|optional|variadic)
- Flags: the command's own visible flags with kind and default
- Global Flags: visible flags inherited from ancestors and not shadowed
- one section per child-command section label, sorted, children sorted by name

Palette keys
- description, version, program-version, section-label, program-name, usage-section,
  argument-name, flag-name, shortcut, kind, default, env, child-name, child-description
Define a mapping named __styles__ in __main__ to override any palette entry.
When colorful is False, styling is suppressed.
"""
from collections import defaultdict

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .values import Kind


def _palette(colorful):
    styles = defaultdict(str, {
        # === Head sections ===
        "description": "bold",
        "version": "dim",
        "program-version": "bold #00E6FF",  # Cyan version
        "section-label": "bold #FFFFFF",  # Pure white headers
        "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
        "usage-section": "bold #36C5F0",  # SKY-BLUE → softer than cyan

        # === Arguments / flags ===
        "argument-name": "bold #FFD600",  # AMBER for positionals
        "flag-name": "bold #22C55E",  # GREEN for flags
        "shortcut": "bold #00E6FF",  # CYAN for shortcuts
        "kind": "#9CA3AF",  # Muted gray
        "default": "italic #9CA3AF",
        "env": "#737373",

        # === Children ===
        "child-name": "bold #36C5F0",
        "child-description": "#9CA3AF",
    } | getattr(__import__('__main__'), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    return styler


def _format_default(kind, default):
    match kind:
        case Kind.BOOL:
            return "true" if default else "false"
        case Kind.STRING:
            return '"%s"' % default
        case _:
            return str(default)


def _grid():
    table = Table.grid(padding=(0, 2))
    table.add_column(no_wrap=True)
    table.add_column()
    return table


def _flag_rows(table, flags, styler):
    for flag in flags:
        if flag.hidden:
            continue
        if flag.shortcut is not None:
            name = Text.assemble("  ", ("-" + flag.shortcut, styler("shortcut")), ", ", ("--" + flag.name, styler("flag-name")))
        else:
            name = Text.assemble("      ", ("--" + flag.name, styler("flag-name")))
        description = Text.assemble(
            flag.descr,
            " ",
            ("[%s]" % flag.kind.label, styler("kind")),
            " ",
            ("(default: %s)" % _format_default(flag.kind, flag.default), styler("default")),
        )
        if flag.env is not None:
            description.append(" (env: %s)" % flag.env, styler("env"))
        table.add_row(name, description)


def _inherited(command):
    """ancestor flags still reachable from 'command' (closest definition wins)."""
    seen = {flag.name for flag in command.flags}
    for ancestor in reversed(command.path[:-1]):
        for flag in ancestor.flags:
            if flag.name in seen:
                continue
            seen.add(flag.name)
            if command.find_flag(flag.name) is flag:
                yield flag


def render_usage(command, *, colorful=True):
    """build the one-line usage text for 'command' (route, flags, positionals, children)."""
    styler = _palette(colorful)

    usage = Text("  ")
    usage.append(command.root.name, styler("program-name"))
    for step in command.path[1:]:
        usage.append(" ")
        usage.append(step.name, styler("usage-section"))

    if command.flags:
        usage.append(" [flags]")

    for definition in command.positionals:
        if definition.variadic:
            usage.append(" [%s...]" % definition.name, styler("argument-name"))
        elif definition.required:
            usage.append(" <%s>" % definition.name, styler("argument-name"))
        else:
            usage.append(" [%s]" % definition.name, styler("argument-name"))

    if command.children:
        usage.append(" [command]")

    return usage


def render_help(command, *, colorful=True, fancy=False):
    """build the full help page for 'command' as a rich renderable."""
    styler = _palette(colorful)
    renders = []

    if command.descr:
        renders.append(Text(command.descr, styler("description")))
    if command.version:
        renders.append(Text("Version: %s" % command.version, styler("version")))
    if renders:
        renders.append(Text(""))

    renders.append(Text("Usage:", styler("section-label")))
    renders.append(render_usage(command, colorful=colorful))
    renders.append(Text(""))

    if command.positionals:
        table = _grid()
        for definition in command.positionals:
            if definition.variadic:
                note = "(variadic)"
            elif definition.required:
                note = "(required)"
            else:
                note = "(optional, default: %s)" % _format_default(definition.kind, definition.default)
            table.add_row(
                Text.assemble("  ", (definition.name, styler("argument-name"))),
                Text.assemble(definition.descr, " ", (note, styler("default"))),
            )
        renders.extend((Text("Arguments:", styler("section-label")), table, Text("")))

    if any(not flag.hidden for flag in command.flags):
        table = _grid()
        _flag_rows(table, command.flags, styler)
        renders.extend((Text("Flags:", styler("section-label")), table, Text("")))

    if inherited := [flag for flag in _inherited(command) if not flag.hidden]:
        table = _grid()
        _flag_rows(table, inherited, styler)
        renders.extend((Text("Global Flags:", styler("section-label")), table, Text("")))

    sections = defaultdict(list)
    for child in command.children:
        sections[child.section].append(child)

    for section in sorted(sections):
        table = _grid()
        for child in sorted(sections[section], key=lambda child: child.name):
            name = Text.assemble("  ", (child.name, styler("child-name")))
            if child.shortcut is not None:
                name.append(" (%s)" % child.shortcut)
            table.add_row(name, Text(child.descr, styler("child-description")))
        renders.extend((Text("%s:" % section, styler("section-label")), table, Text("")))

    if fancy:
        return Panel(Group(*renders[:-1]), title=Text(command.name, styler("program-name")), title_align="left")
    return Group(*renders)


def render_version(command, *, colorful=True):
    """build the version line for 'command' (the configured version string)."""
    styler = _palette(colorful)
    return Text(str(command.version), styler("program-version"))


__all__ = (
    "render_usage",
    "render_help",
    "render_version",
)

"""
Help rendering for a command tree.

Layout
- usage line
- "Commands:" grouped by first path segment; groups and rows sorted
  lexicographically, hidden commands (aliases included) left out together
  with everything below them. A row without its own description shows its
  parent's description. In verbose mode each row lists its examples.
- "Options:" with the global flags understood by the dispatch pipeline.
- the configuration precedence line.

render_help() returns a rich renderable (or None in quiet mode); printing is
left to the caller's console.
"""
from collections import defaultdict

from rich.console import Group
from rich.table import Table
from rich.text import Text

GLOBAL_OPTIONS = (
    ("-h, --help", "Show help"),
    ("-V, --version", "Show version"),
    ("-q, --quiet", "Suppress all output except errors"),
    ("-v, --verbose", "Chatty output; includes debug logs"),
    ("--color=[auto|always|never]", "Color mode (default: auto)"),
    ("--output=[text|json|yaml]", "Output mode (default: text)"),
    ("--config=<path>", "Path to config file"),
    ("--otel-endpoint=<url>", "OpenTelemetry collector endpoint"),
)

styles = defaultdict(str, {
    "label": "bold",
    "command": "cyan",
    "description": "",
    "example": "dim italic",
    "option": "green",
})


def rows(tree, /):
    """
    yield (group, path, description, examples) for every visible registered
    or group node, depth first in lexicographic order.
    """
    def visit(node, prefix):
        children = node.children
        for segment in sorted(children):
            child = children[segment]
            if child.options.hidden:
                continue
            path = prefix + (segment,)
            description = child.options.description or (node.options.description if prefix else None) or ""
            yield path[0], " ".join(path), description, child.options.examples
            yield from visit(child, path)

    yield from visit(tree.root, ())


def render_help(name, tree, verbosity="normal", /):
    """
    build the full help text for tree; None when verbosity is quiet.
    """
    if verbosity == "quiet":
        return None

    renders = [
        Text.assemble(("Usage:", styles["label"]), " ", "%s <command> [...args] [options]" % name if name else "<command> [...args] [options]"),
        Text(""),
        Text("Commands:", style=styles["label"]),
        Text(""),
    ]

    groups = defaultdict(list)
    for group, path, description, examples in rows(tree):
        groups[group].append((path, description, examples))

    for group in sorted(groups):
        width = max(len(path) for path, _, _ in groups[group]) + 2
        for path, description, examples in groups[group]:
            line = Text("  ").append(path, style=styles["command"])
            if description:
                line.append(" " * (width - len(path))).append("– " + description, style=styles["description"])
            renders.append(line)
            if verbosity == "verbose":
                for example in examples:
                    renders.append(Text("      e.g. ").append(example, style=styles["example"]))
        renders.append(Text(""))

    options = Table.grid(padding=(0, 2))
    options.add_column(no_wrap=True)
    options.add_column()
    for flag, description in GLOBAL_OPTIONS:
        options.add_row(Text("  " + flag, style=styles["option"]), description)

    renders += [
        Text("Options:", style=styles["label"]),
        options,
        Text(""),
        Text.assemble(("Global Options Precedence:", styles["label"]), " CLI flags > ENV > config file"),
    ]
    return Group(*renders)


__all__ = ("GLOBAL_OPTIONS", "render_help", "rows")

"""
Arbor command tree: registration, traversal and lazy resolution.

What this module provides
- CommandOptions: immutable per-command metadata (description, examples,
  aliases, hidden, validator).
- LazyImport: where a deferred command lives (module or file + export name).
- Unregistered / Bound / Pending: the three states a node can be in. A node
  is "registered" when it is Bound (has a handler) or Pending (has a lazy
  import); exactly one state holds at any time.
- CommandNode: one trie node per path segment.
- CommandTree: the trie with register(), register_lazy(), traverse(), walk()
  and resolve().

Core ideas
- Paths are tuples of case-sensitive segments; "user add" and
  ["user", "add"] are the same path.
- Traversal is greedy and non-backtracking; a group node (children but no
  handler) is a valid traversal result and callers must check `registered`.
- Walk order is lexicographic by segment everywhere (suggestions, help), so
  output never depends on registration order.
- Lazy resolution happens at most once per command (aliases resolve through
  the node they point at); the node's lock makes the memoization safe for hosts that dispatch from several threads.
"""
import importlib
import importlib.util
import logging
import os.path
import re
import sys
import threading
from typing import NamedTuple

from .faults import ConfigurationError, LoadError
from .utils import Unset, mirror, segments

logger = logging.getLogger(__name__)


class CommandOptions(NamedTuple):
    description: str | None = None
    examples: tuple = ()
    aliases: tuple = ()
    hidden: bool = False
    validator: object = None


class LazyImport(NamedTuple):
    source: str
    export: str = "default"


class Unregistered(NamedTuple):
    pass


class Bound(NamedTuple):
    handler: object


class Pending(NamedTuple):
    source: LazyImport


def command_options(description=None, examples=(), aliases=(), hidden=False, validator=None):
    """
    Build CommandOptions from loose keyword arguments, validating shapes.

    - description: str or None.
    - examples / aliases: iterables of strings (a single string is one item).
    - hidden: bool.
    - validator: anything arbor.validation.validate() accepts, or None.
    """
    if description is not None and not isinstance(description, str):
        raise TypeError("command 'description' must be a string")
    if isinstance(examples, str):
        examples = (examples,)
    if isinstance(aliases, str):
        aliases = (aliases,)
    examples, aliases = tuple(examples), tuple(aliases)
    for name, values in (("examples", examples), ("aliases", aliases)):
        if not all(isinstance(value, str) for value in values):
            raise TypeError("command %r must contain only strings" % name)
    if any(not alias or alias.split() != [alias] for alias in aliases):
        raise ConfigurationError("command aliases must be single non-empty segments", aliases=aliases)
    if not isinstance(hidden, bool):
        raise TypeError("command 'hidden' must be a boolean")
    return CommandOptions(description, examples, aliases, hidden, validator)


class CommandNode:
    """
    One segment of the command trie.

    Read-only views
    - state: Unregistered(), Bound(handler) or Pending(LazyImport).
    - handler: the bound callable or None.
    - pending: the LazyImport descriptor or None.
    - registered: True when a handler or a lazy import is set.
    - options: CommandOptions.
    - children: a copy of the segment → CommandNode mapping.
    """
    __slots__ = ("_state", "_options", "_children", "_lock", "_target")

    children = mirror("children")

    def __init__(self):
        self._state = Unregistered()
        self._options = CommandOptions()
        self._children = {}
        self._lock = threading.Lock()
        self._target = None

    @property
    def origin(self):
        """the node that owns the state: itself, or the command an alias points at."""
        return self._target if self._target is not None else self

    @property
    def state(self):
        return self.origin._state

    @property
    def options(self):
        return self._options

    @property
    def handler(self):
        match self.origin._state:
            case Bound(handler):
                return handler
        return None

    @property
    def pending(self):
        match self.origin._state:
            case Pending(source):
                return source
        return None

    @property
    def registered(self):
        return not isinstance(self.origin._state, Unregistered)

    def __repr__(self):
        return "command-node(state=%r, children=%r)" % (self.state, sorted(self._children))


def _import(source):
    """
    Import the module named by a LazyImport source.

    A source ending in ".py" or containing a path separator is loaded from the
    filesystem and cached in sys.modules under a name derived from its real
    path; anything else is treated as a dotted module name.
    """
    if source.endswith(".py") or os.path.sep in source or "/" in source:
        path = os.path.realpath(source)
        name = "arbor.lazy.%s" % re.sub(r"\W", "_", path)
        if (module := sys.modules.get(name)) is not None:
            return module
        spec = importlib.util.spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            raise ImportError("cannot load a module from %r" % source)
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            del sys.modules[name]
            raise
        return module
    return importlib.import_module(source)


class CommandTree:
    """
    The canonical mapping from command path to behavior.

    Built once at startup by a single writer, then read by traversal,
    suggestion and help. The root always exists and is never registered.
    """

    def __init__(self):
        self._root = CommandNode()

    @property
    def root(self):
        return self._root

    def register(self, path, handler, options=CommandOptions(), /):
        """
        Register a handler at path.

        Raises
        - ConfigurationError: empty path, duplicate path, or an alias that
          collides with an existing sibling.
        - TypeError: handler is not callable.
        """
        if not callable(handler):
            raise TypeError("register() handler must be callable")
        return self._insert(path, Bound(handler), options)

    def register_lazy(self, path, source, options=CommandOptions(), /):
        """
        Register a deferred import at path; same rules as register().
        """
        if not isinstance(source, LazyImport):
            raise TypeError("register_lazy() source must be a LazyImport")
        if not source.source or not isinstance(source.source, str):
            raise ConfigurationError("lazy command source must be a non-empty string", source=source)
        if not source.export or not isinstance(source.export, str):
            raise ConfigurationError("lazy command export must be a non-empty string", source=source)
        return self._insert(path, Pending(source), options)

    def _insert(self, path, state, options):
        path = segments(path)
        if not path:
            raise ConfigurationError("register() requires at least one path segment", path=path)
        if not isinstance(options, CommandOptions):
            raise TypeError("register() options must be CommandOptions")

        # Check everything before mutating so a rejected registration leaves no trace.
        route = " ".join(path)
        parent = self._lookup(path[:-1])
        existing = parent._children.get(path[-1]) if parent is not None else None
        if existing is not None and existing.registered:
            raise ConfigurationError("command already registered: %s" % route, path=path)

        seen = {path[-1]}
        for alias in options.aliases:
            if alias in seen or (parent is not None and alias in parent._children):
                raise ConfigurationError(
                    "alias %r for %r collides with an existing command" % (alias, route),
                    path=path,
                    alias=alias,
                )
            seen.add(alias)

        node = self._root
        for segment in path:
            if (child := node._children.get(segment)) is None:
                child = node._children[segment] = CommandNode()
            parent, node = node, child

        node._state = state
        node._options = options

        shadow = options._replace(hidden=True)
        for alias in options.aliases:
            sibling = parent._children[alias] = CommandNode()
            sibling._target = node
            sibling._options = shadow

        logger.debug("registered %s (%s)", route, type(state).__name__.lower())
        return node

    def _lookup(self, path):
        node = self._root
        for segment in path:
            if (node := node._children.get(segment)) is None:
                return None
        return node

    def traverse(self, path, /):
        """
        Follow path from the root as far as children exist.

        Returns (node, consumed): the deepest node reached and how many
        segments were matched. traverse([]) returns (root, 0).
        """
        node = self._root
        consumed = 0
        for segment in path:
            if (child := node._children.get(segment)) is None:
                break
            node = child
            consumed += 1
        return node, consumed

    def walk(self):
        """
        Yield (path, node) for every node below the root, depth first,
        children in lexicographic order.
        """
        stack = [((), self._root)]
        while stack:
            prefix, node = stack.pop()
            if prefix:
                yield prefix, node
            for segment in sorted(node._children, reverse=True):
                stack.append((prefix + (segment,), node._children[segment]))

    def resolve(self, node, /):
        """
        Return the node's handler, importing it first when it is pending.

        The import happens at most once per command: aliases resolve through
        the node they point at, and the result is cached there (state becomes
        Bound) under that node's lock.

        Raises
        - LoadError: the import failed, the export is missing or not callable,
          or the node is not registered at all.
        """
        node = node.origin
        match node.state:
            case Bound(handler):
                return handler

        with node._lock:
            match node.state:
                case Bound(handler):
                    return handler
                case Pending(source):
                    handler = self._load(source)
                    node._state = Bound(handler)
                    return handler
                case _:
                    raise LoadError("no command is registered at this node")

    @staticmethod
    def _load(source):
        logger.debug("importing lazy command %s:%s", source.source, source.export)
        try:
            module = _import(source.source)
        except (ImportError, OSError, SyntaxError) as error:
            raise LoadError("unable to import %r: %s" % (source.source, error), source=source) from error

        handler = getattr(module, source.export, Unset)
        if handler is Unset:
            handler = getattr(module, "default", Unset)
        if handler is Unset:
            raise LoadError("module %r has no export %r" % (source.source, source.export), source=source)
        if not callable(handler):
            raise LoadError("lazy import did not yield a callable (%s)" % source.source, source=source)
        return handler


__all__ = (
    "CommandOptions",
    "LazyImport",
    "Unregistered",
    "Bound",
    "Pending",
    "CommandNode",
    "CommandTree",
    "command_options",
)

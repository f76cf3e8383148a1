"""
Arbor dispatch pipeline: the CLI object host applications build and run.

What this module provides
- CLI: owns a CommandTree plus before/after hooks, and runs one invocation
  per call to run(argv).
  • register_command(path, handler, **options) (also usable as a decorator)
  • register_lazy_command(path, source, export="default", **options)
  • before_each(hook) / after_each(hook)
  • run(argv) → Exit (coroutine; never terminates the process)
  • main(argv) → runs the pipeline and exits the process with its code

Pipeline (one pass, each failure short-circuits the rest)
    parse global flags → output mode → config file + env → --version
    → verbosity → --help / no command → traverse → unknown command report
    → context → before hooks → lazy import → flag validation → span
    → handler → exit mapping → span end → after hooks

Quick start
    from arbor import CLI, CommandError

    cli = CLI("user-manager", "2.0.0")

    @cli.register_command("user add", description="Add a new user")
    def add(args, flags, ctx):
        if flags["username"] == "root":
            raise CommandError("refusing to add root", exit_code=2)
        ctx.log("added %s" % flags["username"])

    if __name__ == "__main__":
        cli.main()
"""
import asyncio
import inspect
import logging
import shlex
import signal
import sys
from collections.abc import Iterable
from contextlib import contextmanager

from rich.console import Console

from .config import load_config_file, load_env_overrides
from .context import Context
from .faults import Exit, UnknownCommandError, ValidationError
from .helper import render_help
from .logs import configure
from .suggest import suggest
from .tokens import tokenize
from .tracing import Tracer, export_endpoint
from .tree import CommandTree, LazyImport, command_options
from .utils import Unset, segments
from .validation import booleans, validate

logger = logging.getLogger(__name__)

BOOLEANS = ("help", "version", "quiet", "verbose")
STRINGS = ("color", "output", "config", "otel-endpoint")
ALIASES = {"h": "help", "V": "version", "q": "quiet", "v": "verbose"}
GLOBALS = frozenset(name.replace("-", "_") for name in BOOLEANS + STRINGS)


async def _call(callable, /, *args):
    result = callable(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


@contextmanager
def _interrupts(cancellation):
    """
    wire SIGINT to the cancellation signal while the block runs.

    Only the first Ctrl-C is captured: it restores the default handler before
    firing, so a second Ctrl-C raises KeyboardInterrupt even when the command
    never looks at the signal.
    """
    loop = asyncio.get_running_loop()

    def interrupted():
        loop.remove_signal_handler(signal.SIGINT)
        cancellation.fire()

    try:
        loop.add_signal_handler(signal.SIGINT, interrupted)
        installed = True
    except (NotImplementedError, RuntimeError, ValueError):
        # Windows loops and non-main threads keep the default KeyboardInterrupt behavior.
        logger.debug("SIGINT is not routed to the cancellation signal here")
        installed = False
    try:
        yield cancellation
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


def _report(context, console, error, /):
    if context.output == "text":
        console.print(error)
    else:
        context.error({
            "error": error.message,
            "errors": [{"field": field, "message": message} for field, message in error.errors],
        })


def _console(file, color, /, stderr=False):
    match color:
        case "always":
            return Console(file=file, stderr=stderr, force_terminal=True)
        case "never":
            return Console(file=file, stderr=stderr, no_color=True)
        case _:
            return Console(file=file, stderr=stderr)


class CLI:
    """
    A command-line program built around a command tree.

    Parameters
    - name, version: shown by --version; name is also the config directory
      name and the environment prefix.
    - stdout, stderr: streams for regular and error output (default: the
      process streams).
    - tracer: arbor.tracing.Tracer used for invocation spans.
    - config_loader(name, path) and env_loader(prefix): configuration sources.
    - logging: when True, each run routes arbor's log records to stderr
      through rich at the run's verbosity.
    """

    def __init__(
            self,
            name="generic-cli",
            version="0.0.0",
            /,
            *,
            stdout=None,
            stderr=None,
            tracer=None,
            config_loader=load_config_file,
            env_loader=load_env_overrides,
            logging=True,
    ):
        if not isinstance(name, str) or not name.strip():
            raise TypeError("CLI() name must be a non-empty string")
        if not isinstance(version, str):
            raise TypeError("CLI() version must be a string")
        self._name = name.strip()
        self._version = version
        self._tree = CommandTree()
        self._before = []
        self._after = []
        self._config = {}
        self._stdout = stdout
        self._stderr = stderr
        self._tracer = tracer if tracer is not None else Tracer()
        self._config_loader = config_loader
        self._env_loader = env_loader
        self._logging = logging

    @property
    def name(self):
        return self._name

    @property
    def version(self):
        return self._version

    @property
    def tree(self):
        return self._tree

    @property
    def config(self):
        """the configuration merged by the last run (file < env)."""
        return dict(self._config)

    # -------------------- registration --------------------

    def register_command(self, path, handler=Unset, /, **options):
        """
        Register handler(args, flags, ctx) at path.

        Without a handler, returns a decorator:
            @cli.register_command("user add", description="...")
            def add(args, flags, ctx): ...

        Options: description, examples, aliases, hidden, validator.

        Raises
        - ConfigurationError: empty path, already registered, alias collision.
        """
        built = command_options(**options)

        def wrapper(handler, /):
            self._tree.register(segments(path), handler, built)
            return handler

        return wrapper(handler) if handler is not Unset else wrapper

    def register_lazy_command(self, path, source, export="default", /, **options):
        """
        Register a command whose handler is imported on first invocation.

        - source: dotted module name or path to a .py file.
        - export: attribute holding the handler (falls back to "default").
        """
        self._tree.register_lazy(segments(path), LazyImport(source, export), command_options(**options))

    def before_each(self, hook, /):
        """append hook(ctx); runs before every command, in registration order."""
        if not callable(hook):
            raise TypeError("before_each() argument must be callable")
        self._before.append(hook)
        return hook

    def after_each(self, hook, /):
        """append hook(ctx); runs after every successful command, in registration order."""
        if not callable(hook):
            raise TypeError("after_each() argument must be callable")
        self._after.append(hook)
        return hook

    # -------------------- dispatch --------------------

    async def run(self, argv, /):
        """
        Execute one invocation and return its Exit.

        Exit codes: 0 for success, help and version; 1 for unknown commands,
        invalid flags and unstructured errors; CommandError.exit_code for
        structured command errors.
        """
        parsed = tokenize(argv, booleans=BOOLEANS, strings=STRINGS, aliases=ALIASES, stop_early=True)
        flags = parsed.flags
        output = flags.get("output") if flags.get("output") in ("json", "yaml") else "text"
        stdout = _console(self._stdout, flags.get("color"))
        stderr = _console(self._stderr, flags.get("color"), stderr=True)

        verbosity = "quiet" if flags["quiet"] else "verbose" if flags["verbose"] else "normal"
        if self._logging:
            configure(verbosity, stderr)

        self._config = {
            **self._config_loader(self._name, flags.get("config")),
            **self._env_loader(self._name),
        }
        export_endpoint(flags.get("otel_endpoint"))

        if flags["version"]:
            stdout.out("%s %s" % (self._name, self._version), highlight=False)
            return Exit(0, "version")

        positionals = parsed.positionals
        if flags["help"] or not positionals:
            if (renderable := render_help(self._name, self._tree, verbosity)) is not None:
                stdout.print(renderable)
            return Exit(0, "help")

        node, consumed = self._tree.traverse(positionals)
        logger.debug("traversed %r: consumed %d segment(s)", positionals, consumed)
        if not node.registered:
            attempted = positionals[:consumed + 1]
            report = UnknownCommandError(
                "unknown command: %s" % " ".join(attempted),
                command=" ".join(attempted),
                suggestion=suggest(self._tree, attempted) or suggest(self._tree, positionals),
            )
            stderr.print(report)
            if (renderable := render_help(self._name, self._tree, verbosity)) is not None:
                stdout.print()
                stdout.print(renderable)
            return Exit(1, report.code.normalize())

        local = tokenize(positionals[consumed:], booleans=booleans(node.options.validator), defaults=False)
        if misplaced := sorted(GLOBALS.intersection(local.flags)):
            logger.warning(
                "ignoring global flag(s) after the command: %s (place them before it)",
                ", ".join("--" + name.replace("_", "-") for name in misplaced),
            )
        command_flags = {key: value for key, value in local.flags.items() if key not in GLOBALS}
        raw = {**self._config, **flags, **command_flags}
        if parsed.rest is not None:
            raw["--"] = list(parsed.rest)

        context = Context(local.positionals, raw, verbosity, output, stdout=stdout, stderr=stderr, tracer=self._tracer)

        with _interrupts(context.signal):
            try:
                logger.debug("running %d before hook(s)", len(self._before))
                for hook in self._before:
                    await _call(hook, context)

                handler = self._tree.resolve(node)

                try:
                    context.flags = validate(node.options.validator, raw)
                except ValidationError as error:
                    _report(context, stderr, error)
                    return Exit(1, error.code.normalize())

                context.start_span(" ".join(positionals[:consumed]) or "root")
                try:
                    await _call(handler, context.args, context.flags, context)
                    context.ok()
                except Exception as error:
                    context.fail(error)
                    raise
                finally:
                    context.end_span()

                logger.debug("running %d after hook(s)", len(self._after))
                for hook in self._after:
                    await _call(hook, context)
            except Exception as error:
                return context.handle_error(error)

        return Exit(0)

    def main(self, argv=Unset, /):
        """
        Process boundary: run the pipeline and exit with its code.

        - argv Unset: sys.argv[1:].
        - str: split like a shell would (shlex.split).
        - Iterable[str]: items are trimmed; empty items are dropped.
        """
        if argv is Unset:
            tokens = sys.argv[1:]
        elif isinstance(argv, str):
            tokens = shlex.split(argv)
        elif isinstance(argv, Iterable):
            def _sanitized(iterable):
                for item in iterable:
                    if not isinstance(item, str):
                        raise TypeError("main() argument must be a string or an iterable of strings")
                    if item := item.strip():
                        yield item
            tokens = list(_sanitized(argv))
        else:
            raise TypeError("main() argument must be a string or an iterable of strings")

        exit = asyncio.run(self.run(tokens))
        sys.exit(exit.code)

    def __repr__(self):
        return "cli(name=%r, version=%r)" % (self._name, self._version)


__all__ = ("CLI",)

"""
Per-invocation execution context handed to hooks and command handlers.

What a Context carries
- args: positional arguments left after the command path.
- flags: validated flags (or the raw merged mapping when no validator is set).
- raw: the raw merged mapping, before validation.
- verbosity ("quiet" | "normal" | "verbose") and output ("text" | "json" | "yaml").
- a private key/value store for hook-to-handler data passing.
- signal: a CancellationSignal fired once when the user presses Ctrl-C.
- the invocation span (start_span/ok/fail/end_span).

Output helpers
- log (green), warn (yellow), debug (blue, verbose only): silenced in quiet mode.
- error (red): always shown, written to the error console.
- In json/yaml output modes, messages are serialized instead of styled.
"""
import asyncio
import json
import logging

import yaml
from rich.console import Console
from rich.text import Text

from .faults import CommandError, explain
from .tracing import Tracer

logger = logging.getLogger(__name__)

VERBOSITIES = ("quiet", "normal", "verbose")
OUTPUTS = ("text", "json", "yaml")
LEVEL_WEIGHT = {"quiet": 0, "normal": 1, "verbose": 2}


class CancellationSignal:
    """
    one-shot interruption signal.

    - fire(): marks the signal, runs callbacks once; later calls are no-ops.
    - fired: whether fire() happened.
    - on_fire(callback): callback() runs on fire (immediately if already fired).
    - wait(): coroutine completing once fired.
    """

    def __init__(self):
        self._fired = False
        self._callbacks = []
        self._event = asyncio.Event()

    @property
    def fired(self):
        return self._fired

    def fire(self):
        if self._fired:
            return
        self._fired = True
        self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def on_fire(self, callback, /):
        if not callable(callback):
            raise TypeError("on_fire() argument must be callable")
        if self._fired:
            callback()
        else:
            self._callbacks.append(callback)
        return callback

    async def wait(self):
        await self._event.wait()

    def __bool__(self):
        return self._fired


class Context:
    """
    Context passed into every hook and command handler.

    One instance per invocation; never reused.
    """

    def __init__(
            self,
            args=(),
            flags=None,
            /,
            verbosity="normal",
            output="text",
            *,
            stdout=None,
            stderr=None,
            tracer=None,
    ):
        if verbosity not in VERBOSITIES:
            raise ValueError("verbosity must be one of %s" % ", ".join(VERBOSITIES))
        if output not in OUTPUTS:
            raise ValueError("output must be one of %s" % ", ".join(OUTPUTS))
        self.args = list(args)
        self.raw = dict(flags or {})
        self.flags = self.raw
        self._verbosity = verbosity
        self._output = output
        self._stdout = stdout if stdout is not None else Console()
        self._stderr = stderr if stderr is not None else Console(stderr=True)
        self._tracer = tracer if tracer is not None else Tracer()
        self._store = {}
        self._span = None
        self.signal = CancellationSignal()

    @property
    def verbosity(self):
        return self._verbosity

    @property
    def output(self):
        return self._output

    @property
    def span(self):
        return self._span

    # -------------------- store --------------------

    def set(self, key, value, /):
        self._store[key] = value

    def get(self, key, default=None, /):
        return self._store.get(key, default)

    def __getitem__(self, key):
        return self._store[key]

    def __setitem__(self, key, value):
        self._store[key] = value

    def __contains__(self, key):
        return key in self._store

    # -------------------- tracing --------------------

    def start_span(self, name, /):
        self._span = self._tracer.start(name)
        return self._span

    def ok(self):
        if self._span is not None:
            self._span.mark_ok()

    def fail(self, error, /):
        if self._span is not None:
            self._span.mark_failed(str(error))

    def end_span(self):
        if self._span is not None:
            self._span.end()

    # -------------------- cancellation --------------------

    def on_abort(self, callback, /):
        return self.signal.on_fire(callback)

    # -------------------- output --------------------

    def _emit(self, console, message, style):
        match self._output:
            case "json":
                console.out(json.dumps(message, default=str), highlight=False)
            case "yaml":
                console.out(yaml.safe_dump(message, sort_keys=False).rstrip(), highlight=False)
            case _:
                console.print(Text(str(message), style=style))

    def log(self, message, /):
        if LEVEL_WEIGHT[self._verbosity] >= 1:
            self._emit(self._stdout, message, "green")

    def warn(self, message, /):
        if LEVEL_WEIGHT[self._verbosity] >= 1:
            self._emit(self._stdout, message, "yellow")

    def debug(self, message, /):
        if LEVEL_WEIGHT[self._verbosity] >= 2:
            self._emit(self._stdout, message, "blue")

    def error(self, message, /):
        self._emit(self._stderr, message, "red")

    # -------------------- exit helpers --------------------

    def fatal(self, message, /, code=1):
        """
        abort the command with a structured error (message + exit code).
        """
        raise CommandError(message, exit_code=code)

    def handle_error(self, error, /):
        """
        print an error the way the pipeline does and return its Exit.
        """
        message, exit = explain(error)
        self.error(message)
        logger.debug("mapped %s to exit %d", type(error).__name__, exit.code)
        return exit

    def __repr__(self):
        return "context(args=%r, verbosity=%r, output=%r)" % (self.args, self._verbosity, self._output)


__all__ = ("CancellationSignal", "Context", "LEVEL_WEIGHT", "OUTPUTS", "VERBOSITIES")

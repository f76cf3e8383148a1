"""
Arbor faults (errors) and exit outcomes.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure the
  library can report. Codes are grouped by domain so logs stay searchable.
- ArborException: base type carrying a message plus read-only options, able
  to render itself through rich.
- ConfigurationError / UnknownCommandError / ValidationError / LoadError /
  CommandError: the taxonomy the registry and the dispatch pipeline use.
- Exit: the outcome of one pipeline run (exit code + reason), returned instead
  of terminating the process so callers decide when to exit.

Propagation
- ConfigurationError is raised at registration time and never caught by the
  pipeline.
- Everything raised during an invocation is mapped to an Exit in one place
  (see arbor.cli); CommandError keeps its own exit code, anything else maps to 1.
"""
from enum import IntEnum
from types import MappingProxyType
from typing import NamedTuple

from rich.console import Group
from rich.text import Text


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - registration (110xx): CONFIGURATION
    - routing (111xx): UNKNOWN_COMMAND
    - flags (112xx): INVALID_FLAGS
    - loading (113xx): LOAD_FAILED
    - execution (114xx): COMMAND_FAILED, DELEGATED_ERROR
    """
    # --- registration ---
    CONFIGURATION   = 11001

    # --- routing ---
    UNKNOWN_COMMAND = 11101

    # --- flags ---
    INVALID_FLAGS   = 11201

    # --- loading ---
    LOAD_FAILED     = 11301

    # --- execution ---
    COMMAND_FAILED  = 11401
    DELEGATED_ERROR = 11431

    def normalize(self):
        """
        return the label used in exit reasons and logs (lower-case name).
        """
        return self.name.lower()


class ArborException(Exception):
    """
    base class for every arbor error.

    - message: the human readable text (also what str() returns).
    - options: read-only mapping of extra context (path, source, ...).
    """
    code = FaultCode.DELEGATED_ERROR

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError("%s() message must be a string" % type(self).__name__)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return Text(self.message, style="red")


class ConfigurationError(ArborException):
    """Invalid registration: empty path, duplicate path, colliding alias."""
    code = FaultCode.CONFIGURATION


class UnknownCommandError(ArborException):
    """
    Describes an unknown command. The pipeline never raises it; it is built to
    render the terminal "unknown command" report and to name the exit reason.
    """
    code = FaultCode.UNKNOWN_COMMAND

    def __rich__(self):
        renders = [Text.assemble(("Unknown command: ", "red"), (self.options.get("command", ""), "bold red"))]
        if suggestion := self.options.get("suggestion"):
            renders.append(Text.assemble("Did you mean ", (suggestion, "cyan"), "?"))
        return Group(*renders)


class FieldError(NamedTuple):
    field: str
    message: str


class ValidationError(ArborException):
    """
    Flags rejected by a validator. `errors` is a tuple of FieldError, one per
    offending field; field is "" for errors that concern the whole mapping.
    """
    code = FaultCode.INVALID_FLAGS

    def __init__(self, errors, /, message="invalid flags", **options):
        super().__init__(message, **options)
        self.errors = tuple(FieldError(*error) for error in errors)

    def __str__(self):
        return "\n".join([self.message, *("  %s: %s" % (error.field or "(flags)", error.message) for error in self.errors)])

    def __rich__(self):
        lines = [Text("Invalid flags:", style="bold red")]
        for error in self.errors:
            lines.append(Text.assemble("  ", (error.field or "(flags)", "yellow"), ": ", error.message))
        return Group(*lines)


class LoadError(ArborException):
    """A lazy command could not be imported or did not yield a callable."""
    code = FaultCode.LOAD_FAILED


class CommandError(ArborException):
    """
    Controlled failure raised by command handlers.

    The message is printed verbatim and the process exits with exit_code.
    """
    code = FaultCode.COMMAND_FAILED

    def __init__(self, message, /, exit_code=1, **options):
        if not isinstance(exit_code, int) or isinstance(exit_code, bool):
            raise TypeError("CommandError() exit_code must be an integer")
        super().__init__(message, **options)
        self.exit_code = exit_code


class Exit(NamedTuple):
    """
    Outcome of one dispatch: the process exit code and a short reason label
    ("ok", "help", "version" or a FaultCode label).
    """
    code: int
    reason: str = "ok"

    def __bool__(self):
        return self.code == 0


def explain(error, /):
    """
    map an invocation error to (message, Exit).

    - CommandError keeps its message and exit code.
    - any other exception is stringified and exits with 1.
    """
    if isinstance(error, CommandError):
        return error.message, Exit(error.exit_code, error.code.normalize())
    code = error.code if isinstance(error, ArborException) else FaultCode.DELEGATED_ERROR
    return str(error), Exit(1, code.normalize())


__all__ = (
    "FaultCode",
    "ArborException",
    "ConfigurationError",
    "UnknownCommandError",
    "FieldError",
    "ValidationError",
    "LoadError",
    "CommandError",
    "Exit",
    "explain",
)

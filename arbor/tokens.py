"""
Argv tokenizer: split raw arguments into flags, positionals and the verbatim
tail after "--".

Accepted forms
- long flags: --name=value, --name (boolean true), --no-name (boolean false)
- string flags, and any undeclared long flag, take a spaced value when the
  next token does not start with "-": --config path, --name Alice; declared
  booleans never do (--admin extra leaves "extra" positional)
- short flags: -h, -qv (clusters of single letters), mapped through aliases;
  a declared string short flag takes the next token as its value
- "--": everything after the first one is kept verbatim in Tokens.rest
- "-" alone and negative numbers ("-5") are positionals

Flag names are normalized: leading dashes stripped, "-" replaced by "_"
("--otel-endpoint" → "otel_endpoint").

Stop-early mode
- parsing stops at the first positional token or the first flag that was not
  declared; that token and everything after it are returned as positionals
  untouched. This keeps command-specific flags away from the global parser.
"""
import re
from typing import NamedTuple

_NUMBER = re.compile(r"-\d+(\.\d+)?")


class Tokens(NamedTuple):
    flags: dict
    positionals: list
    rest: list | None = None


def _key(name):
    return name.replace("-", "_")


def _boolean(value):
    return value.strip().lower() not in ("false", "0", "no", "off", "")


def tokenize(argv, /, *, booleans=(), strings=(), aliases=None, stop_early=False, defaults=True):
    """
    Tokenize argv.

    Parameters
    - booleans / strings: declared flag names (dashes allowed, normalized).
    - aliases: mapping of short name → long name (e.g. {"h": "help"}).
    - stop_early: stop at the first positional or undeclared flag.
    - defaults: seed declared booleans with False; without it only flags
      that appear in argv are reported.

    Returns
    - Tokens(flags, positionals, rest). Declared booleans default to False;
      rest is None when no "--" separator was present.
    """
    booleans = {_key(name) for name in booleans}
    strings = {_key(name) for name in strings}
    aliases = {short: _key(name) for short, name in (aliases or {}).items()}
    declared = booleans | strings

    argv = list(argv)
    rest = None
    if "--" in argv:
        index = argv.index("--")
        argv, rest = argv[:index], argv[index + 1:]

    flags = dict.fromkeys(sorted(booleans), False) if defaults else {}
    positionals = []
    index = 0

    while index < len(argv):
        token = argv[index]

        if token.startswith("--") and len(token) > 2:
            name, equals, value = token[2:].partition("=")
            key = _key(name)
            negated = key.startswith("no_") and key[3:] in booleans and not equals
            if stop_early and key not in declared and not negated:
                break
            if negated:
                flags[key[3:]] = False
            elif key in booleans:
                flags[key] = _boolean(value) if equals else True
            elif key in strings and not equals:
                if index + 1 < len(argv) and not argv[index + 1].startswith("-"):
                    index += 1
                    value = argv[index]
                flags[key] = value
            elif equals:
                flags[key] = value
            elif key.startswith("no_") and len(key) > 3:
                flags[key[3:]] = False
            elif index + 1 < len(argv) and not argv[index + 1].startswith("-"):
                index += 1
                flags[key] = argv[index]
            else:
                flags[key] = True

        elif token.startswith("-") and len(token) > 1 and not _NUMBER.fullmatch(token):
            letters = token[1:]
            names = [aliases.get(letter, letter) for letter in letters]
            if stop_early and not all(name in declared for name in names):
                break
            for position, name in enumerate(names):
                if name in strings:
                    tail = letters[position + 1:]
                    if tail:
                        flags[name] = tail.removeprefix("=")
                    elif index + 1 < len(argv) and not argv[index + 1].startswith("-"):
                        index += 1
                        flags[name] = argv[index]
                    else:
                        flags[name] = ""
                    break
                flags[name] = True

        else:
            if stop_early:
                break
            positionals.append(token)

        index += 1

    positionals.extend(argv[index:])
    return Tokens(flags, positionals, rest)


__all__ = ("Tokens", "tokenize")

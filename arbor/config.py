"""
Configuration sources merged by the dispatch pipeline.

- load_config_file(name, path=None): YAML file following XDG conventions.
- load_env_overrides(prefix, environ=None): PREFIX_* environment variables.

Precedence (applied by the pipeline): config file < environment < CLI flags.
Neither loader raises for missing or malformed input; both return a plain dict.
"""
import logging
import os
import re

import yaml

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"[+-]?\d+")
_FLOAT = re.compile(r"[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?")


def candidates(name, path=None, /, environ=None):
    """
    return the config file paths tried for an application, in order.

    - explicit path: only that path.
    - otherwise: $XDG_CONFIG_HOME/<name>/config.yaml|yml (XDG defaults to
      ~/.config), then ~/.<name>/config.yaml|yml.
    """
    if path:
        return [os.fspath(path)]

    environ = os.environ if environ is None else environ
    home = environ.get("HOME") or os.path.expanduser("~")
    xdg = environ.get("XDG_CONFIG_HOME") or (os.path.join(home, ".config") if home else "")

    result = []
    if xdg:
        result += [os.path.join(xdg, name, "config.yaml"), os.path.join(xdg, name, "config.yml")]
    if home:
        result += [os.path.join(home, "." + name, "config.yaml"), os.path.join(home, "." + name, "config.yml")]
    return result


def load_config_file(name, path=None, /, environ=None):
    """
    load the first candidate file that parses to a YAML mapping.

    File-not-found, unreadable files, YAML errors and non-mapping documents
    all yield an empty dict (logged, never raised).
    """
    for candidate in candidates(name, path, environ=environ):
        if not os.path.isfile(candidate):
            continue
        try:
            with open(candidate, encoding="utf-8") as stream:
                document = yaml.safe_load(stream)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as error:
            logger.warning("ignoring config file %s: %s", candidate, error)
            continue
        if isinstance(document, dict):
            logger.debug("loaded config file %s", candidate)
            return {str(key): value for key, value in document.items()}
        logger.warning("ignoring config file %s: top level is not a mapping", candidate)
    return {}


def _parse(value):
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if _INTEGER.fullmatch(value):
        return int(value)
    if _FLOAT.fullmatch(value):
        return float(value)
    return value


def load_env_overrides(prefix, /, environ=None):
    """
    translate PREFIX_* environment variables into lower-case config keys.

        USER_MANAGER_API_URL=http://x  -> {"api_url": "http://x"}
        USER_MANAGER_RETRIES=3         -> {"retries": 3}
        USER_MANAGER_DRY_RUN=true      -> {"dry_run": True}

    The prefix is upper-cased with "-" replaced by "_".
    """
    environ = os.environ if environ is None else environ
    head = prefix.replace("-", "_").upper() + "_"
    overrides = {}
    for key, value in environ.items():
        if key.startswith(head) and len(key) > len(head):
            overrides[key[len(head):].lower()] = _parse(value)
    return overrides


__all__ = ("candidates", "load_config_file", "load_env_overrides")

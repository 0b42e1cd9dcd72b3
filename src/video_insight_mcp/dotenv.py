"""Config-file support for the server settings.

Settings may live in ``~/.config/video-insight-mcp/.env`` (or the file named
by ``VIDEO_INSIGHT_ENV_FILE``) instead of the MCP host's env block. Only the
variable names ``ServerConfig`` reads are taken from the file.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

ENV_FILE_VAR = "VIDEO_INSIGHT_ENV_FILE"
DEFAULT_ENV_PATH = Path.home() / ".config" / "video-insight-mcp" / ".env"

_ASSIGNMENT_RE = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$")
_QUOTED_RE = re.compile(r"""^(['"])(.*)\1$""")


def config_file_path() -> Path:
    """The settings file: ``$VIDEO_INSIGHT_ENV_FILE`` or the default location."""
    override = os.environ.get(ENV_FILE_VAR, "").strip()
    return Path(override).expanduser() if override else DEFAULT_ENV_PATH


def _unquote(value: str) -> str:
    match = _QUOTED_RE.match(value)
    if match:
        return match.group(2)
    # Unquoted values may carry a trailing " # comment".
    return value.split(" #", 1)[0].rstrip()


def read_env_file(path: Path) -> dict[str, str]:
    """Return the ``NAME=value`` assignments in *path*; {} when it is missing."""
    try:
        text = path.read_text()
    except FileNotFoundError:
        return {}

    settings: dict[str, str] = {}
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        match = _ASSIGNMENT_RE.match(line)
        if match is None:
            logger.warning("%s:%d: ignoring line without NAME=value", path, lineno)
            continue
        settings[match.group(1)] = _unquote(match.group(2).strip())
    return settings


def _is_unset(name: str) -> bool:
    """Blank values and unresolved ``${NAME}`` placeholders count as unset."""
    current = os.environ.get(name, "").strip().strip("'\"").strip()
    return not current or current.startswith(("${" + name + "}", "${" + name + ":-"))


def apply_config_file(
    names: Iterable[str], path: Path | None = None
) -> dict[str, str]:
    """Copy settings for *names* from the config file into ``os.environ``.

    A value already set in the process environment wins. Names in the file
    that are not in *names* are ignored.

    Returns:
        The settings actually applied.
    """
    path = path or config_file_path()
    wanted = set(names)
    applied: dict[str, str] = {}
    for name, value in read_env_file(path).items():
        if name not in wanted:
            logger.debug("Ignoring unknown setting %s in %s", name, path)
            continue
        if _is_unset(name):
            os.environ[name] = value
            applied[name] = value
    return applied

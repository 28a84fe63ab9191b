"""
GitHub Actions command files — $GITHUB_OUTPUT, $GITHUB_ENV, $GITHUB_STATE.

The runner hands every step a set of file paths.  A step publishes a
value by appending a ``name=value`` line (or a heredoc block for
multi-line values) to the matching file.
"""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

OUTPUT_FILE_VAR = "GITHUB_OUTPUT"
ENV_FILE_VAR = "GITHUB_ENV"
STATE_FILE_VAR = "GITHUB_STATE"


def format_entry(name: str, value: str) -> str:
    """Render one command-file entry.

    Single-line values use ``name=value``.  Multi-line values use a
    heredoc with a random delimiter that cannot appear in the value.
    """
    if "\n" not in value and "\r" not in value:
        return f"{name}={value}\n"

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in name or delimiter in value:
        raise ValueError(f"Unexpected delimiter collision for {name!r}")
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def command_file_path(env_var: str, environ: dict[str, str] | None = None) -> Path | None:
    """Resolve a command file from its environment variable, or None if unset."""
    env = os.environ if environ is None else environ
    raw = env.get(env_var, "")
    return Path(raw) if raw else None


def append_entry(path: Path, name: str, value: str) -> None:
    """Append one entry to a command file."""
    with path.open("a", encoding="utf-8") as f:
        f.write(format_entry(name, value))
    logger.debug("Wrote %s to %s", name, path)

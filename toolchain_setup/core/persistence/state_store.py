"""
Cross-phase state store — the only channel between main and post.

The main and post phases are separate process invocations.  Nothing
in memory survives from one to the other, so every fact the post
phase needs is written here by the main phase.

Values are strings.  Booleans are encoded as ``"true"`` / ``"false"``.

Three stores:
    - MemoryStateStore    — dict-backed, for tests
    - JsonFileStateStore  — $RUNNER_TEMP or .state/, the default
    - ActionsStateStore   — $GITHUB_STATE / $STATE_<name>, for an action
                            whose post hook runs the post phase
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field

from toolchain_setup.adapters.actions.command_files import (
    STATE_FILE_VAR,
    append_entry,
    command_file_path,
)
from toolchain_setup.core.models.cache import PersistedState

logger = logging.getLogger(__name__)

# ── State keys ──────────────────────────────────────────────────

IS_POST_KEY = "isPost"
CACHE_KEY_KEY = "cache-key"
CACHE_HIT_KEY = "cache-hit"

# Default state file path (relative to the working directory)
DEFAULT_STATE_DIR = ".state"
DEFAULT_STATE_FILE = "phase-state.json"

STATE_BACKEND_VAR = "TCS_STATE_BACKEND"
RUNNER_TEMP_VAR = "RUNNER_TEMP"


def encode_bool(value: bool) -> str:
    return "true" if value else "false"


def decode_bool(value: str | None) -> bool:
    """Decode a stored boolean.  Anything but ``"true"`` is False."""
    return (value or "").strip().lower() == "true"


class StateStore(ABC):
    """String-keyed store that outlives a single process."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value for the rest of the run."""

    def clear(self) -> None:
        """Discard the run's state.  No-op where the host discards it."""


class MemoryStateStore(StateStore):
    """Dict-backed store.  Shares nothing across processes."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def clear(self) -> None:
        self.values.clear()


class StateDocument(BaseModel):
    """On-disk shape of the JSON state file."""

    schema_version: int = 1
    updated_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    values: dict[str, str] = Field(default_factory=dict)


class JsonFileStateStore(StateStore):
    """State kept in a JSON file between invocations.

    Writes are atomic (write to temp file, then rename).  A missing or
    corrupt file reads as an empty store.
    """

    def __init__(self, path: Path | None = None):
        self._path = path or Path(DEFAULT_STATE_DIR) / DEFAULT_STATE_FILE

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        return self._load().values.get(key)

    def set(self, key: str, value: str) -> None:
        doc = self._load()
        doc.values[key] = value
        self._save(doc)

    def clear(self) -> None:
        if self._path.is_file():
            self._path.unlink()
            logger.debug("Removed state file %s", self._path)

    def _load(self) -> StateDocument:
        if not self._path.is_file():
            return StateDocument()

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return StateDocument.model_validate(data)
        except json.JSONDecodeError as e:
            logger.warning("Corrupt state file %s: %s — starting fresh", self._path, e)
            return StateDocument()
        except Exception as e:
            logger.warning("Cannot load state from %s: %s — starting fresh", self._path, e)
            return StateDocument()

    def _save(self, doc: StateDocument) -> None:
        doc.updated_at = datetime.now(UTC).isoformat()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(doc.model_dump(mode="json"), indent=2) + "\n"

        fd, tmp_path = tempfile.mkstemp(dir=self._path.parent, prefix=".state_", suffix=".tmp")
        os.close(fd)
        tmp = Path(tmp_path)
        try:
            tmp.write_text(content, encoding="utf-8")
            tmp.replace(self._path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise


class ActionsStateStore(StateStore):
    """GitHub Actions step state.

    ``set`` appends to the file named by $GITHUB_STATE.  The runner
    exports those entries to the post step as $STATE_<name>, which is
    where ``get`` reads them.  Values set during this invocation are
    also readable back within it.
    """

    def __init__(self, environ: dict[str, str] | None = None):
        self._environ = os.environ if environ is None else environ
        self._written: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        if key in self._written:
            return self._written[key]
        value = self._environ.get(f"STATE_{key}")
        return value if value else None

    def set(self, key: str, value: str) -> None:
        path = command_file_path(STATE_FILE_VAR, dict(self._environ))
        if path is None:
            raise RuntimeError(f"{STATE_FILE_VAR} is not set; not running inside an Actions step")
        append_entry(path, key, value)
        self._written[key] = value


def default_state_path(environ: dict[str, str] | None = None) -> Path:
    """Where the JSON state file lives when none is given.

    On a runner this is under $RUNNER_TEMP, which every step of a job
    shares and the runner empties between jobs.
    """
    env = os.environ if environ is None else environ
    if env.get("TCS_STATE_FILE"):
        return Path(env["TCS_STATE_FILE"])
    if env.get(RUNNER_TEMP_VAR):
        return Path(env[RUNNER_TEMP_VAR]) / "toolchain-setup" / DEFAULT_STATE_FILE
    return Path(DEFAULT_STATE_DIR) / DEFAULT_STATE_FILE


def select_state_store(
    state_file: Path | None = None,
    environ: dict[str, str] | None = None,
) -> StateStore:
    """Pick the state store for this process.

    An explicit state file wins.  The runner's step state is used only
    when TCS_STATE_BACKEND=actions: $STATE_<name> reaches the post hook
    of the same action, never a later plain ``run:`` step.  Otherwise the
    JSON file at ``default_state_path()``.
    """
    env = os.environ if environ is None else environ
    if state_file is not None:
        return JsonFileStateStore(state_file)
    if env.get(STATE_BACKEND_VAR, "").strip().lower() == "actions":
        if not env.get(STATE_FILE_VAR):
            logger.warning(
                "%s=actions but %s is not set, using the state file",
                STATE_BACKEND_VAR,
                STATE_FILE_VAR,
            )
        else:
            return ActionsStateStore(env)
    return JsonFileStateStore(default_state_path(env))


def load_persisted_state(store: StateStore) -> PersistedState:
    """Decode the three cross-phase keys into a typed view."""
    raw_hit = store.get(CACHE_HIT_KEY)
    return PersistedState(
        is_post=decode_bool(store.get(IS_POST_KEY)),
        cache_key=store.get(CACHE_KEY_KEY) or None,
        cache_hit=decode_bool(raw_hit) if raw_hit is not None else None,
    )

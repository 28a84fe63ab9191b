"""
Step outputs and exported environment variables.

Output plumbing is fire-and-forget: a missing command file is logged
and skipped, it never fails the step.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod

from toolchain_setup.adapters.actions.command_files import (
    ENV_FILE_VAR,
    OUTPUT_FILE_VAR,
    append_entry,
    command_file_path,
)

logger = logging.getLogger(__name__)


class OutputSink(ABC):
    """Where step outputs and exported variables go."""

    @abstractmethod
    def set_output(self, name: str, value: str) -> None:
        """Publish a step output."""

    @abstractmethod
    def export_variable(self, name: str, value: str) -> None:
        """Export an environment variable to later steps."""


class ActionsOutputs(OutputSink):
    """Writes to the runner's $GITHUB_OUTPUT and $GITHUB_ENV files."""

    def __init__(self, environ: dict[str, str] | None = None):
        self._environ = environ

    def set_output(self, name: str, value: str) -> None:
        path = command_file_path(OUTPUT_FILE_VAR, self._environ)
        if path is None:
            logger.debug("%s not set, output %s dropped", OUTPUT_FILE_VAR, name)
            return
        append_entry(path, name, value)

    def export_variable(self, name: str, value: str) -> None:
        # Visible to the rest of this process as well as later steps
        os.environ[name] = value
        path = command_file_path(ENV_FILE_VAR, self._environ)
        if path is None:
            logger.debug("%s not set, variable %s exported to this process only", ENV_FILE_VAR, name)
            return
        append_entry(path, name, value)


class MemoryOutputs(OutputSink):
    """Keeps outputs in memory.  Used for local runs and tests."""

    def __init__(self) -> None:
        self.outputs: dict[str, str] = {}
        self.variables: dict[str, str] = {}

    def set_output(self, name: str, value: str) -> None:
        self.outputs[name] = value

    def export_variable(self, name: str, value: str) -> None:
        self.variables[name] = value

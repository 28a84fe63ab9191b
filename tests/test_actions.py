"""
Tests for the Actions command files and output sinks.
"""

import os
from pathlib import Path

from toolchain_setup.adapters.actions.command_files import (
    append_entry,
    command_file_path,
    format_entry,
)
from toolchain_setup.adapters.actions.outputs import ActionsOutputs, MemoryOutputs


class TestCommandFiles:
    def test_single_line(self):
        assert format_entry("hub-path", "/usr/bin/hub") == "hub-path=/usr/bin/hub\n"

    def test_multi_line_heredoc(self):
        text = format_entry("editors", "a\nb")
        header, *body = text.splitlines()
        name, delimiter = header.split("<<", 1)
        assert name == "editors"
        assert body == ["a", "b", delimiter]

    def test_path_from_env(self, tmp_path: Path):
        assert command_file_path("GITHUB_OUTPUT", {"GITHUB_OUTPUT": str(tmp_path / "o")}) == tmp_path / "o"
        assert command_file_path("GITHUB_OUTPUT", {}) is None
        assert command_file_path("GITHUB_OUTPUT", {"GITHUB_OUTPUT": ""}) is None

    def test_append(self, tmp_path: Path):
        path = tmp_path / "out"
        append_entry(path, "a", "1")
        append_entry(path, "b", "2")
        assert path.read_text() == "a=1\nb=2\n"


class TestActionsOutputs:
    def test_set_output(self, tmp_path: Path):
        out = tmp_path / "output"
        sink = ActionsOutputs({"GITHUB_OUTPUT": str(out)})
        sink.set_output("editor-path", "/opt/t/v1")
        assert out.read_text() == "editor-path=/opt/t/v1\n"

    def test_set_output_without_file_is_dropped(self):
        ActionsOutputs({}).set_output("editor-path", "/opt/t/v1")

    def test_export_variable(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("TOOLCHAIN_HUB_PATH", raising=False)
        env_file = tmp_path / "env"
        sink = ActionsOutputs({"GITHUB_ENV": str(env_file)})

        sink.export_variable("TOOLCHAIN_HUB_PATH", "/usr/bin/hub")

        assert env_file.read_text() == "TOOLCHAIN_HUB_PATH=/usr/bin/hub\n"
        assert os.environ["TOOLCHAIN_HUB_PATH"] == "/usr/bin/hub"


class TestMemoryOutputs:
    def test_records(self):
        sink = MemoryOutputs()
        sink.set_output("a", "1")
        sink.export_variable("B", "2")
        assert sink.outputs == {"a": "1"}
        assert sink.variables == {"B": "2"}

"""
Tests for the cross-phase state stores.
"""

import json
from pathlib import Path

import pytest

from toolchain_setup.core.persistence.state_store import (
    CACHE_HIT_KEY,
    CACHE_KEY_KEY,
    IS_POST_KEY,
    ActionsStateStore,
    JsonFileStateStore,
    MemoryStateStore,
    decode_bool,
    encode_bool,
    load_persisted_state,
    select_state_store,
)


class TestBoolEncoding:
    def test_encode(self):
        assert encode_bool(True) == "true"
        assert encode_bool(False) == "false"

    def test_decode(self):
        assert decode_bool("true") is True
        assert decode_bool("TRUE") is True
        assert decode_bool("false") is False
        assert decode_bool("") is False
        assert decode_bool(None) is False


class TestMemoryStateStore:
    def test_get_missing(self):
        assert MemoryStateStore().get("anything") is None

    def test_set_and_get(self):
        store = MemoryStateStore()
        store.set("cache-key", "k1")
        assert store.get("cache-key") == "k1"

    def test_clear(self):
        store = MemoryStateStore({"isPost": "true"})
        store.clear()
        assert store.get("isPost") is None


class TestJsonFileStateStore:
    def test_survives_new_instance(self, tmp_path: Path):
        """A second process sees what the first one wrote."""
        path = tmp_path / ".state" / "phase-state.json"
        JsonFileStateStore(path).set("cache-key", "k1")

        assert JsonFileStateStore(path).get("cache-key") == "k1"

    def test_missing_file_reads_empty(self, tmp_path: Path):
        store = JsonFileStateStore(tmp_path / "none.json")
        assert store.get("isPost") is None

    def test_corrupt_file_reads_empty(self, tmp_path: Path):
        path = tmp_path / "state.json"
        path.write_text("not json {{{")
        assert JsonFileStateStore(path).get("isPost") is None

    def test_file_is_valid_json(self, tmp_path: Path):
        path = tmp_path / "state.json"
        JsonFileStateStore(path).set("cache-hit", "false")

        data = json.loads(path.read_text())
        assert data["values"] == {"cache-hit": "false"}
        assert data["schema_version"] == 1

    def test_no_temp_files_left(self, tmp_path: Path):
        store = JsonFileStateStore(tmp_path / "state.json")
        store.set("a", "1")
        store.set("b", "2")
        assert list(tmp_path.glob(".state_*.tmp")) == []

    def test_clear_removes_file(self, tmp_path: Path):
        path = tmp_path / "state.json"
        store = JsonFileStateStore(path)
        store.set("isPost", "true")
        store.clear()
        assert not path.exists()
        assert store.get("isPost") is None

    def test_clear_without_file(self, tmp_path: Path):
        JsonFileStateStore(tmp_path / "state.json").clear()


class TestActionsStateStore:
    def test_set_appends_to_state_file(self, tmp_path: Path):
        state_file = tmp_path / "state.txt"
        state_file.touch()
        store = ActionsStateStore({"GITHUB_STATE": str(state_file)})

        store.set("cache-key", "toolchain-setup-linux-v1")
        store.set("isPost", "true")

        assert state_file.read_text() == (
            "cache-key=toolchain-setup-linux-v1\nisPost=true\n"
        )

    def test_multiline_uses_heredoc(self, tmp_path: Path):
        state_file = tmp_path / "state.txt"
        store = ActionsStateStore({"GITHUB_STATE": str(state_file)})

        store.set("note", "line1\nline2")

        lines = state_file.read_text().splitlines()
        assert lines[0].startswith("note<<ghadelimiter_")
        assert lines[1:3] == ["line1", "line2"]
        assert lines[3] == lines[0].split("<<", 1)[1]

    def test_get_reads_runner_state_env(self):
        store = ActionsStateStore({"STATE_cache-key": "k1", "STATE_isPost": "true"})
        assert store.get("cache-key") == "k1"
        assert store.get("isPost") == "true"
        assert store.get("cache-hit") is None

    def test_empty_env_value_is_absent(self):
        store = ActionsStateStore({"STATE_cache-key": ""})
        assert store.get("cache-key") is None

    def test_written_values_visible_in_same_process(self, tmp_path: Path):
        store = ActionsStateStore({"GITHUB_STATE": str(tmp_path / "state.txt")})
        store.set("cache-hit", "false")
        assert store.get("cache-hit") == "false"

    def test_set_without_runner_raises(self):
        with pytest.raises(RuntimeError, match="GITHUB_STATE"):
            ActionsStateStore({}).set("isPost", "true")


class TestSelectStateStore:
    def test_explicit_file_wins(self, tmp_path: Path):
        store = select_state_store(
            state_file=tmp_path / "s.json",
            environ={"GITHUB_STATE": str(tmp_path / "gh")},
        )
        assert isinstance(store, JsonFileStateStore)
        assert store.path == tmp_path / "s.json"

    def test_actions_backend_when_requested(self, tmp_path: Path):
        store = select_state_store(
            environ={"GITHUB_STATE": str(tmp_path / "gh"), "TCS_STATE_BACKEND": "actions"},
        )
        assert isinstance(store, ActionsStateStore)

    def test_runner_defaults_to_file_in_runner_temp(self, tmp_path: Path):
        # Separate run: steps never see each other's $STATE_<name>
        store = select_state_store(
            environ={"GITHUB_STATE": str(tmp_path / "gh"), "RUNNER_TEMP": str(tmp_path)},
        )
        assert isinstance(store, JsonFileStateStore)
        assert store.path == tmp_path / "toolchain-setup" / "phase-state.json"

    def test_actions_backend_without_runner_falls_back(self):
        store = select_state_store(environ={"TCS_STATE_BACKEND": "actions"})
        assert isinstance(store, JsonFileStateStore)

    def test_separate_steps_share_state(self, tmp_path: Path):
        step1 = {"GITHUB_STATE": str(tmp_path / "state_step1"), "RUNNER_TEMP": str(tmp_path)}
        step2 = {"GITHUB_STATE": str(tmp_path / "state_step2"), "RUNNER_TEMP": str(tmp_path)}

        select_state_store(environ=step1).set("cache-key", "toolchain-setup-linux-v1")
        assert select_state_store(environ=step2).get("cache-key") == "toolchain-setup-linux-v1"

    def test_env_state_file(self, tmp_path: Path):
        store = select_state_store(environ={"TCS_STATE_FILE": str(tmp_path / "x.json")})
        assert isinstance(store, JsonFileStateStore)
        assert store.path == tmp_path / "x.json"

    def test_default(self):
        store = select_state_store(environ={})
        assert isinstance(store, JsonFileStateStore)
        assert store.path == Path(".state") / "phase-state.json"


class TestLoadPersistedState:
    def test_empty_store(self):
        state = load_persisted_state(MemoryStateStore())
        assert state.is_post is False
        assert state.cache_key is None
        assert state.cache_hit is None

    def test_decodes_fields(self):
        store = MemoryStateStore({
            IS_POST_KEY: "true",
            CACHE_KEY_KEY: "k1",
            CACHE_HIT_KEY: "false",
        })
        state = load_persisted_state(store)
        assert state.is_post is True
        assert state.cache_key == "k1"
        assert state.cache_hit is False

    def test_empty_cache_key_is_absent(self):
        state = load_persisted_state(MemoryStateStore({CACHE_KEY_KEY: ""}))
        assert state.cache_key is None

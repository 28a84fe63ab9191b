"""
Tests for installation path validation.
"""

import os
from pathlib import Path

import pytest

from toolchain_setup.core.services.install_validation import is_installation_path_valid


class TestInstallationPathValid:
    def test_empty_string(self):
        assert is_installation_path_valid("") is False

    def test_none(self):
        assert is_installation_path_valid(None) is False

    def test_nonexistent(self, tmp_path: Path):
        assert is_installation_path_valid(str(tmp_path / "missing")) is False

    def test_existing_dir(self, tmp_path: Path):
        assert is_installation_path_valid(str(tmp_path)) is True

    def test_accepts_path_objects(self, tmp_path: Path):
        assert is_installation_path_valid(tmp_path) is True

    def test_existing_file(self, tmp_path: Path):
        f = tmp_path / "editor"
        f.write_text("bin")
        assert is_installation_path_valid(str(f)) is True

    def test_embedded_null_is_invalid(self):
        assert is_installation_path_valid("bad\0path") is False

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="root bypasses permission bits",
    )
    def test_unreadable_dir(self, tmp_path: Path):
        locked = tmp_path / "locked"
        locked.mkdir()
        locked.chmod(0o000)
        try:
            assert is_installation_path_valid(str(locked)) is False
        finally:
            locked.chmod(0o755)

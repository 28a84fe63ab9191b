"""
Install models — the resolved install request and its results.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SetupInputs(BaseModel):
    """The resolved install request.

    Versions and modules are opaque strings.  Their order is the
    caller's precedence order and is never sorted or de-duplicated.
    """

    versions: list[str] = Field(default_factory=list)
    modules: list[str] = Field(default_factory=list)
    project_path: str | None = None
    install_path: str | None = None
    auto_update_hub: bool = False
    hub_version: str | None = None
    cache_installation: bool = False


class InstalledToolchain(BaseModel):
    """One installed toolchain version and where it landed."""

    version: str
    path: str


class InstallerConfig(BaseModel):
    """How the command installer reaches the toolchain hub.

    Command templates are formatted with shell-quoted fields:
    ``{version}``, ``{modules}``, ``{install_path}``, ``{hub_version}``,
    ``{auto_update}``.
    """

    install_command: str | None = None
    hub_command: str | None = None
    hub_path: str | None = None
    install_path: str = "~/.toolchain-setup/installs"
    editor_path: str = "{install_path}/{version}"
    timeout: int = 3600

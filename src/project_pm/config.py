"""
Configuration for project-pm.

Settings come from a TOML file (project-pm.toml) overlaid with environment
variables. The GitHub token is only ever read from the environment.
"""

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field

from project_pm.errors import ConfigError, ErrorCode, invalid_config, missing_credentials

# Default config file names (searched in order)
CONFIG_FILE_NAMES = [
    "project-pm.toml",
    ".project-pm.toml",
    "pyproject.toml",  # Will look for [tool.project-pm] section
]

ENV_FILE = ".env.local"


class GitHubSettings(BaseModel):
    """Hosting API settings."""

    api_url: str = Field(default="https://api.github.com")
    username: str | None = Field(default=None)
    org: str | None = Field(default=None)
    page_size: int = Field(default=100, ge=1, le=100)
    timeout_seconds: float = Field(default=30.0, gt=0, le=600)


class LocalSettings(BaseModel):
    """Local checkout settings."""

    projects_dir: str | None = Field(default=None)
    max_depth: int = Field(default=2, ge=0, le=10)
    excluded_dirs: list[str] = Field(default_factory=lambda: ["node_modules"])


class OutputSettings(BaseModel):
    """Output-related configuration."""

    data_dir: str = Field(default="./data")
    manifest_file: str = Field(default="manifest.json")
    overrides_file: str = Field(default="overrides.json")
    pretty_json: bool = Field(default=True)

    @property
    def manifest_path(self) -> Path:
        return Path(self.data_dir) / self.manifest_file

    @property
    def overrides_path(self) -> Path:
        return Path(self.data_dir) / self.overrides_file


class PortfolioConfig(BaseModel):
    """Complete project-pm configuration."""

    github: GitHubSettings = Field(default_factory=GitHubSettings)
    local: LocalSettings = Field(default_factory=LocalSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)

    @classmethod
    def default(cls) -> "PortfolioConfig":
        """Create config with all defaults."""
        return cls()


@dataclass(frozen=True)
class Credentials:
    """GitHub credentials for one run."""

    token: str
    username: str


def _find_config_file(start_dir: Path | None = None) -> Path | None:
    """
    Find configuration file by searching up from start directory.

    Args:
        start_dir: Directory to start search (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        for name in CONFIG_FILE_NAMES:
            config_path = current / name
            if config_path.exists():
                return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(config_path: Path | None = None) -> PortfolioConfig:
    """
    Load configuration from file.

    Args:
        config_path: Explicit path to config file (optional)

    Returns:
        PortfolioConfig with loaded settings

    Raises:
        ConfigError: If config file is unreadable or invalid
    """
    if config_path is None:
        config_path = _find_config_file()

    if config_path is None:
        return PortfolioConfig.default()

    try:
        content = config_path.read_text()
    except OSError as e:
        raise ConfigError(
            message=f"Failed to read config file: {e}",
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            config_path=str(config_path),
        )

    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise invalid_config(str(config_path), f"TOML parse error: {e}")

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("project-pm", {})
        if not data:
            return PortfolioConfig.default()

    try:
        return PortfolioConfig.model_validate(data)
    except ValueError as e:
        raise invalid_config(str(config_path), str(e))


def apply_environment(config: PortfolioConfig, env: Mapping[str, str] | None = None) -> PortfolioConfig:
    """
    Overlay environment variables on a loaded config.

    GITHUB_USERNAME, GITHUB_ORG and LOCAL_PROJECTS_DIR win over file values.
    """
    if env is None:
        env = os.environ

    github_updates = {}
    if env.get("GITHUB_USERNAME"):
        github_updates["username"] = env["GITHUB_USERNAME"]
    if env.get("GITHUB_ORG"):
        github_updates["org"] = env["GITHUB_ORG"]

    local_updates = {}
    if env.get("LOCAL_PROJECTS_DIR"):
        local_updates["projects_dir"] = env["LOCAL_PROJECTS_DIR"]

    return config.model_copy(
        update={
            "github": config.github.model_copy(update=github_updates),
            "local": config.local.model_copy(update=local_updates),
        }
    )


def resolve_credentials(config: PortfolioConfig, env: Mapping[str, str] | None = None) -> Credentials:
    """
    Resolve the token and username for a run.

    Raises:
        ConfigError: If GITHUB_TOKEN or the username is missing
    """
    if env is None:
        env = os.environ

    token = env.get("GITHUB_TOKEN")
    username = config.github.username or env.get("GITHUB_USERNAME")

    missing = []
    if not token:
        missing.append("GITHUB_TOKEN")
    if not username:
        missing.append("GITHUB_USERNAME")
    if missing:
        raise missing_credentials(missing)

    return Credentials(token=token, username=username)


def generate_default_config() -> str:
    """
    Generate default configuration file content.

    Returns:
        TOML string with default configuration
    """
    return '''# project-pm configuration
# GITHUB_TOKEN is read from the environment (or .env.local), never from here.

[github]
api_url = "https://api.github.com"
# username = "octocat"
# org = "my-org"
page_size = 100
timeout_seconds = 30.0

[local]
# projects_dir = "~/code"
max_depth = 2
excluded_dirs = ["node_modules"]

[output]
data_dir = "./data"
manifest_file = "manifest.json"
overrides_file = "overrides.json"
pretty_json = true
'''


def save_default_config(path: Path | None = None) -> Path:
    """
    Save default configuration to file.

    Args:
        path: Path to save config (default: ./project-pm.toml)

    Returns:
        Path where config was saved
    """
    if path is None:
        path = Path("project-pm.toml")

    path.write_text(generate_default_config())
    return path

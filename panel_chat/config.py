"""Pydantic models for the chat configuration and config file loading."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, field_validator

from panel_chat import constants
from panel_chat.utils import console

# --- Config File Loading ---

CONFIG_PATH = Path.home() / ".config" / "panel-chat" / "config.toml"
CONFIG_PATH_2 = Path("panel-chat-config.toml")


def _underscore_keys(table: dict[str, Any]) -> dict[str, Any]:
    """Turn `max-tokens` style keys into `max_tokens`, in nested tables too."""
    return {
        key.replace("-", "_"): _underscore_keys(value) if isinstance(value, dict) else value
        for key, value in table.items()
    }


def _find_config_path(config_path_str: str | None) -> Path | None:
    if config_path_str:
        return Path(config_path_str).expanduser()
    return next((path for path in (CONFIG_PATH, CONFIG_PATH_2) if path.exists()), None)


def load_config(config_path_str: str | None = None) -> dict[str, Any]:
    """Load the TOML config file.

    An explicit path wins over the user config, which wins over a
    `panel-chat-config.toml` in the working directory. A missing or malformed
    file yields no defaults.
    """
    config_path = _find_config_path(config_path_str)
    if config_path is None:
        return {}
    if not config_path.is_file():
        console.print(f"[bold red]Config file not found at {config_path}[/bold red]")
        return {}

    try:
        cfg = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        console.print(f"[bold red]Error parsing config file {config_path}: {e}[/bold red]")
        return {}
    return _underscore_keys(cfg)


def command_defaults(config: dict[str, Any], command: str | None) -> dict[str, Any]:
    """Merge the `[defaults]` table with the table named after `command`."""
    wildcard_config = config.get("defaults", {})
    if not command:
        return dict(wildcard_config)
    return {**wildcard_config, **config.get(command, {})}


# --- Pydantic Models for Configuration ---


class InferenceConfig(BaseModel):
    """Settings for the chat completion provider."""

    api_key: str | None = None
    model: str = constants.DEFAULT_MODEL
    max_tokens: int = constants.DEFAULT_MAX_TOKENS
    endpoint: str = constants.DEFAULT_OPENAI_ENDPOINT
    timeout: float = constants.DEFAULT_TIMEOUT

    @field_validator("api_key", mode="before")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    @field_validator("max_tokens")
    @classmethod
    def _positive_tokens(cls, v: int) -> int:
        if v <= 0:
            msg = "max_tokens must be positive"
            raise ValueError(msg)
        return v

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)
        return v

    @property
    def has_api_key(self) -> bool:
        """Whether a credential is configured."""
        return self.api_key is not None


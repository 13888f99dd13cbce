"""
Configuration management for the MCP Store Server.

Handles loading and validation of server configuration from an optional
JSON file and environment variables.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_INSTRUCTIONS = "A store management MCP server."


class ServerConfig(BaseModel):
    """Configuration for MCP server behavior."""

    name: str = Field(default="mcp-server-store", description="Server name reported to clients")
    version: str = Field(default="0.1.0", description="Server version reported to clients")
    instructions: Optional[str] = Field(
        default=DEFAULT_INSTRUCTIONS, description="Free-text instructions returned by initialize"
    )
    log_level: str = Field(default="DEBUG", description="Logging level")
    transport: str = Field(default="stdio", description="Transport to serve on")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("transport")
    @classmethod
    def validate_transport(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower != "stdio":
            raise ValueError(f"Unsupported transport: {v}. Only 'stdio' is available")
        return v_lower


class Config(BaseModel):
    """Main configuration object."""

    model_config = ConfigDict(extra="forbid")

    server: ServerConfig = Field(default_factory=ServerConfig)


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from file and environment variables.

    Args:
        config_path: Path to configuration file. If None, looks for
                    MCP_STORE_CONFIG_PATH environment variable.

    Returns:
        Loaded and validated configuration

    Raises:
        FileNotFoundError: If config file specified but not found
        ValueError: If configuration is invalid
    """
    if config_path is None:
        env_path = os.getenv("MCP_STORE_CONFIG_PATH")
        if env_path:
            config_path = Path(env_path)

    config_data: Dict[str, Any] = {}
    if config_path and config_path.exists():
        with open(config_path, "r") as f:
            config_data = json.load(f)
    elif config_path:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    env_overrides: Dict[str, Any] = {}

    log_level = os.getenv("MCP_STORE_LOG_LEVEL") or os.getenv("LOG_LEVEL")
    if log_level:
        env_overrides.setdefault("server", {})["log_level"] = log_level

    transport = os.getenv("MCP_STORE_TRANSPORT")
    if transport:
        env_overrides.setdefault("server", {})["transport"] = transport

    if env_overrides:
        config_data = _deep_merge(config_data, env_overrides)

    return Config(**config_data)


def create_default_config(config_path: Path) -> None:
    """
    Create a default configuration file.

    Args:
        config_path: Path where to create the configuration file
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(Config().model_dump(), f, indent=2)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result

"""Configuration management."""

from .settings import Config, ServerConfig, create_default_config, load_config

__all__ = ["Config", "ServerConfig", "load_config", "create_default_config"]

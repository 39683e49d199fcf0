"""Configuration scripting: the bridge and the built-in base configuration."""

from .bridge import BASE_CONFIG, ScriptBridge, base_config_source

__all__ = ["BASE_CONFIG", "ScriptBridge", "base_config_source"]

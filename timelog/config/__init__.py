"""
Configuration module for the time logging assistant.
"""
from .settings import TimeLogConfig, get_config, load_config, reload_config

__all__ = ["TimeLogConfig", "get_config", "load_config", "reload_config"]

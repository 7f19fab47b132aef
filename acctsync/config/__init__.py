"""Configuration module for the account rename tooling."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]

"""Configuration package for the ETF Shop service."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]

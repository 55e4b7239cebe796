"""Configuration package: environment-driven application settings."""

from tenant_rag.config.settings import Settings

__all__ = ["Settings"]

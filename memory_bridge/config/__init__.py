"""Configuration for memory-bridge."""

from .settings import Settings

__all__ = ["Settings"]

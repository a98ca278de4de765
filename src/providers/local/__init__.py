"""Local model server provider package."""

from .adapter import LocalModelAdapter

__all__ = ["LocalModelAdapter"]

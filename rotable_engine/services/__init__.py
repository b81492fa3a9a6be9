"""Services package."""

from .engine_session import EngineSession

__all__ = ["EngineSession"]

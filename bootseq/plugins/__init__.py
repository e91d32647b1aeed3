"""Plugin base class and bundled plugins."""

from .base import Plugin
from .demo import BombMiddleware, DemoPlugin

__all__ = ["Plugin", "BombMiddleware", "DemoPlugin"]

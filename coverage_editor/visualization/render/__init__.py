"""Pygame rendering for the coverage editor."""

from .base_scene import BaseScene
from .pygame_renderer import PygameRenderer

__all__ = ["BaseScene", "PygameRenderer"]

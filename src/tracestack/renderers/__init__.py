"""Renderers."""

from .console import render_thread

__all__ = ["render_thread"]

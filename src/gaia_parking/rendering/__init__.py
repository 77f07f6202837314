"""Occupancy overlay rendering."""

from .overlay import render_overlay

__all__ = ["render_overlay"]

"""Keeps a Pictures folder of named symlinks to Steam's per-game screenshot folders."""

__version__ = "0.2.0"

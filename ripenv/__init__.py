"""Plumbing for Python environments: interpreters, wheel tags, git sources, index pages, installed distributions and virtual environments."""

__version__ = "0.1.0"
"""Toolsmith: describe a tool, get a working tool."""

__version__ = "0.1.0"

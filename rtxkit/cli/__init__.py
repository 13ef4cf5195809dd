"""
Command-line interface for rtxkit.
"""

from rtxkit.cli.parser import CLI, main

__all__ = ["CLI", "main"]

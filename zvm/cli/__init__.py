"""
zvm command-line interface.
"""

from zvm.cli.parser import CLI, main

__all__ = ["CLI", "main"]

"""
zvm - Zig Version Manager.

Install, switch between and run multiple versions of the Zig compiler.
"""

__version__ = "0.1.0"

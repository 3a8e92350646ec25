"""
Entry point for running zvm as a module.

Usage: python -m zvm [command] [options]
"""

from zvm.cli.parser import main

if __name__ == "__main__":
    main()

"""
Entry point for running the zvm CLI as a module.

Usage: python -m zvm.cli [command] [options]
"""

from zvm.cli.parser import main

if __name__ == "__main__":
    main()

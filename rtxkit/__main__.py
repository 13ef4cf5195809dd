"""
Entry point for running rtxkit CLI as a module.

Usage: python -m rtxkit [command] [options]
"""

from rtxkit.cli.parser import main

if __name__ == "__main__":
    main()

"""
Package entry point.

Allows running the application via:

    python -m catalogsync

This simply forwards execution to catalogsync.cli.main().
"""

from catalogsync.cli import main

if __name__ == "__main__":
    main()

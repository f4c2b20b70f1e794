"""
Package entry point.

Allows running the application via:

    python -m nounsuccess

This simply forwards execution to nounsuccess.cli.main().
"""

from nounsuccess.cli import main

if __name__ == "__main__":
    main()

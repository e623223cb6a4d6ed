"""Entry point for running trackwatch.

Usage:
    python -m trackwatch --config Config.yaml

Database settings are read from the environment or a .env file
(TRACKWATCH_DB), targets from the config file.
"""

import sys


def main() -> int:
    """Main entry point for the trackwatch CLI."""
    from trackwatch.cli import run_cli

    return run_cli(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())

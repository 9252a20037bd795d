"""Allow running the launcher with ``python -m flatlaunch``."""

from flatlaunch.cli import cli_main

if __name__ == "__main__":
    cli_main()

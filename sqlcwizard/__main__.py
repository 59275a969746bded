# File: sqlcwizard/__main__.py
"""
SQLC Wizard - Module entry point.

Allows running the wizard directly via::

    python -m sqlcwizard init --project-type hobby
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from sqlcwizard.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()

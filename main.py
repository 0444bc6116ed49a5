"""Entry point for gitidm CLI."""

from gitidm.cli import cli_main


def main():
    """Launch the gitidm CLI."""
    cli_main()


if __name__ == "__main__":
    main()

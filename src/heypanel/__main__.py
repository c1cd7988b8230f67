"""Entry point for running heypanel as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the heypanel CLI application."""
    app()


if __name__ == "__main__":
    main()

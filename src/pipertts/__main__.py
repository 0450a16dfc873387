"""Entry point for running pipertts as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the pipertts CLI application."""
    app()


if __name__ == "__main__":
    main()

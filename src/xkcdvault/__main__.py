"""Entry point for ``python -m xkcdvault``."""

from xkcdvault.cli.typer_app import app

if __name__ == "__main__":
    app()

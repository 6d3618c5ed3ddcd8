"""leonard CLI entry point."""

from leonard.cli import app

if __name__ == "__main__":
    app()

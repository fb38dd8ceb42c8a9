"""Allow running as ``python -m chooser``."""

from chooser.cli import app

if __name__ == "__main__":
    app()

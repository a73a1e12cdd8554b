"""
Entry point for ``python -m movienight``.
"""

from .cli.app import app

if __name__ == "__main__":
    app()

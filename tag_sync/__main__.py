"""
Allow running tag-sync as a Python module.

Usage:
    python -m tag_sync <command> [file]
"""

from .cli import run

if __name__ == "__main__":
    run()

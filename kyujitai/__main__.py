"""
Entry point for running Kyujitai as a module.

Usage:
    python -m kyujitai --help
    python -m kyujitai convert --text "国語"
    python -m kyujitai lookup 国
"""
from .cli import app


if __name__ == "__main__":
    app()

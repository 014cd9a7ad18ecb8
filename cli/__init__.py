"""
SCRIPTORIUM - Command Line Interface

Main CLI entry point.
"""
from cli.main import app, main

__all__ = ["app", "main"]

# src/ttt/__init__.py

"""Encrypted command-line time tracker."""

__version__ = "0.3.0"

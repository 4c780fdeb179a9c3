"""
==========================
Main Application Module
==========================

This module provides the main entry point for the application.
It starts the backup service by calling the `start_app` function.

Usage:
>>> from autobackup import start_app
>>> start_app()

*Author: autobackup maintainers*\n
*Created: 2026-10-18*
"""
__version__ = "1.0.0"

from autobackup.app import start_app

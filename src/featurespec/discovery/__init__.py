"""Locating, scanning and configuring feature documents."""

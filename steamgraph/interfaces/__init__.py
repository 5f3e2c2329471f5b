"""Interfaces layer for Steamgraph (command-line entry points)."""

"""Renderers for the TUI panels and forms."""

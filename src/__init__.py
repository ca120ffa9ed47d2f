"""
vaultpress - Rule-based exporter for Obsidian-style notes

Converts a parsed note into Hugo Blowfish shortcode Markdown or a
self-contained WeChat HTML post.
"""

__version__ = "1.0.0"

from .lib import Exporter, ExportResult, Target, LOG, state_connectToLogger

__all__ = ["Exporter", "ExportResult", "Target", "LOG", "state_connectToLogger", "__version__"]

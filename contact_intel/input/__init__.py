"""Batch snapshot input parsing."""

from .json_parser import load_snapshot, parse_snapshot

__all__ = ["load_snapshot", "parse_snapshot"]

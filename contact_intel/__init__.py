"""
Contact Intelligence - journalist contact scoring and deduplication.

This package takes pages fetched by an upstream crawler and the contacts
extracted from them, assesses the pages, scores and de-duplicates the
contacts and classifies each one as staff or freelance.

Main entry point is the CLI via `contact-intel run` command.

Example:
    $ contact-intel run -i snapshot.json -o output/
"""

__all__ = ["__version__", "load_snapshot", "parse_snapshot", "process_batch"]
__version__ = "0.1.0"

from .input.json_parser import load_snapshot, parse_snapshot
from .runner import process_batch

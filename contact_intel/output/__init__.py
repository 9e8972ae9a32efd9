"""Result serialization and report rendering."""

from .json_writer import to_jsonable, write_results
from .renderer import render_html, render_markdown

__all__ = ["render_html", "render_markdown", "to_jsonable", "write_results"]

"""Round-trip a set of project files through a single Markdown document."""

__version__ = "0.1.0"

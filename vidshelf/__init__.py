"""vidshelf: serve a JSON-driven catalog of local videos with live reload."""

__version__ = "0.1.0"

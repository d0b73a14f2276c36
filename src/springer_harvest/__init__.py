"""Harvest open-access PDFs from paginated Springer Link search listings."""

__version__ = "0.1.0"

"""Trade enricher: replaces product ids in trade CSV rows with product names."""

__version__ = "0.1.0"

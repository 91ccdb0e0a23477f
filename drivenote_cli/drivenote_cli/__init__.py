"""OneDrive browser and note sync CLI."""

__version__ = "0.1.0"

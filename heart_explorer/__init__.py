"""Heart-Explorer: compare a hypothetical patient against historical heart-disease records."""

__version__ = "0.1.0"

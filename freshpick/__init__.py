"""FreshPick: produce freshness assessment from a photo."""

__version__ = "0.1.0"

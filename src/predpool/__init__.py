"""PredPool - peer-to-pool prediction market engine."""

__version__ = "0.1.0"

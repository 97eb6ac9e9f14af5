"""eco-stats: metrics snapshots for a GitHub topic ecosystem."""

__version__ = "0.1.0"

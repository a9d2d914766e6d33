"""matchfeed - live match odds and statistics aggregator."""

__version__ = "0.1.0"

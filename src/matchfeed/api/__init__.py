"""HTTP API for the aggregated match feed."""

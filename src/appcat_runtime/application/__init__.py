"""Application layer: merge, secret lifecycle, templating, and synthesis."""

"""Interview Studio: build interview templates, invite candidates, review results."""

__version__ = "1.0.0"

"""Path tracing of sphere scenes described in JSON, rendered to PNG."""

__version__ = "1.0.0"
"""droidmon - Prometheus exporter for Android battery state."""

__version__ = "0.3.0"

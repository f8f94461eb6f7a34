"""quotectl — quote line-item hierarchy and calculation engine."""

__version__ = "0.1.0"

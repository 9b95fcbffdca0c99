"""Red Maple: data services for an always-on home dashboard."""

__version__ = "0.1.0"

"""Nash Cards — trading card valuation tool."""

__version__ = "0.1.0"

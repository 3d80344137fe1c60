"""HTTP surface of the Linux command library."""

__version__ = "0.3.0"

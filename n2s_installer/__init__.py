"""npm-two-stage installer — patch, unpatch and inspect npm 9.8.1."""

__version__ = "0.1.0"

"""orgblocks - "<" block template completion for Org documents."""

__version__ = "0.1.0"

"""Exceptions raised by orgblocks."""


class OrgBlocksError(Exception):
    """Base class for orgblocks errors."""
    pass


class NoSpecialEnvironmentError(OrgBlocksError):
    """Raised when the block under the cursor has no dedicated edit buffer."""

    def __init__(self, message: str = "No special environment to edit here"):
        super().__init__(message)


class ConfigError(OrgBlocksError):
    """Raised for configuration values that cannot be used."""
    pass

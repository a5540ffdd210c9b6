"""Exceptions raised by the layout recovery pipeline."""


class LayoutParseError(Exception):
    """Base class for layout text that could not be turned into a layout."""
    pass


class MalformedLayoutError(LayoutParseError):
    """Text is not a decodable layout document."""
    pass


class EmptyLayoutError(LayoutParseError):
    """Text was recovered but yields zero usable objects."""
    pass


class LayoutValidationError(Exception):
    """Raised when a layout fails validation against its profile."""
    pass


class ConfigError(Exception):
    """Raised for missing or invalid configuration files."""
    pass

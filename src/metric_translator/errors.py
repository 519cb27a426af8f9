class ConfigError(ValueError):
    """Raised when translation rules are malformed. Fatal at startup."""

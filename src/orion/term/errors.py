class OrionTermError(Exception):
    """Raised when a terminal session is used outside its lifecycle."""

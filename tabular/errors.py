class FileReadingError(Exception):
    """Raised when an input file cannot be read at all."""

    pass


class FileContentError(Exception):
    """Raised when the content of a file is not as expected (bad column, bad value, malformed row)."""

    pass

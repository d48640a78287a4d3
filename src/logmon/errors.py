"""Exceptions raised by logmon"""


class SourceUnavailableError(OSError):
    """A line source could not be opened for reading.

    Raised before any line is processed, so the session is left untouched.
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f'Log source unavailable: {path} ({reason})')

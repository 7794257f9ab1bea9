"""PACER — Contract Errors."""


class InvalidArgument(ValueError):
    """Raised when a caller breaks an engine contract.

    Malformed or sparse snapshot data never raises; only programmer errors
    such as an inverted date range or a non-positive goal target do.
    """

    def __init__(self, message: str, argument: str = ""):
        self.argument = argument
        super().__init__(message)

"""Exception hierarchy for PE analysis."""


class PeError(Exception):
    """Base class for every error raised while analysing a PE file."""

    prefix = "PE error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.prefix}: {self.message}"


class PeIoError(PeError):
    """Reading the input failed."""

    prefix = "I/O error"


class InvalidArgumentsError(PeError):
    """The caller supplied arguments that cannot be used."""

    prefix = "Invalid Arguments"


class CorruptedFileError(PeError):
    """The data is truncated or otherwise inconsistent."""

    prefix = "Corrupted File"


class InvalidHeaderError(PeError):
    """A header is malformed or too small."""

    prefix = "Invalid Header"


class NotPeFileError(PeError):
    """The data is not a PE image."""

    def __init__(self) -> None:
        super().__init__("Not a PE file")

    def __str__(self) -> str:
        return self.message
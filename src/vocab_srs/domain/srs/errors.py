"""Error taxonomy for the scheduling core."""


class SrsError(Exception):
    """Base class for every error raised by vocab-srs."""


class AlgorithmError(SrsError):
    """A scheduling algorithm could not produce a record from its inputs."""

    def __init__(self, algorithm: str, message: str):
        super().__init__(f"{algorithm}: {message}")
        self.algorithm = algorithm
        self.message = message


class RecordFormatError(SrsError, ValueError):
    """A serialized ReviewRecord is missing fields or has invalid values."""

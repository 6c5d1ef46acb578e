"""Exceptions raised across the Real Weather pipeline."""


class RealWeatherError(Exception):
    """Base exception for all Real Weather errors."""


class ProviderError(RealWeatherError):
    """Raised when a weather provider cannot deliver an observation."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class ProviderFormatError(ProviderError):
    """Raised when a provider payload is malformed or missing required data."""


class TransportError(ProviderError):
    """Raised on network failures, timeouts and non-2xx responses."""


class ArchiveError(RealWeatherError):
    """Raised when a mission archive is corrupt or unsafe to unpack."""


class DocumentError(RealWeatherError):
    """Base exception for mission document failures."""


class ParseError(DocumentError):
    """Raised when a table-literal document cannot be parsed."""

    def __init__(self, chunk: str, line: int, message: str):
        self.chunk = chunk
        self.line = line
        super().__init__(f"{chunk}:{line}: {message}")


class EvalError(DocumentError):
    """Raised when an assignment targets a path that cannot be indexed."""


class SerializationError(DocumentError):
    """Raised when a value cannot be written back as a table literal."""


class ConfigValidationError(RealWeatherError):
    """Raised when the configuration cannot be satisfied."""

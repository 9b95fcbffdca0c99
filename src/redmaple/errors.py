"""Error taxonomy shared by every data source."""


class RedMapleError(Exception):
    """Base class for errors raised by redmaple."""


class FetchFailure(RedMapleError):
    """Raised when a source is unreachable or answers with an HTTP error."""


class DecodeFailure(RedMapleError):
    """Raised when a payload is structurally invalid (protobuf or JSON)."""


class NotFound(RedMapleError):
    """Raised when a lookup that is expected to succeed finds nothing."""


class ConfigurationError(RedMapleError):
    """Raised when static reference data is malformed. Fatal at startup."""

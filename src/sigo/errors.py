from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    """Classifies every failure the gateway can surface.

    The kind travels with the exception through the retry loop and is only
    collapsed to plain text when the final InvocationOutcome is built.
    """

    CONFIG_INVALID = "config_invalid"
    EMPTY_INPUT = "empty_input"
    UNSUPPORTED_PROVIDER = "unsupported_provider"
    NETWORK_FAILURE = "network_failure"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    RESPONSE_FORMAT = "response_format"
    UPSTREAM_ERROR = "upstream_error"
    CIRCUIT_OPEN = "circuit_open"


@dataclass(eq=False)
class GatewayError(RuntimeError):
    """Represents an expected, structured gateway failure.

    The optional data payload carries machine-readable context
    (HTTP status, offending keys, env var names).

    Subclasses pin `kind` and `retryable`; the retry controller consults
    `retryable` to decide whether another attempt is worth making.
    """

    message: str
    data: dict[str, object] | None = None

    kind: ClassVar[ErrorKind] = ErrorKind.NETWORK_FAILURE
    retryable: ClassVar[bool] = True

    def __str__(self) -> str:
        return self.message


class ConfigInvalid(GatewayError):
    kind = ErrorKind.CONFIG_INVALID
    retryable = False


class EmptyInput(GatewayError):
    kind = ErrorKind.EMPTY_INPUT
    retryable = False


class UnsupportedProvider(GatewayError):
    kind = ErrorKind.UNSUPPORTED_PROVIDER
    retryable = False


class NetworkFailure(GatewayError):
    kind = ErrorKind.NETWORK_FAILURE


class Timeout(GatewayError):
    kind = ErrorKind.TIMEOUT
    retryable = False


class Cancelled(GatewayError):
    kind = ErrorKind.CANCELLED
    retryable = False


class ResponseFormatError(GatewayError):
    kind = ErrorKind.RESPONSE_FORMAT


class UpstreamError(GatewayError):
    """The provider answered with a structured error payload."""

    kind = ErrorKind.UPSTREAM_ERROR


class CircuitOpen(GatewayError):
    kind = ErrorKind.CIRCUIT_OPEN

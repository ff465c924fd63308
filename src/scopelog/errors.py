"""scopelog error taxonomy.

This module defines the error hierarchy for scopelog. Only two families
ever reach application code: configuration errors (raised while the library
is being set up) and adapter errors (failures of the call the application
itself started). Masking, serialization and transport failures are recovered
locally; their classes exist so the failure can be recorded and logged with a
stable code.
"""
from __future__ import annotations

from typing import Any


class ScopeLogError(Exception):
    """Base exception for all scopelog errors.

    Attributes:
        code: Error code following the scopelog:<area>/<reason> pattern
        message: Human-readable error message
        details: Optional additional error context
    """

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{code, message, details}`` dict."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(ScopeLogError):
    """Raised when settings passed to scopelog are invalid.

    Fatal at construction time: raised synchronously to whoever called
    ``load_config`` or ``ScopeLog.init``.

    Attributes:
        errors: Flattened list of validation problems (``loc``/``msg`` dicts)
    """

    def __init__(
        self,
        message: str,
        errors: list[dict[str, Any]] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="scopelog:config/invalid",
            message=message,
            details={"errors": errors or [], **(details or {})},
        )
        self.errors = errors or []


class AdapterError(ScopeLogError):
    """Normalized failure of an outbound call made through an adapter.

    Adapters raise this (or any exception carrying a truthy
    ``is_adapter_error`` attribute) to let the instrumentation layer log the
    request together with whatever response was received.

    Attributes:
        request: The request (or message) that failed
        response: The response received before failing, if any
        is_adapter_error: Discriminator flag, always True
    """

    is_adapter_error = True

    def __init__(
        self,
        message: str,
        request: Any = None,
        response: Any = None,
        cause: BaseException | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="scopelog:adapter/failure",
            message=message,
            details=details or {},
        )
        self.request = request
        self.response = response
        self.cause = cause

    @classmethod
    def from_exception(cls, error: BaseException, request: Any = None) -> AdapterError:
        """Build a normalized view of a foreign error flagged as an adapter error.

        Args:
            error: Exception raised by an adapter
            request: The request being executed when it failed

        Returns:
            The error itself when already an AdapterError, otherwise a new
            AdapterError copying ``request``/``response`` attributes when present.
        """
        if isinstance(error, AdapterError):
            return error
        return cls(
            message=str(error) or type(error).__name__,
            request=getattr(error, "request", None) or request,
            response=getattr(error, "response", None),
            cause=error,
        )


class MaskingFieldFailure(ScopeLogError):
    """A masking strategy raised while masking one field.

    Never raised to callers; recorded in an ``Outcome`` so the engine can
    substitute a fallback for that field and continue.

    Attributes:
        field: The key whose value could not be masked
    """

    def __init__(self, field: str, cause: BaseException | None = None) -> None:
        super().__init__(
            code="scopelog:masking/field_failure",
            message=f"Masking failed for field '{field}'",
            details={"field": field, "cause": repr(cause) if cause else None},
        )
        self.field = field
        self.cause = cause


class SerializationTimeoutError(ScopeLogError):
    """A serializer took longer than its budget for one field.

    Attributes:
        field: The key being serialized
        timeout: The budget in seconds
    """

    def __init__(self, field: str, timeout: float) -> None:
        super().__init__(
            code="scopelog:serialization/timeout",
            message=f"Serializer for field '{field}' timed out after {timeout * 1000:.0f}ms",
            details={"field": field, "timeout_ms": timeout * 1000},
        )
        self.field = field
        self.timeout = timeout


class TransportFailure(ScopeLogError):
    """A transport rejected ``log`` or ``flush``.

    Attributes:
        transport: Name of the failing transport
        cause: The original exception
    """

    def __init__(self, transport: str, cause: BaseException | None = None) -> None:
        super().__init__(
            code="scopelog:transport/failure",
            message=f"Transport '{transport}' failed",
            details={"transport": transport, "cause": repr(cause) if cause else None},
        )
        self.transport = transport
        self.cause = cause


class NotInitializedError(ScopeLogError):
    """Raised when the ScopeLog facade is used before ``init`` completed.

    Attributes:
        state: Lifecycle state at the time of the call
    """

    def __init__(self, state: str) -> None:
        super().__init__(
            code="scopelog:lifecycle/not_ready",
            message=(
                f"scopelog is not ready (state: '{state}'). "
                "Call init() and await it before requesting loggers or clients."
            ),
            details={"state": state},
        )
        self.state = state


class InstanceNotFoundError(ScopeLogError):
    """Raised when a named instrumented client does not exist.

    Attributes:
        kind: Client family ("http" or "broker")
        name: Requested instance name
    """

    def __init__(self, kind: str, name: str | None) -> None:
        if name is None:
            message = f"No {kind} instance name given and no default {kind} instance is configured"
        else:
            message = f"{kind} instance '{name}' was not found. Check your configuration."
        super().__init__(
            code="scopelog:instrumentation/instance_not_found",
            message=message,
            details={"kind": kind, "name": name},
        )
        self.kind = kind
        self.name = name

"""Configuration surface for scopelog.

All settings are frozen pydantic models. ``load_config`` validates a plain
mapping (typically parsed from YAML/JSON or built in code) and raises
``ConfigurationError`` listing every problem found.

Example:
    >>> config = load_config({
    ...     "logger": {"level": "debug", "service_name": "orders"},
    ...     "logging_matrix": {"default": ["correlationId"], "error": ["*"]},
    ...     "masking": {"rules": [{"pattern": "password", "strategy": "full"}]},
    ... })
    >>> config.logger.level
    <LogLevel.DEBUG: 'debug'>
"""

import re
from typing import Any, Callable, Mapping

from pydantic import Field, ValidationError, field_validator, model_validator

from scopelog.errors import ConfigurationError
from scopelog.masking.rules import ExactKey, KeyPattern, MaskingRule
from scopelog.models.base import ScopeLogBaseModel
from scopelog.models.constants import (
    DEFAULT_CORRELATION_ID_HEADER,
    DEFAULT_FULL_MASK,
    DEFAULT_MASK_CHAR,
    DEFAULT_MAX_DEPTH,
    DEFAULT_SERIALIZER_TIMEOUT_MS,
    DEFAULT_SERVICE_NAME,
    DEFAULT_SHUTDOWN_TIMEOUT_MS,
    DEFAULT_TRANSACTION_ID_HEADER,
    MATRIX_DEFAULT_KEY,
)
from scopelog.models.enums import LogLevel, MaskingStrategy
from scopelog.transports.base import Transport

_START_LEVELS = (LogLevel.TRACE, LogLevel.DEBUG, LogLevel.INFO)
_ERROR_LEVELS = (LogLevel.WARN, LogLevel.ERROR, LogLevel.FATAL)


def _parse_level(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return LogLevel.parse(value)
        except ValueError:
            return value
    return value


class LoggerSettings(ScopeLogBaseModel):
    """Settings shared by every logger."""

    level: LogLevel = Field(default=LogLevel.INFO, description="Threshold of new loggers")
    service_name: str = Field(
        default=DEFAULT_SERVICE_NAME, min_length=1, description="Service of the default logger"
    )
    serializer_timeout_ms: int = Field(
        default=DEFAULT_SERIALIZER_TIMEOUT_MS, gt=0, description="Budget per serializer call"
    )
    serializers: dict[str, Callable[[Any], Any]] = Field(
        default_factory=dict, description="Field key to serializer function"
    )
    transports: list[Transport] = Field(default_factory=list, description="Log sinks")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return _parse_level(v)


class ContextSettings(ScopeLogBaseModel):
    """Identity header names."""

    correlation_id_header: str = Field(default=DEFAULT_CORRELATION_ID_HEADER, min_length=1)
    transaction_id_header: str = Field(default=DEFAULT_TRANSACTION_ID_HEADER, min_length=1)

    @model_validator(mode="after")
    def validate_distinct_headers(self) -> "ContextSettings":
        if self.correlation_id_header == self.transaction_id_header:
            raise ValueError("correlation_id_header and transaction_id_header must differ")
        return self


class MaskingRuleSettings(ScopeLogBaseModel):
    """One masking rule.

    Attributes:
        pattern: Exact key, or a regular expression when ``regex`` is true
        strategy: Redaction strategy
        mask_char: FULL replacement token, or mask glyph for the other strategies
        custom: Function used by the CUSTOM strategy
        regex: Treat ``pattern`` as a regular expression searched in the key
        flags: ``re`` flags for regex patterns (case-insensitive by default)
    """

    pattern: str = Field(..., min_length=1)
    strategy: MaskingStrategy = MaskingStrategy.FULL
    mask_char: str | None = Field(default=None, min_length=1)
    custom: Callable[[str], Any] | None = None
    regex: bool = False
    flags: int = int(re.IGNORECASE)

    @model_validator(mode="after")
    def validate_rule(self) -> "MaskingRuleSettings":
        if self.strategy is MaskingStrategy.CUSTOM and self.custom is None:
            raise ValueError("strategy 'custom' requires a 'custom' function")
        if self.regex:
            try:
                re.compile(self.pattern, self.flags)
            except re.error as exc:
                raise ValueError(f"invalid regex pattern {self.pattern!r}: {exc}") from exc
        return self

    def to_rule(self) -> MaskingRule:
        matcher = KeyPattern.compile(self.pattern, self.flags) if self.regex else ExactKey(self.pattern)
        return MaskingRule(matcher, self.strategy, mask_char=self.mask_char, custom=self.custom)


class MaskingSettings(ScopeLogBaseModel):
    """Masking engine settings."""

    rules: list[MaskingRuleSettings] = Field(default_factory=list)
    mask_char: str = Field(default=DEFAULT_MASK_CHAR, min_length=1, max_length=1)
    full_mask: str = Field(default=DEFAULT_FULL_MASK, min_length=1)
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1)
    enable_default_rules: bool = True


class InstrumentationSettings(ScopeLogBaseModel):
    """Logging and propagation behaviour of one instrumented client."""

    on_request: LogLevel = Field(default=LogLevel.INFO, description="Level of the start record")
    on_success: LogLevel = Field(default=LogLevel.INFO, description="Level of the success record")
    on_error: LogLevel = Field(default=LogLevel.ERROR, description="Level of the failure record")
    log_request_headers: bool = False
    log_request_body: bool = False
    log_success_headers: bool = False
    log_success_body: bool = False
    propagate: list[str] | None = Field(
        default=None, description='Context keys injected as headers; ["*"] for all'
    )
    propagate_full_context: bool = Field(
        default=False, description="Legacy switch, used only when 'propagate' is unset"
    )

    @field_validator("on_request", "on_success", "on_error", mode="before")
    @classmethod
    def normalize_levels(cls, v: Any) -> Any:
        return _parse_level(v)

    @field_validator("on_request", "on_success")
    @classmethod
    def validate_progress_level(cls, v: LogLevel) -> LogLevel:
        if v not in _START_LEVELS:
            raise ValueError(f"must be one of trace, debug, info; got {v.value!r}")
        return v

    @field_validator("on_error")
    @classmethod
    def validate_error_level(cls, v: LogLevel) -> LogLevel:
        if v not in _ERROR_LEVELS:
            raise ValueError(f"must be one of warn, error, fatal; got {v.value!r}")
        return v


class HttpInstanceSettings(ScopeLogBaseModel):
    """A named instrumented request/response client."""

    instance_name: str = Field(..., min_length=1)
    adapter: Any = Field(..., description="RequestAdapter implementation")
    is_default: bool = False
    instrumentation: InstrumentationSettings = Field(default_factory=InstrumentationSettings)

    @field_validator("adapter")
    @classmethod
    def validate_adapter(cls, v: Any) -> Any:
        missing = [name for name in ("connect", "disconnect", "execute") if not callable(getattr(v, name, None))]
        if missing:
            raise ValueError(f"adapter is missing {', '.join(missing)}")
        return v


class BrokerInstanceSettings(ScopeLogBaseModel):
    """A named instrumented pub/sub client."""

    instance_name: str = Field(..., min_length=1)
    adapter: Any = Field(..., description="BrokerAdapter implementation")
    is_default: bool = False
    instrumentation: InstrumentationSettings = Field(default_factory=InstrumentationSettings)

    @field_validator("adapter")
    @classmethod
    def validate_adapter(cls, v: Any) -> Any:
        required = ("connect", "disconnect", "publish", "subscribe")
        missing = [name for name in required if not callable(getattr(v, name, None))]
        if missing:
            raise ValueError(f"adapter is missing {', '.join(missing)}")
        return v


class ScopeLogConfig(ScopeLogBaseModel):
    """Top-level scopelog configuration."""

    logger: LoggerSettings = Field(default_factory=LoggerSettings)
    context: ContextSettings = Field(default_factory=ContextSettings)
    logging_matrix: dict[str, list[str]] | None = Field(
        default=None, description="Level (or 'default') to context fields surfaced"
    )
    masking: MaskingSettings = Field(default_factory=MaskingSettings)
    http: list[HttpInstanceSettings] = Field(default_factory=list)
    brokers: list[BrokerInstanceSettings] = Field(default_factory=list)
    shutdown_timeout_ms: int = Field(default=DEFAULT_SHUTDOWN_TIMEOUT_MS, gt=0)

    @field_validator("logging_matrix")
    @classmethod
    def validate_matrix_keys(cls, v: dict[str, list[str]] | None) -> dict[str, list[str]] | None:
        if v is None:
            return v
        for key in v:
            if key == MATRIX_DEFAULT_KEY:
                continue
            try:
                LogLevel.parse(key)
            except ValueError:
                raise ValueError(f"unknown logging matrix level {key!r}") from None
        return v

    @model_validator(mode="after")
    def validate_unique_instances(self) -> "ScopeLogConfig":
        for kind, instances in (("http", self.http), ("brokers", self.brokers)):
            names = [instance.instance_name for instance in instances]
            duplicates = sorted({name for name in names if names.count(name) > 1})
            if duplicates:
                raise ValueError(f"duplicate {kind} instance names: {', '.join(duplicates)}")
        return self


def load_config(data: Mapping[str, Any] | ScopeLogConfig | None = None) -> ScopeLogConfig:
    """Validate ``data`` into a ``ScopeLogConfig``.

    Args:
        data: Raw settings mapping, an already-built config, or None for defaults

    Returns:
        The validated configuration

    Raises:
        ConfigurationError: If any setting is invalid; ``errors`` lists each problem
    """
    if isinstance(data, ScopeLogConfig):
        return data
    try:
        return ScopeLogConfig.model_validate(dict(data or {}))
    except ValidationError as exc:
        errors = [
            {"loc": ".".join(str(part) for part in error["loc"]), "msg": error["msg"]}
            for error in exc.errors()
        ]
        summary = "; ".join(f"{error['loc'] or '<root>'}: {error['msg']}" for error in errors)
        raise ConfigurationError(f"Invalid scopelog configuration: {summary}", errors=errors) from exc

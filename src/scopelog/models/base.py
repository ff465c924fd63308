"""Base Pydantic model configuration for scopelog models.

All scopelog models inherit from ScopeLogBaseModel to ensure consistent behavior:
- Immutability (frozen=True) so entries and settings can be shared across scopes
- Strict validation (extra="forbid") to catch typos in configuration
- Flexible field naming (populate_by_name=True) for camelCase alias support
"""

from pydantic import BaseModel, ConfigDict


class ScopeLogBaseModel(BaseModel):
    """Base model for all scopelog value objects.

    Example:
        >>> class MyModel(ScopeLogBaseModel):
        ...     name: str
        >>> obj = MyModel(name="test")
        >>> obj.name = "other"  # Raises ValidationError (frozen)
        Traceback (most recent call last):
        ...
        pydantic_core._pydantic_core.ValidationError: ...
    """

    model_config = ConfigDict(
        # Immutability: prevents accidental mutations after creation
        frozen=True,
        # Strict validation: reject unknown fields to catch typos
        extra="forbid",
        # Allow populating fields by both name and alias
        populate_by_name=True,
        use_enum_values=False,
        validate_default=True,
        # Callables, compiled patterns, adapters and transports are plain objects
        arbitrary_types_allowed=True,
    )

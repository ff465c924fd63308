"""Field serialization ahead of masking."""

from scopelog.serialization.registry import SerializerRegistry, serialize_exception

__all__ = ["SerializerRegistry", "serialize_exception"]

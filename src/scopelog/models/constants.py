"""Constants for scopelog.

This module defines library-wide defaults used across the codebase.
"""

# Identity header names
DEFAULT_CORRELATION_ID_HEADER = "x-correlation-id"
DEFAULT_TRANSACTION_ID_HEADER = "x-trace-id"

# Logical names the identity fields take in emitted entries
CORRELATION_ID_FIELD = "correlationId"
TRANSACTION_ID_FIELD = "transactionId"

# Logging matrix keys
MATRIX_DEFAULT_KEY = "default"
MATRIX_WILDCARD = "*"

# Masking defaults
DEFAULT_MASK_CHAR = "*"
DEFAULT_FULL_MASK = "******"
DEFAULT_MAX_DEPTH = 10
CIRCULAR_PLACEHOLDER = "[Circular]"
MAX_DEPTH_PLACEHOLDER = "[MAX_DEPTH_REACHED]"

# Serialization defaults
DEFAULT_SERIALIZER_TIMEOUT_MS = 50
DEFAULT_SERIALIZER_WORKERS = 4

# Lifecycle defaults
DEFAULT_SERVICE_NAME = "unknown-service"
DEFAULT_LOGGER_NAME = "default"
DEFAULT_SHUTDOWN_TIMEOUT_MS = 5000

"""
Constants for kvstore operations.
"""

# Connection defaults
DEFAULT_URI = "mongodb://localhost:27017"
DEFAULT_DATABASE = "mongo-kv-tool"

# Environment variables read by the CLI
ENV_URI = "MONGO_KV_URI"
ENV_DATABASE = "MONGO_KV_DATABASE"

# Record field names
ATTR_ID = "_id"
ATTR_KEY = "key"
ATTR_VALUE = "value"

# Liveness probe
PING_COMMAND = "ping"

# Limits for user supplied names
MAX_KEY_LENGTH = 1024
MAX_COLLECTION_NAME_LENGTH = 255

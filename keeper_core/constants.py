"""
keeper_core.constants
---------------------
Shared constants: record kind names, the fixed reconciliation order,
cipher sizes and configuration defaults.
"""

SCHEMA_VERSION = 1

KIND_BINARIES = "binaries"
KIND_CARDS = "cards"
KIND_CREDENTIALS = "credentials"
KIND_TEXTS = "texts"

# Reconciliation runs the kinds in exactly this order.
KINDS = (KIND_BINARIES, KIND_CARDS, KIND_CREDENTIALS, KIND_TEXTS)

KEY_SIZE = 32     # AES-256
NONCE_SIZE = 12   # GCM standard nonce
TAG_SIZE = 16

DEFAULT_SERVER_URL = "http://localhost:8080"
DEFAULT_DB_PATH = "db/keeper_cache.db"
DEFAULT_HTTP_TIMEOUT = 5.0

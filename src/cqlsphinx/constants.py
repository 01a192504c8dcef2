"""Shared constants for cqlsphinx."""

# Rows requested per page from the query engine
DEFAULT_BATCH_SIZE = 1000

# Cassandra native protocol port
DEFAULT_PORT = 9042

DEFAULT_HOSTS = ("localhost",)

# Per-request timeout in seconds, matches a 40s socket read timeout
DEFAULT_REQUEST_TIMEOUT = 40.0

# Reconnection backoff bounds in seconds
RECONNECT_BASE_DELAY = 0.5
RECONNECT_MAX_DELAY = 300.0

DEFAULT_MAX_ATTEMPTS = 3

# xmlpipe2 envelope
SPHINX_PREFIX = "sphinx"
DOCSET_ELEMENT = f"{SPHINX_PREFIX}:docset"
DOCUMENT_ELEMENT = f"{SPHINX_PREFIX}:document"
MEMBER_ELEMENT = "mem"
OUTPUT_ENCODING = "utf-8"

# What to do with a row that fails to encode
ROW_ERROR_ACTIONS = ("skip", "abort")

# What to do once retries on a timed-out page are exhausted
TIMEOUT_ACTIONS = ("abort", "stop")

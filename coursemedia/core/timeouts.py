"""Timeout defaults shared by HTTP and storage calls."""

# API and database calls
DEFAULT_HTTP_TIMEOUT_SECONDS = 45

# Large object writes to storage (10 minutes)
DEFAULT_STORAGE_TIMEOUT_SECONDS = 600

"""Constants for codesync."""

# Application name used for the platform cache directory
APP_NAME = "codesync"
APP_AUTHOR = "codesync"

# Subdirectory of the cache dir holding one snapshot file per root
SNAPSHOT_SUBDIR = "snapshots"
SNAPSHOT_SUFFIX = ".json"

# Persisted snapshot record format
SNAPSHOT_VERSION = 1

# Project-level files (inside the tracked root)
CONFIG_FILE = ".codesync.yaml"
IGNORE_FILE = ".codesyncignore"

# Environment overrides
ENV_CACHE_DIR = "CODESYNC_CACHE_DIR"
ENV_MAX_WORKERS = "CODESYNC_MAX_WORKERS"

# Scanning
DEFAULT_MAX_WORKERS = 4
READ_CHUNK_SIZE = 8192

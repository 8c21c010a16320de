"""Version information."""

VERSION = "0.1.0"
OUTPUT_SCHEMA_VERSION = 1

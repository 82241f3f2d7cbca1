"""Centralized constants for the doxyset utils package.

Single source of truth for state paths and environment variable names.
"""

from pathlib import Path

# ============================================================================
# STATE DIRECTORIES
# ============================================================================

# Per-project state directory (config file, error log)
STATE_DIR = Path("./.doxyset")

CONFIG_FILE = STATE_DIR / "config.json"
ERROR_LOG_FILE = STATE_DIR / "error.log"

# ============================================================================
# OUTPUT LAYOUT
# ============================================================================

# Subdirectory of the output root holding retained cleaned documents
INTERMEDIATE_DIR = "xml"

# Subdirectory of the output root holding the doxygen working tree
EXTRACTION_DIR = "doxygen"

# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================

ENV_PREFIX = "DOXYSET_"

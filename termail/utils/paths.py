"""Centralized path definitions for termail.

This module provides a single source of truth for all application paths.
"""

import os
from pathlib import Path

# Base application directory
TERMAIL_DIR = Path(os.environ.get("TERMAIL_HOME", Path.home() / ".termail"))

# Subdirectories
LOGS_DIR = TERMAIL_DIR / "logs"
SECRETS_DIR = TERMAIL_DIR / "secrets"

# Specific files
CONFIG_PATH = TERMAIL_DIR / "config.json"
CREDENTIALS_PATH = SECRETS_DIR / "credentials.json"
TOKEN_PATH = SECRETS_DIR / "token.json"

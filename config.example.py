# config.example.py

"""
Documentation-only module (safe to commit).

Configuration is read from environment variables (optionally via a local .env
file). The passphrase is never configurable: it is always prompted.
"""

ENV_VARS = {
    # Paths
    "TTT_DATA_FILE": "Explicit data file path (overridden by --data-file).",
    "TTT_DATA_DIR": "Data directory (default: per-OS application data dir); file is ttt.json.",
    # Logging
    "TTT_LOG_LEVEL": "Console log level on stderr (default: WARNING).",
    "TTT_LOG_FILE": "Optional log file with DEBUG output (default: no file).",
    # Storage
    "TTT_BACKUP_RETENTION": "Number of rotated backups kept next to the data file (default: 3).",
}

# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets; keep them in .env (gitignored).
"""

ENV_VARS = {
    # App / logging
    "DESK_APP_NAME": "App display name (default: content-desk).",
    "DESK_LOG_LEVEL": "Console logging level (default: INFO).",
    # HTTP
    "DESK_HOST": "Bind address for the HTTP API (default: 0.0.0.0).",
    "DESK_PORT": "HTTP port (fallback: PORT, default: 3000).",
    "DESK_PUBLIC_APP_URL": "Public URL, logged at startup (fallback: PUBLIC_APP_URL).",
    # Digest
    "DESK_DIGEST_CHAT_ID": "Where the daily digest goes (fallback: DAILY_DIGEST_CHAT_ID). Empty => not sent.",
    "DESK_DIGEST_TIME": "Local time HH:MM for the scheduled digest. Empty => only /api/digest.",
    # Matrix
    "DESK_MATRIX_ENABLED": "Enable the Matrix connector (true/false).",
    "DESK_MATRIX_HOMESERVER": "Matrix homeserver URL.",
    "DESK_MATRIX_USER_ID": "Matrix user ID (bot).",
    "DESK_MATRIX_PASSWORD": "Password for first login (session stored locally).",
    "DESK_MATRIX_ROOMS": "Optional allowlist of room IDs; the first one is the default outbound room.",
    # Paths (gitignored)
    "DESK_DATA_DIR": "Local data directory (default: .local/content-desk).",
    "DESK_DB_PATH": "SQLite database path (default: <data_dir>/desk.sqlite3).",
    "DESK_MATRIX_STORE_PATH": "Matrix session store path (default: <data_dir>/matrix_store).",
}

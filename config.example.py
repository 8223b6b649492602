# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit a real .env.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "WORKLOG_APP_NAME": "App display name (default: worklog).",
    "WORKLOG_LOG_LEVEL": "Console logging level (default: INFO).",
    # Storage
    "WORKLOG_DATA_DIR": "Local data directory for the database and logs (default: .local/worklog).",
    "WORKLOG_DB_PATH": "SQLite database path (default: <data_dir>/worklog.sqlite3).",
    "WORKLOG_DB_TIMEOUT_SECONDS": "SQLite busy timeout in seconds (default: 30).",
    # Console identity
    "WORKLOG_USERNAME": "Display name for the console user (default: $USER).",
    "WORKLOG_USER_ID": "User id for the console user (default: username).",
    "WORKLOG_IS_ADMIN": "Show the all-users report (true/false, default: false).",
    # AI helpers (/plan, /suggest). Without a key they answer in stub mode.
    "WORKLOG_OPENAI_API_KEY": "OpenAI API key (falls back to OPENAI_API_KEY).",
    "WORKLOG_OPENAI_BASE_URL": "Optional OpenAI-compatible base URL (default: the SDK default).",
    "WORKLOG_LLM_MODEL": "Chat model name (default: gpt-3.5-turbo).",
    "WORKLOG_LLM_TIMEOUT_SECONDS": "Request timeout for the LLM in seconds (default: 30).",
}

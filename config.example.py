# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKBELL_APP_NAME": "App display name, also used as the notification app name (default: taskbell).",
    "TASKBELL_LOG_LEVEL": "Console logging level (default: INFO).",
    # Paths (gitignored)
    "TASKBELL_DATA_DIR": "Local data + log directory (default: .local/taskbell).",
    "TASKBELL_STORE_PATH": "Task/reminder SQLite file (default: <data_dir>/taskbell.sqlite3).",
    # Evaluator
    "TASKBELL_CHECK_INTERVAL_SECONDS": "Seconds between reminder checks (default: 10, minimum 0.5).",
    "TASKBELL_ORPHAN_POLICY": "What to do with reminders whose task is gone: skip | delete (default: skip).",
    # Alert channels
    "TASKBELL_NOTIFICATIONS_ENABLED": "Allow desktop notifications (true/false, default: true).",
    "TASKBELL_SOUND_ENABLED": "Play the alert tone (true/false, default: true).",
    "TASKBELL_BLOCKING_ALERT_ENABLED": (
        "Let the fallback alert wait for Enter on an interactive terminal (true/false, default: true)."
    ),
    # Task helpers
    "TASKBELL_AUTO_REMINDER": "Create a reminder at the due date when a task is added (default: true).",
}

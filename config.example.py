# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
SMTP and daily-report values are seed defaults: once an administrator saves
them, the copy in the settings database wins.

Do NOT commit real secrets. Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)
"""

ENV_VARS = {
    # App / logging
    "WORKBOARD_APP_NAME": "Name shown in mail headers and subjects (default: Workboard).",
    "WORKBOARD_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    "WORKBOARD_CONSOLE_ENABLED": "Run the admin console in the foreground (true/false, default: true).",
    # Links
    "WORKBOARD_PUBLIC_URL": "Base URL used for links in mails (default: http://localhost:5173).",
    "WORKBOARD_URL": "Older name for WORKBOARD_PUBLIC_URL, read when the former is unset.",
    # Paths (gitignored)
    "WORKBOARD_DATA_DIR": "Local data directory, also holds workboard.log (default: .local/workboard).",
    "WORKBOARD_TASKS_DB_PATH": "Tasks + counters SQLite path (default: <data_dir>/tasks.sqlite3).",
    "WORKBOARD_AUDIT_DB_PATH": "Task history SQLite path (default: <data_dir>/audit.sqlite3).",
    "WORKBOARD_DIRECTORY_DB_PATH": "People directory SQLite path (default: <data_dir>/directory.sqlite3).",
    "WORKBOARD_SETTINGS_DB_PATH": "Runtime settings SQLite path (default: <data_dir>/settings.sqlite3).",
    # SMTP (seed defaults)
    "WORKBOARD_SMTP_HOST": "SMTP host. Mail is skipped while host, user, password or from address is empty.",
    "WORKBOARD_SMTP_PORT": "SMTP port (default: 587).",
    "WORKBOARD_SMTP_SECURE": "Implicit TLS, usually with port 465 (true/false, default: false).",
    "WORKBOARD_SMTP_USER": "SMTP login.",
    "WORKBOARD_SMTP_PASSWORD": "SMTP password.",
    "WORKBOARD_SMTP_FROM_EMAIL": "Sender address.",
    "WORKBOARD_SMTP_FROM_NAME": "Sender display name (default: app name).",
    "WORKBOARD_SMTP_TIMEOUT": "Seconds before an SMTP call gives up (default: 15).",
    # Daily report (seed defaults)
    "WORKBOARD_REPORT_ENABLED": "Send the periodic report (true/false, default: true).",
    "WORKBOARD_REPORT_RECIPIENT": "Report recipient when not sending to everyone.",
    "WORKBOARD_REPORT_SEND_TO_ALL": "Send the report to every directory entry (true/false, default: false).",
    "WORKBOARD_REPORT_INTERVAL_HOURS": "Hours between reports (default: 8).",
    # Presentation
    "WORKBOARD_DATE_FORMAT": "strftime format for due dates in mails (default: %d/%m/%Y).",
    "WORKBOARD_REPORT_DATE_FORMAT": "strftime format for the report date (default: %A, %d %B %Y).",
}

"""Configuration management for EWPM."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

EWPM_HOME = Path(os.environ.get("EWPM_HOME", Path.home() / ".ewpm"))
CONFIG_FILE = EWPM_HOME / "config" / "ewpm.conf"
DATA_DIR = EWPM_HOME / "data"
ARCHIVE_FILE = DATA_DIR / "archive.json"

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class Config:
    """EWPM configuration."""

    supabase_url: str = ""
    supabase_key: str = ""
    resend_api_key: str = ""
    email_from: str = "EWPM System <noreply@ewpm.system>"
    app_url: str = ""
    timezone: str = "Asia/Kolkata"
    # Payment reminder batch
    payment_reminders_enabled: bool = True
    reminder_days: int = 3
    reminder_time: str = "09:00"
    # Auto-archive of completed assignments
    auto_archive_enabled: bool = False
    auto_archive_delay_days: int = 0
    archive_file: str = ""

    @property
    def archive_path(self) -> Path:
        if self.archive_file:
            return Path(self.archive_file).expanduser()
        return ARCHIVE_FILE


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in TRUE_VALUES


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}, using {default}")
        return default


def _strip_value(value: str) -> str:
    """Strip quotes and inline comments from a config value."""
    # Quoted values may carry an inline comment: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(config_file: Path | None = None, environ: dict | None = None) -> Config:
    """Load configuration from ewpm.conf, then apply environment overrides."""
    config = Config()
    config_file = config_file or CONFIG_FILE
    environ = os.environ if environ is None else environ

    if config_file.exists():
        for line in config_file.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip().lower()
            value = _strip_value(value.strip())

            match key:
                case "supabase_url":
                    config.supabase_url = value
                case "supabase_key":
                    config.supabase_key = value
                case "resend_api_key":
                    config.resend_api_key = value
                case "email_from":
                    config.email_from = value
                case "app_url":
                    config.app_url = value
                case "timezone":
                    config.timezone = value
                case "payment_reminders_enabled":
                    config.payment_reminders_enabled = _parse_bool(value)
                case "reminder_days":
                    config.reminder_days = _parse_int(key, value, config.reminder_days)
                case "reminder_time":
                    config.reminder_time = value
                case "auto_archive_enabled":
                    config.auto_archive_enabled = _parse_bool(value)
                case "auto_archive_delay_days":
                    config.auto_archive_delay_days = _parse_int(
                        key, value, config.auto_archive_delay_days
                    )
                case "archive_file":
                    config.archive_file = value
                case _:
                    logger.debug(f"Ignoring unknown config key: {key}")

    # Deployment secrets win over the file
    if environ.get("SUPABASE_URL"):
        config.supabase_url = environ["SUPABASE_URL"]
    service_key = environ.get("SUPABASE_SERVICE_ROLE_KEY") or environ.get("SUPABASE_ANON_KEY")
    if service_key:
        config.supabase_key = service_key
    if environ.get("RESEND_API_KEY"):
        config.resend_api_key = environ["RESEND_API_KEY"]

    return config

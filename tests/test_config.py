"""Tests for configuration loading."""

from pathlib import Path
from unittest.mock import patch

import pytest

from ewpm.config import ARCHIVE_FILE, Config, load_config


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "ewpm.conf"
    path.write_text(
        "\n".join(
            [
                "# EWPM settings",
                "SUPABASE_URL=https://abc.supabase.co",
                'SUPABASE_KEY="file-key"  # service role',
                "RESEND_API_KEY=re_file",
                "EMAIL_FROM='Ops <ops@example.com>'",
                "TIMEZONE=Asia/Kolkata",
                "PAYMENT_REMINDERS_ENABLED=no",
                "REMINDER_DAYS=5",
                "REMINDER_TIME=08:30",
                "AUTO_ARCHIVE_ENABLED=true",
                "AUTO_ARCHIVE_DELAY_DAYS=7 # one week",
                "NOT_A_KEY=whatever",
                "malformed line",
            ]
        )
    )
    return path


class TestLoadConfig:
    def test_reads_file(self, config_file):
        config = load_config(config_file, environ={})
        assert config.supabase_url == "https://abc.supabase.co"
        assert config.supabase_key == "file-key"
        assert config.resend_api_key == "re_file"
        assert config.email_from == "Ops <ops@example.com>"
        assert config.payment_reminders_enabled is False
        assert config.reminder_days == 5
        assert config.reminder_time == "08:30"
        assert config.auto_archive_enabled is True
        assert config.auto_archive_delay_days == 7

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.conf", environ={})
        assert config == Config()
        assert config.auto_archive_enabled is False
        assert config.reminder_days == 3

    def test_environment_overrides_file(self, config_file):
        config = load_config(
            config_file,
            environ={
                "SUPABASE_URL": "https://env.supabase.co",
                "SUPABASE_SERVICE_ROLE_KEY": "service",
                "SUPABASE_ANON_KEY": "anon",
                "RESEND_API_KEY": "re_env",
            },
        )
        assert config.supabase_url == "https://env.supabase.co"
        assert config.supabase_key == "service"
        assert config.resend_api_key == "re_env"

    def test_anon_key_fallback(self, tmp_path):
        config = load_config(tmp_path / "absent.conf", environ={"SUPABASE_ANON_KEY": "anon"})
        assert config.supabase_key == "anon"

    def test_bad_integer_keeps_default(self, tmp_path):
        path = tmp_path / "ewpm.conf"
        path.write_text("REMINDER_DAYS=three\n")
        assert load_config(path, environ={}).reminder_days == 3

    def test_default_config_file(self, config_file):
        with patch("ewpm.config.CONFIG_FILE", config_file):
            assert load_config(environ={}).reminder_days == 5


class TestArchivePath:
    def test_default(self):
        assert Config().archive_path == ARCHIVE_FILE

    def test_expands_user(self):
        path = Config(archive_file="~/ewpm/archive.json").archive_path
        assert "~" not in str(path)
        assert path == Path.home() / "ewpm" / "archive.json"

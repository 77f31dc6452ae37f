"""
Tests for AUTIHD settings and application wiring
"""

import logging
from datetime import datetime

import pytest

from autihd import ReminderApp
from autihd.config import ConfigError, ReminderSettings, load_env_file
from autihd.notifications import LocalNotificationCenter, RepeatPolicy

from conftest import RecordingDelivery


def test_defaults():
    settings = ReminderSettings.from_env(environ={})

    assert settings.repeat_policy is RepeatPolicy.FANOUT
    assert settings.repeat_interval_seconds == 600
    assert settings.repeat_occurrences == 10
    assert settings.default_categories == ("Appointments", "Chores", "Groceries")
    assert settings.fallback_body == "Don't forget your reminder!"
    assert settings.voice_alerts is False
    assert settings.log_level == "INFO"


def test_values_from_environment():
    settings = ReminderSettings.from_env(environ={
        "AUTIHD_REPEAT_POLICY": "Native",
        "AUTIHD_REPEAT_INTERVAL_SECONDS": "300",
        "AUTIHD_REPEAT_OCCURRENCES": "4",
        "AUTIHD_DEFAULT_CATEGORIES": "Work, Home ,",
        "AUTIHD_FALLBACK_BODY": "Heads up",
        "AUTIHD_VOICE_ALERTS": "yes",
        "AUTIHD_LOG_LEVEL": "debug",
    })

    assert settings.repeat_policy is RepeatPolicy.NATIVE
    assert settings.repeat_interval_seconds == 300
    assert settings.repeat_occurrences == 4
    assert settings.default_categories == ("Work", "Home")
    assert settings.fallback_body == "Heads up"
    assert settings.voice_alerts is True
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("key,value", [
    ("AUTIHD_REPEAT_POLICY", "weekly"),
    ("AUTIHD_REPEAT_INTERVAL_SECONDS", "ten"),
    ("AUTIHD_REPEAT_OCCURRENCES", "0"),
    ("AUTIHD_DEFAULT_CATEGORIES", " , "),
    ("AUTIHD_DEFAULT_CATEGORIES", "Work,Work"),
    ("AUTIHD_VOICE_ALERTS", "maybe"),
    ("AUTIHD_LOG_LEVEL", "LOUD"),
])
def test_invalid_values(key, value):
    with pytest.raises(ConfigError) as excinfo:
        ReminderSettings.from_env(environ={key: value})
    assert key in str(excinfo.value)


def test_env_file_loaded(tmp_path, monkeypatch):
    # setenv first so the value load_dotenv writes is undone afterwards
    monkeypatch.setenv("AUTIHD_REPEAT_POLICY", "fanout")
    monkeypatch.delenv("AUTIHD_REPEAT_POLICY")
    env_file = tmp_path / ".env"
    env_file.write_text("AUTIHD_REPEAT_POLICY=native\n")

    settings = ReminderSettings.from_env(env_path=env_file)
    assert settings.repeat_policy is RepeatPolicy.NATIVE


def test_environment_wins_over_env_file(tmp_path, monkeypatch):
    monkeypatch.setenv("AUTIHD_REPEAT_OCCURRENCES", "5")
    env_file = tmp_path / ".env"
    env_file.write_text("AUTIHD_REPEAT_OCCURRENCES=7\n")

    assert load_env_file(env_file)
    assert ReminderSettings.from_env(env_path=env_file).repeat_occurrences == 5


def test_missing_env_file(tmp_path):
    assert load_env_file(tmp_path / "nope.env") is False


def test_env_file_found_from_working_directory(tmp_path, monkeypatch):
    monkeypatch.setenv("AUTIHD_REPEAT_OCCURRENCES", "10")
    monkeypatch.delenv("AUTIHD_REPEAT_OCCURRENCES")
    (tmp_path / ".env").write_text("AUTIHD_REPEAT_OCCURRENCES=3\n")
    nested = tmp_path / "work" / "today"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)

    settings = ReminderSettings.from_env()
    assert settings.repeat_occurrences == 3


def test_no_env_file_in_working_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("autihd.config.find_dotenv", lambda usecwd: "")

    assert load_env_file() is False


# ============================================================================
# ReminderApp
# ============================================================================

def test_app_wires_settings_through():
    delivery = RecordingDelivery()
    settings = ReminderSettings(repeat_policy=RepeatPolicy.NATIVE, default_categories=("Work",))

    with ReminderApp(settings=settings, delivery=delivery) as app:
        assert delivery.permission_requests == 1
        assert delivery.delegate is app.bridge
        assert app.store.category_names() == ["Work"]

        reminder = app.agent.create_reminder(
            "Standup",
            datetime(2026, 3, 2, 9, 30),
            category="Work",
            is_repeating=True
        )

    assert delivery.ids == [reminder.id]
    assert delivery.delegate is None


def test_app_flat_variant():
    app = ReminderApp(delivery=RecordingDelivery(), categorized=False)
    reminder = app.agent.create_reminder("Water plants", datetime(2026, 3, 2, 9, 0))
    assert app.store.reminders == [reminder]


def test_app_owns_default_delivery(caplog):
    app = ReminderApp()
    assert isinstance(app.delivery, LocalNotificationCenter)

    with caplog.at_level(logging.INFO, logger="autihd.notifications.local_delivery"):
        app.start()
        app.shutdown()

    assert any("shutdown complete" in r.message for r in caplog.records)

"""
tests/test_config.py — config.yaml Loader Tests
=================================================

Covers the snake_case format, the original JSON field aliases, and every
way a bad file must fail with ConfigError.
"""

from __future__ import annotations

import json

import pytest

from hello_there.config import load_config, parse_config
from hello_there.constants import DEFAULT_DEDUP_TIMEOUT_SECONDS
from hello_there.errors import ConfigError

VALID_YAML = """
timezone: America/Chicago
open_hour: 9
close_hour: 21
dedup_timeout_seconds: 120
voice_disconnect_delay_seconds: 2.5
guilds:
  "111":
    notification_channel_id: 222
    emoji: "<:wave:333>"
    required_role_name: voice-spam
    users:
      alice: {on_join_sound: 444}
      bob: {}
    role_config:
      management_channel_id: 555
      message_id: 666
      emoji_roles:
        "✅": voice-spam
        "🎮": 777
"""


def _write(tmp_path, text: str, name: str = "config.yaml"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_full_yaml(self, tmp_path):
        cfg = load_config(_write(tmp_path, VALID_YAML))

        assert cfg.timezone == "America/Chicago"
        assert (cfg.open_hour, cfg.close_hour) == (9, 21)
        assert cfg.dedup_timeout_seconds == 120
        assert cfg.voice_disconnect_delay_seconds == 2.5

        guild = cfg.guilds[111]
        assert guild.notification_channel_id == 222
        assert guild.emoji == "<:wave:333>"
        assert guild.required_role_name == "voice-spam"
        assert guild.user_sounds == {"alice": 444}  # bob has no sound
        assert guild.role_config.management_channel_id == 555
        assert guild.role_config.message_id == 666
        assert guild.role_config.emoji_roles == {"✅": "voice-spam", "🎮": "777"}

    def test_defaults_applied(self, tmp_path):
        cfg = load_config(_write(tmp_path, 'guilds: {"1": {notification_channel_id: 2}}'))
        assert cfg.timezone == "UTC"
        assert (cfg.open_hour, cfg.close_hour) == (8, 22)
        assert cfg.dedup_timeout_seconds == DEFAULT_DEDUP_TIMEOUT_SECONDS
        assert cfg.guilds[1].role_config is None
        assert cfg.guilds[1].user_sounds == {}

    def test_original_json_field_names(self, tmp_path):
        """The original bot's config.json keys load unchanged."""
        original = {
            "guilds": {
                "42": {
                    "NotificationChannelID": "100",
                    "EmojiID": "<:hi:1>",
                    "RequiredRoleName": "voice-spam",
                    "UserConfig": {"carol": {"OnJoinSound": "9"}},
                    "RoleConfig": {
                        "ManagementChannelID": "7",
                        "MessageID": "8",
                        "EmojiRoleConfig": {"✅": "voice-spam"},
                    },
                }
            }
        }
        cfg = load_config(_write(tmp_path, json.dumps(original), "config.json"))
        guild = cfg.guilds[42]
        assert guild.notification_channel_id == 100
        assert guild.emoji == "<:hi:1>"
        assert guild.user_sounds == {"carol": 9}
        assert guild.role_config.message_id == 8


class TestConfigErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_config(_write(tmp_path, "guilds: [unclosed"))

    def test_no_guilds(self):
        with pytest.raises(ConfigError, match="at least one guild"):
            parse_config({"timezone": "UTC"})

    def test_missing_notification_channel(self):
        with pytest.raises(ConfigError, match="notification_channel_id"):
            parse_config({"guilds": {"1": {"emoji": "x"}}})

    def test_non_integer_id(self):
        with pytest.raises(ConfigError, match="integer"):
            parse_config({"guilds": {"1": {"notification_channel_id": "general"}}})

    def test_non_integer_guild_key(self):
        with pytest.raises(ConfigError, match="integer"):
            parse_config({"guilds": {"my-server": {"notification_channel_id": 1}}})

    def test_unknown_timezone(self):
        with pytest.raises(ConfigError, match="timezone"):
            parse_config({"timezone": "Mars/Olympus", "guilds": {"1": {"notification_channel_id": 2}}})

    def test_inverted_hours(self):
        with pytest.raises(ConfigError, match="open_hour"):
            parse_config({"open_hour": 23, "close_hour": 8, "guilds": {"1": {"notification_channel_id": 2}}})

    def test_role_config_missing_message(self):
        raw = {"guilds": {"1": {"notification_channel_id": 2, "role_config": {"management_channel_id": 3}}}}
        with pytest.raises(ConfigError, match="message_id"):
            parse_config(raw)

    def test_top_level_not_a_mapping(self):
        with pytest.raises(ConfigError, match="mapping"):
            parse_config(["not", "a", "mapping"])

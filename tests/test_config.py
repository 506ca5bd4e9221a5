"""
Tests for OmniNATS settings.
"""

import pytest

from omninats.config import ConnectionSettings, Settings
from omninats.exceptions import ConfigurationError


class TestDefaults:
    def test_default_connection(self):
        settings = Settings()

        assert list(settings.connections) == ["default"]
        assert settings.connection().servers == ["nats://localhost:4222"]
        assert settings.request_timeout == 5.0
        settings.validate()

    def test_connect_options_auth(self):
        options = ConnectionSettings(user="alice", password="secret").to_connect_options()
        assert options["user"] == "alice"
        assert options["password"] == "secret"
        assert "token" not in options

    def test_extra_options_are_forwarded(self):
        options = ConnectionSettings(options={"no_echo": True}).to_connect_options()
        assert options["no_echo"] is True

    def test_unknown_connection(self):
        with pytest.raises(ConfigurationError, match="audit"):
            Settings().connection("audit")


class TestFromEnv:
    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("OMNINATS_SERVERS", "nats://a:4222, nats://b:4222")
        monkeypatch.setenv("OMNINATS_TOKEN", "t0k3n")
        monkeypatch.setenv("OMNINATS_REQUEST_TIMEOUT", "2.5")
        monkeypatch.setenv("OMNINATS_MAX_RECONNECT_ATTEMPTS", "5")
        monkeypatch.setenv("OMNINATS_LOG_LEVEL", "debug")

        settings = Settings.from_env()
        conn = settings.connection()

        assert conn.servers == ["nats://a:4222", "nats://b:4222"]
        assert conn.token == "t0k3n"
        assert conn.max_reconnect_attempts == 5
        assert settings.request_timeout == 2.5
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize(
        "name, value",
        [
            ("OMNINATS_REQUEST_TIMEOUT", "soon"),
            ("OMNINATS_REQUEST_TIMEOUT", "0"),
            ("OMNINATS_MAX_RECONNECT_ATTEMPTS", "-1"),
            ("OMNINATS_LOG_LEVEL", "LOUD"),
            ("OMNINATS_SERVERS", " , "),
        ],
    )
    def test_invalid_env(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ConfigurationError):
            Settings.from_env()


class TestFromYaml:
    def test_named_connections(self, tmp_path):
        path = tmp_path / "omninats.yaml"
        path.write_text(
            "request_timeout: 1.5\n"
            "connections:\n"
            "  default:\n"
            "    servers: ['nats://localhost:4222']\n"
            "  audit:\n"
            "    servers: ['nats://audit:4222']\n"
            "    token: s3cr3t\n"
            "    connect_timeout: 4\n"
        )

        settings = Settings.from_yaml(path)

        assert settings.request_timeout == 1.5
        audit = settings.connection("audit")
        assert audit.name == "audit"
        assert audit.token == "s3cr3t"
        assert audit.connect_timeout == 4.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Settings.from_yaml(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("connections: [unclosed\n")

        with pytest.raises(ConfigurationError):
            Settings.from_yaml(path)

    def test_invalid_connection(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("connections:\n  default:\n    servers: 42\n")

        with pytest.raises(ConfigurationError, match="default"):
            Settings.from_yaml(path)

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert list(Settings.from_yaml(path).connections) == ["default"]


class TestValidate:
    def test_no_servers(self):
        settings = Settings(connections={"default": ConnectionSettings(servers=[])})
        with pytest.raises(ConfigurationError, match="no servers"):
            settings.validate()

    def test_user_without_password(self):
        settings = Settings(connections={"default": ConnectionSettings(user="bob")})
        with pytest.raises(ConfigurationError, match="password"):
            settings.validate()

    def test_bad_request_timeout(self):
        with pytest.raises(ConfigurationError):
            Settings(request_timeout=0).validate()


class TestFromDict:
    @pytest.mark.parametrize(
        "config, message",
        [
            ({"connections": ["nats://localhost:4222"]}, "connections"),
            ({"connections": {"default": ["nats://localhost:4222"]}}, "default"),
            ({"request_timeout": "soon"}, "request_timeout"),
            ({"request_timeout": [1]}, "request_timeout"),
            (["not", "a", "mapping"], "mapping"),
        ],
    )
    def test_malformed_input(self, config, message):
        with pytest.raises(ConfigurationError, match=message):
            Settings.from_dict(config)

    def test_empty_connection_uses_defaults(self):
        settings = Settings.from_dict({"connections": {"audit": None}})

        assert settings.connection("audit").name == "audit"
        assert settings.connection("audit").servers == ["nats://localhost:4222"]

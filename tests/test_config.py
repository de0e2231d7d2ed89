from pathlib import Path

import pytest

from vcli.config import VCLIEnvSettings
from vcli.core.config import InvalidationSettings, clamp_timeout
from vcli.core.endpoints import Endpoint
from vcli.core.protocol import CommandKind

ENV_VARS = (
    "VCLI_ENABLED",
    "VCLI_SERVERS",
    "VCLI_CONTROL_KEY",
    "VCLI_TIMEOUT",
    "VCLI_METHOD",
    "VCLI_DEBUG",
    "VCLI_LOG_FILE",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestClampTimeout:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(5, 5), (1, 1), (0, 1), (-3, 1), ("7", 7), ("nope", 2), (None, 2), (2.9, 2)],
    )
    def test_clamp(self, value, expected):
        assert clamp_timeout(value) == expected


class TestInvalidationSettings:
    def test_defaults(self):
        settings = InvalidationSettings()
        assert settings.enabled
        assert settings.endpoints == (Endpoint("127.0.0.1", 6082),)
        assert settings.control_key == ""
        assert settings.timeout == 2
        assert settings.command_kind is CommandKind.BAN
        assert not settings.debug
        assert settings.log_file is None

    def test_direct_construction_clamps_timeout(self):
        assert InvalidationSettings(timeout=0).timeout == 1

    def test_from_raw_normalizes_values(self):
        settings = InvalidationSettings.from_raw(
            enabled=1,
            servers="127.0.0.1:6082  bad-token 127.0.0.1:6082\t[::1]:6082",
            control_key=None,
            timeout="-4",
            method="purge",
            debug=0,
            log_file="/tmp/vcli.log",
        )
        assert settings.enabled is True
        assert settings.servers == "127.0.0.1:6082 [::1]:6082"
        assert settings.control_key == ""
        assert settings.timeout == 1
        assert settings.command_kind is CommandKind.PURGE
        assert settings.debug is False
        assert settings.log_file == Path("/tmp/vcli.log")

    def test_unknown_method_falls_back_to_ban(self):
        assert InvalidationSettings.from_raw(method="FLUSH").command_kind is CommandKind.BAN

    def test_settings_are_immutable(self):
        settings = InvalidationSettings()
        with pytest.raises(AttributeError):
            settings.timeout = 9  # type: ignore[misc]


class TestEnvSettings:
    def test_defaults_without_environment(self, clean_env):
        settings = VCLIEnvSettings().to_invalidation_settings()
        assert settings == InvalidationSettings()

    def test_reads_prefixed_environment(self, clean_env):
        clean_env.setenv("VCLI_SERVERS", "10.0.0.5:6082 10.0.0.6:6082")
        clean_env.setenv("VCLI_CONTROL_KEY", "s3cret")
        clean_env.setenv("VCLI_TIMEOUT", "0")
        clean_env.setenv("VCLI_METHOD", "PURGE")
        clean_env.setenv("VCLI_DEBUG", "true")

        settings = VCLIEnvSettings().to_invalidation_settings()

        assert settings.servers == "10.0.0.5:6082 10.0.0.6:6082"
        assert settings.control_key == "s3cret"
        assert settings.timeout == 1
        assert settings.command_kind is CommandKind.PURGE
        assert settings.debug is True

    @pytest.mark.parametrize(("raw", "expected"), [("abc", 2), ("", 2), ("-5", 1), ("9", 9)])
    def test_unparseable_timeout_falls_back(self, clean_env, raw, expected):
        clean_env.setenv("VCLI_TIMEOUT", raw)
        assert VCLIEnvSettings().timeout == expected
        assert VCLIEnvSettings().to_invalidation_settings().timeout == expected

    def test_reads_dotenv_file(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("VCLI_SERVERS=cache.internal:6082\nVCLI_ENABLED=false\n")
        settings = VCLIEnvSettings().to_invalidation_settings()
        assert settings.servers == "cache.internal:6082"
        assert settings.enabled is False

"""
Tests for populating dataclass instances from the environment.
"""

import logging

import pytest

from envstruct import (
    InvalidTargetError,
    MissingVariableError,
    Populator,
    PresencePolicy,
    UnsettableFieldError,
    populate,
)

from sample_configs import (
    AppConfig,
    ClusterConfig,
    DatabaseConfig,
    FeatureConfig,
    FrozenConfig,
    NotAConfig,
    OptionalGroupConfig,
    PrivateFieldConfig,
    RegionConfig,
    ReplicaConfig,
    ServerConfig,
)


class TestPermissive:
    """Missing or malformed variables keep the current value."""

    def test_all_set(self, env):
        env(PORT="8080", HOST="localhost")
        config = populate(ServerConfig())
        assert config == ServerConfig(port=8080, host="localhost")

    def test_partial(self, env):
        env(PORT="8080")
        config = populate(ServerConfig())
        assert config == ServerConfig(port=8080, host="")

    def test_keeps_existing_value(self, env):
        env(HOST="example.com")
        config = populate(ServerConfig(port=1234, host="localhost"))
        assert config == ServerConfig(port=1234, host="example.com")

    def test_invalid_value_keeps_default(self, env):
        env(PORT="invalid", HOST="localhost")
        config = populate(ServerConfig(port=5))
        assert config == ServerConfig(port=5, host="localhost")

    def test_returns_same_instance(self, clean_env):
        config = ServerConfig()
        assert populate(config) is config

    def test_empty_environment(self, clean_env):
        assert populate(FeatureConfig()) == FeatureConfig()


class TestStrict:
    """Missing variables stop the walk with MissingVariableError."""

    def test_all_set(self, env):
        env(PORT="8080", HOST="localhost")
        config = populate(ServerConfig(), PresencePolicy.STRICT)
        assert config == ServerConfig(port=8080, host="localhost")

    def test_cleared_environment(self, clean_env):
        config = ServerConfig()
        with pytest.raises(MissingVariableError) as exc_info:
            populate(config, PresencePolicy.STRICT)
        assert exc_info.value.key == "PORT"
        assert config == ServerConfig()

    def test_invalid_value(self, env):
        env(PORT="invalid", HOST="localhost")
        with pytest.raises(MissingVariableError) as exc_info:
            populate(ServerConfig(), PresencePolicy.STRICT)
        assert exc_info.value.key == "PORT"
        assert "PORT" in str(exc_info.value)

    def test_stops_at_first_missing(self, env):
        env(PORT="8080")
        config = ServerConfig()
        with pytest.raises(MissingVariableError) as exc_info:
            populate(config, PresencePolicy.STRICT)
        assert exc_info.value.key == "HOST"
        assert exc_info.value.field_path == "host"
        # earlier fields are not rolled back
        assert config.port == 8080

    def test_nested_field_path(self, env):
        env(PORT="9090", DSN="postgres://db")
        with pytest.raises(MissingVariableError) as exc_info:
            populate(AppConfig(), PresencePolicy.STRICT)
        assert exc_info.value.key == "POOL_SIZE"
        assert exc_info.value.field_path == "database.pool_size"

    def test_policy_from_string(self, clean_env):
        populator = Populator(policy="strict")
        assert populator.strict
        with pytest.raises(MissingVariableError):
            populator.populate(ServerConfig())

    def test_deterministic(self, clean_env):
        populator = Populator(PresencePolicy.STRICT)
        for _ in range(2):
            with pytest.raises(MissingVariableError):
                populator.populate(ServerConfig())


class TestNested:
    """Groups are populated through the nested instance."""

    def test_one_level(self, env):
        env(PORT="9090", DSN="postgres://localhost/app", POOL_SIZE="10")
        config = populate(AppConfig(), PresencePolicy.STRICT)
        assert config == AppConfig(
            port=9090,
            database=DatabaseConfig(dsn="postgres://localhost/app", pool_size=10),
        )

    def test_prefix_is_inert_by_default(self, env):
        env(PORT="9090", DSN="localhost", DB_DSN="ignored")
        config = populate(AppConfig())
        assert config.database.dsn == "localhost"

    def test_join_keys(self, env):
        env(PORT="9090", DSN="ignored", DB_DSN="localhost")
        config = populate(AppConfig(), join_keys=True)
        assert config.port == 9090
        assert config.database.dsn == "localhost"

    def test_join_keys_accumulates(self, env):
        env(EU_NAME="eu", EU_PRIMARY_DSN="primary", EU_REPLICA_HOST="replica", HOST="backup")
        config = populate(RegionConfig(), join_keys=True)
        assert config == RegionConfig(
            cluster=ClusterConfig(
                name="eu",
                primary=DatabaseConfig(dsn="primary"),
                replica=ReplicaConfig(host="replica"),
            ),
            backup=ReplicaConfig(host="backup"),
        )

    def test_custom_separator(self, env):
        env(DB__DSN="localhost")
        config = populate(AppConfig(), join_keys=True, separator="__")
        assert config.database.dsn == "localhost"

    def test_none_group_skipped(self, env):
        env(PORT="1", DSN="localhost")
        config = populate(OptionalGroupConfig(), PresencePolicy.STRICT)
        assert config == OptionalGroupConfig(port=1, database=None)

    def test_none_group_replaced(self, env):
        env(PORT="1", DSN="localhost", POOL_SIZE="2")
        config = populate(OptionalGroupConfig(database=DatabaseConfig()))
        assert config.database == DatabaseConfig(dsn="localhost", pool_size=2)


class TestConversions:
    """Type dispatch, widths and explicit skips."""

    def test_all_kinds(self, env):
        env(
            FEATURE_NAME="search",
            RETRIES="7",
            OFFSET="-128",
            FEATURE_PORT="65535",
            MAX_BYTES="255",
            ENABLED="T",
            RATIO="0.25",
            SCALE="0.1",
            TIMEOUT="2.5",
        )
        config = populate(FeatureConfig(), PresencePolicy.STRICT)
        assert config.name == "search"
        assert config.retries == 7
        assert config.offset == -128
        assert config.port == 65535
        assert config.max_bytes == 255
        assert config.enabled is True
        assert config.ratio == 0.25
        assert config.scale == pytest.approx(0.1)
        assert config.scale != 0.1
        assert config.timeout == 2.5

    def test_width_overflow_is_missing(self, env):
        env(OFFSET="128", MAX_BYTES="256")
        config = populate(FeatureConfig())
        assert config.offset == 0
        assert config.max_bytes == 1

    def test_width_overflow_strict(self, env):
        env(FEATURE_NAME="x", RETRIES="1", OFFSET="200")
        with pytest.raises(MissingVariableError) as exc_info:
            populate(FeatureConfig(), PresencePolicy.STRICT)
        assert exc_info.value.key == "OFFSET"

    def test_unsupported_and_unannotated_untouched(self, env):
        env(TAGS="a,b", notes="changed")
        config = populate(FeatureConfig())
        assert config.tags == []
        assert config.notes == "unannotated"


class TestUnsettable:
    """Private and frozen fields."""

    def test_private_skipped_permissive(self, env):
        env(NAME="svc", TOKEN="secret")
        config = populate(PrivateFieldConfig())
        assert config.name == "svc"
        assert config._token == "hidden"

    def test_private_strict(self, env):
        env(NAME="svc", TOKEN="secret")
        config = PrivateFieldConfig()
        with pytest.raises(UnsettableFieldError) as exc_info:
            populate(config, PresencePolicy.STRICT)
        assert exc_info.value.key == "TOKEN"
        assert exc_info.value.field_path == "_token"
        assert config.name == "svc"

    def test_frozen_permissive(self, env):
        env(PORT="8080")
        assert populate(FrozenConfig()) == FrozenConfig()

    def test_frozen_strict(self, env):
        env(PORT="8080")
        with pytest.raises(UnsettableFieldError):
            populate(FrozenConfig(), PresencePolicy.STRICT)


class TestInvalidTarget:
    """Only dataclass and pydantic model instances are accepted."""

    @pytest.mark.parametrize("target", [
        ServerConfig,
        NotAConfig(),
        {"PORT": "8080"},
        None,
        42,
    ])
    def test_rejected(self, target):
        with pytest.raises(InvalidTargetError):
            populate(target)

    def test_rejected_in_either_policy(self):
        with pytest.raises(InvalidTargetError):
            populate(ServerConfig, PresencePolicy.STRICT)


class TestExplicitEnviron:
    """A mapping can stand in for os.environ."""

    def test_mapping(self, clean_env):
        config = Populator(environ={"PORT": "1", "HOST": "h"}).populate(ServerConfig())
        assert config == ServerConfig(port=1, host="h")

    def test_reads_live_environment(self, env, monkeypatch):
        populator = Populator()
        env(PORT="1")
        assert populator.populate(ServerConfig()).port == 1
        monkeypatch.setenv("PORT", "2")
        assert populator.populate(ServerConfig()).port == 2


def test_strict_failure_logged(clean_env, caplog):
    with caplog.at_level(logging.INFO, logger="envstruct.populator"):
        with pytest.raises(MissingVariableError):
            populate(ServerConfig(), PresencePolicy.STRICT)
    assert "PORT" in caplog.text

"""
Property-based tests for configuration module.

Uses Hypothesis for property-based testing to verify correctness properties
defined in the design document.
"""

import json
import tempfile
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from page_auditor.cli import (
    DEFAULT_STORAGE_PATH,
    apply_env_overrides,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
)
from page_auditor.config import (
    DEFAULT_PROVIDER_CONFIGS,
    FetchConfig,
    LoggingConfig,
    PersistenceConfig,
    ProviderConfig,
    SystemConfig,
)
from page_auditor.exceptions import ConfigurationError


# Strategies for generating valid configuration objects

@st.composite
def provider_config_strategy(draw) -> ProviderConfig:
    """Generate valid ProviderConfig objects."""
    name = draw(st.text(
        alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz0123456789.-"),
        min_size=1,
        max_size=20,
    ))
    path = draw(st.sampled_from(["raw?url={url}", "?{url}", "v1/proxy?quest={url}"]))
    return ProviderConfig(name=name, url_template=f"https://{name}.example/{path}")


@st.composite
def fetch_config_strategy(draw) -> FetchConfig:
    """Generate valid FetchConfig objects."""
    return FetchConfig(
        providers=draw(st.lists(provider_config_strategy(), min_size=1, max_size=4)),
        timeout_ms=draw(st.integers(min_value=1, max_value=120000)),
        resource_timeout_ms=draw(st.integers(min_value=1, max_value=120000)),
        header_probe_timeout_ms=draw(st.integers(min_value=1, max_value=120000)),
    )


@st.composite
def persistence_config_strategy(draw) -> PersistenceConfig:
    """Generate valid PersistenceConfig objects."""
    file_name = draw(st.text(
        alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz_"),
        min_size=1,
        max_size=20,
    ))
    hmac_secret = draw(st.one_of(
        st.none(),
        st.text(alphabet=st.sampled_from("abcdef0123456789"), min_size=8, max_size=64),
    ))
    return PersistenceConfig(
        storage_file_path=Path("/tmp/page_auditor") / f"{file_name}.json",
        hmac_secret=hmac_secret,
    )


@st.composite
def logging_config_strategy(draw) -> LoggingConfig:
    """Generate valid LoggingConfig objects."""
    return LoggingConfig(
        level=draw(st.sampled_from(["debug", "info", "warn", "error"])),
        output_format=draw(st.sampled_from(["json", "text", "both"])),
    )


@st.composite
def system_config_strategy(draw) -> SystemConfig:
    """Generate valid SystemConfig objects."""
    return SystemConfig(
        fetch=draw(fetch_config_strategy()),
        persistence=draw(persistence_config_strategy()),
        logging=draw(logging_config_strategy()),
        background_checks=draw(st.booleans()),
    )


class TestConfigurationRoundTripProperty:
    """
    Property-based tests for configuration round-trip.

    **Property 1: Configuration Round-Trip**
    """

    @given(config=system_config_strategy())
    @settings(max_examples=100)
    def test_config_round_trip_preserves_data(self, config: SystemConfig) -> None:
        """
        Property 1: Configuration Round-Trip

        *For any* valid SystemConfig, saving it to a file and loading it back
        SHALL produce an equal configuration.
        """
        with tempfile.TemporaryDirectory() as tmp_dir:
            config_path = Path(tmp_dir) / "nested" / "config.json"

            assert save_config_to_file(config, config_path)
            loaded = load_config_from_file(config_path)

        assert loaded == config

    @given(config=system_config_strategy())
    @settings(max_examples=100)
    def test_config_serialization_produces_valid_json(self, config: SystemConfig) -> None:
        """
        Property 2: Serialized configuration is plain JSON.

        *For any* valid SystemConfig, the saved file SHALL be a JSON object
        with fetch, persistence and logging sections.
        """
        with tempfile.TemporaryDirectory() as tmp_dir:
            config_path = Path(tmp_dir) / "config.json"
            save_config_to_file(config, config_path)
            data = json.loads(config_path.read_text(encoding="utf-8"))

        assert set(data) == {"fetch", "persistence", "logging", "background_checks"}
        assert len(data["fetch"]["providers"]) == len(config.fetch.providers)
        assert data["persistence"]["storage_file_path"] == str(config.persistence.storage_file_path)


class TestEnvironmentOverridesProperty:
    """
    Property-based tests for environment overrides.

    **Property 3: Environment variables take precedence over file values**
    """

    @given(
        config=system_config_strategy(),
        timeout_ms=st.integers(min_value=1, max_value=120000),
        background=st.booleans(),
    )
    @settings(max_examples=100)
    def test_overrides_replace_values(
        self,
        config: SystemConfig,
        timeout_ms: int,
        background: bool,
    ) -> None:
        """
        Property 3: Environment overrides.

        *For any* configuration, PAGE_AUDITOR_* variables SHALL replace the
        matching values and leave the rest unchanged.
        """
        environ = {
            "PAGE_AUDITOR_FETCH_TIMEOUT_MS": str(timeout_ms),
            "PAGE_AUDITOR_BACKGROUND_CHECKS": "true" if background else "off",
            "PAGE_AUDITOR_LOG_LEVEL": "ERROR",
        }

        result = apply_env_overrides(config, environ)

        assert result.fetch.timeout_ms == timeout_ms
        assert result.background_checks is background
        assert result.logging.level == "error"
        assert result.fetch.providers == config.fetch.providers
        assert result.fetch.resource_timeout_ms == config.fetch.resource_timeout_ms
        assert result.persistence == config.persistence

    @given(config=system_config_strategy())
    @settings(max_examples=100)
    def test_empty_environment_is_identity(self, config: SystemConfig) -> None:
        """
        Property 4: No overrides.

        *For any* configuration, an empty environment SHALL leave it unchanged.
        """
        assert apply_env_overrides(config, {}) == config


class TestConfigFiles:
    """Example-based tests for loading configuration files."""

    def test_default_config(self) -> None:
        config = create_default_config()

        assert config.fetch.providers == DEFAULT_PROVIDER_CONFIGS
        assert config.fetch.timeout_ms == 15000
        assert config.persistence.storage_file_path == DEFAULT_STORAGE_PATH
        assert config.logging.level == "warn"
        assert config.background_checks is True

    def test_missing_file_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            assert load_config_from_file(Path(tmp_dir) / "absent.json") is None

    def test_malformed_json_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            config_path = Path(tmp_dir) / "config.json"
            config_path.write_text("{not json", encoding="utf-8")

            with pytest.raises(ConfigurationError) as exc_info:
                load_config_from_file(config_path)

        assert exc_info.value.code == "unreadable_config"

    def test_invalid_structure_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            config_path = Path(tmp_dir) / "config.json"
            config_path.write_text(
                json.dumps({"fetch": {"providers": [{"name": "broken"}]}}),
                encoding="utf-8",
            )

            with pytest.raises(ConfigurationError) as exc_info:
                load_config_from_file(config_path)

        assert exc_info.value.code == "invalid_config"

    def test_partial_file_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            config_path = Path(tmp_dir) / "config.json"
            config_path.write_text(json.dumps({"logging": {"level": "debug"}}), encoding="utf-8")

            config = load_config_from_file(config_path)

        assert config.logging.level == "debug"
        assert config.fetch.providers == DEFAULT_PROVIDER_CONFIGS
        assert config.persistence.storage_file_path == DEFAULT_STORAGE_PATH

    def test_invalid_timeout_env_is_ignored(self) -> None:
        config = create_default_config()

        result = apply_env_overrides(config, {"PAGE_AUDITOR_FETCH_TIMEOUT_MS": "soon"})

        assert result.fetch.timeout_ms == config.fetch.timeout_ms

    def test_storage_file_env(self) -> None:
        config = create_default_config()

        result = apply_env_overrides(config, {"PAGE_AUDITOR_STORAGE_FILE": "/tmp/other.json"})

        assert result.persistence.storage_file_path == Path("/tmp/other.json")

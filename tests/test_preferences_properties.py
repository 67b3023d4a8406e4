"""
Property-based tests for user preferences.

Uses Hypothesis for property-based testing to verify correctness properties
defined in the design document.
"""

import json

from hypothesis import given, settings
from hypothesis import strategies as st

from page_auditor.preferences import (
    LEGACY_PREFERENCES_KEY,
    OUTPUT_FORMATS,
    PREFERENCES_KEY,
    Preferences,
    PreferencesStore,
)
from page_auditor.storage import MemoryKeyValueStore


@st.composite
def preferences_strategy(draw) -> Preferences:
    """Generate valid Preferences."""
    return Preferences(
        fetch_timeout_ms=draw(st.integers(min_value=1, max_value=120000)),
        output_format=draw(st.sampled_from(OUTPUT_FORMATS)),
        background_checks=draw(st.booleans()),
    )


class TestPreferencesMigrationProperty:
    """
    Property-based tests for preference migration.

    **Property 1: v1 documents and legacy keys load as v2 preferences**
    """

    @given(timeout=st.integers(min_value=1, max_value=120000))
    @settings(max_examples=100)
    def test_v1_document_migrates(self, timeout: int) -> None:
        """
        Property 1: v1 migration.

        *For any* valid v1 document, load() SHALL return preferences with the
        stored timeout and default values for the fields added in v2, and the
        key SHALL be rewritten as v2.
        """
        backend = MemoryKeyValueStore({PREFERENCES_KEY: json.dumps({"schemaVersion": 1, "timeout": timeout})})

        preferences = PreferencesStore(backend).load()

        assert preferences == Preferences(fetch_timeout_ms=timeout)
        assert json.loads(backend.get(PREFERENCES_KEY))["schemaVersion"] == 2

    @given(timeout=st.integers(min_value=1, max_value=120000))
    @settings(max_examples=100)
    def test_unversioned_legacy_key_migrates(self, timeout: int) -> None:
        """
        Property 2: Legacy key upgrade.

        *For any* unversioned document under the legacy key, load() SHALL
        treat it as v1 and SHALL write the upgraded document to the new key.
        """
        backend = MemoryKeyValueStore({LEGACY_PREFERENCES_KEY: json.dumps({"timeout": timeout})})

        preferences = PreferencesStore(backend).load()

        assert preferences.fetch_timeout_ms == timeout
        assert json.loads(backend.get(PREFERENCES_KEY)) == Preferences(fetch_timeout_ms=timeout).to_dict()

    @given(preferences=preferences_strategy())
    @settings(max_examples=100)
    def test_save_then_load(self, preferences: Preferences) -> None:
        """
        Property 3: Saved preferences are loaded unchanged.

        *For any* valid preferences, load() after save() SHALL return an
        equal value.
        """
        store = PreferencesStore(MemoryKeyValueStore())
        assert store.save(preferences) is True
        assert store.load() == preferences


class TestPreferencesStore:
    """Example-based tests for PreferencesStore."""

    def test_defaults_when_nothing_stored(self) -> None:
        store = PreferencesStore(MemoryKeyValueStore())
        custom = Preferences(fetch_timeout_ms=5000)

        assert store.load() == Preferences()
        assert store.load(custom) == custom

    def test_invalid_documents_fall_back_to_defaults(self) -> None:
        for stored in (
            {"schemaVersion": 1, "timeout": -5},
            {"schemaVersion": 2, "fetchTimeoutMs": 1000, "outputFormat": "xml", "backgroundChecks": True},
            {"schemaVersion": 2, "fetchTimeoutMs": 1000, "outputFormat": "json", "backgroundChecks": "yes"},
            {"schemaVersion": 7},
        ):
            backend = MemoryKeyValueStore({PREFERENCES_KEY: json.dumps(stored)})
            assert PreferencesStore(backend).load() == Preferences()

    def test_save_rejects_unknown_format(self) -> None:
        backend = MemoryKeyValueStore()
        store = PreferencesStore(backend)

        assert store.save(Preferences(output_format="yaml")) is False
        assert backend.get(PREFERENCES_KEY) is None

    def test_reset(self) -> None:
        store = PreferencesStore(MemoryKeyValueStore())
        store.save(Preferences(fetch_timeout_ms=3000, output_format="json"))
        store.reset()
        assert store.load() == Preferences()

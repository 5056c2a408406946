"""Tests for flag stores."""

from __future__ import annotations

from featurespec.flags import ChainFlagStore, EnvFlagStore, FlagStore, MappingFlagStore, is_defined


class TestMappingFlagStore:
    def test_values_are_strings(self):
        store = MappingFlagStore({"A": 1, "B": None, "C": True})
        assert store.get("A") == "1"
        assert store.get("B") == ""
        assert store.get("C") == "True"
        assert store.get("D") is None

    def test_contains(self):
        assert "A" in MappingFlagStore({"A": ""})
        assert "B" not in MappingFlagStore({"A": ""})

    def test_is_a_flag_store(self):
        assert isinstance(MappingFlagStore(), FlagStore)


class TestEnvFlagStore:
    def test_reads_given_environ(self):
        store = EnvFlagStore({"FEATURE_X": "on"}, prefix="FEATURE_")
        assert store.get("X") == "on"
        assert store.get("FEATURE_X") is None

    def test_defaults_to_process_environment(self, monkeypatch):
        monkeypatch.setenv("FS_TEST_FLAG", "1")
        assert EnvFlagStore().get("FS_TEST_FLAG") == "1"


class TestChainFlagStore:
    def test_first_store_wins(self):
        chain = ChainFlagStore(MappingFlagStore({"A": "cli"}), MappingFlagStore({"A": "cfg", "B": "cfg"}))
        assert chain.get("A") == "cli"
        assert chain.get("B") == "cfg"
        assert chain.get("C") is None

    def test_empty_value_shadows_later_stores(self):
        chain = ChainFlagStore(MappingFlagStore({"A": None}), MappingFlagStore({"A": "x"}))
        assert chain.get("A") == ""


class TestIsDefined:
    def test_non_empty_only(self):
        store = MappingFlagStore({"A": "1", "B": ""})
        assert is_defined(store, "A")
        assert not is_defined(store, "B")
        assert not is_defined(store, "C")

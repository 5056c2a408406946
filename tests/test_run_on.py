"""Tests for @runOnEnv / @skipOnEnv scenario tags."""

from __future__ import annotations

import pytest

from featurespec.directives.run_on import resolve_run_on, should_ignore
from featurespec.errors import MalformedTag
from featurespec.flags import MappingFlagStore

DOCUMENT = """\
Feature: Deploy

  @smoke @runOnEnv(CLOUD)
  Scenario: Cloud only
    Given a cloud

  @skipOnEnv(LOCAL)
  Scenario: Not on local
    Given a remote host

  Scenario: Always
    Given anything"""


class TestShouldIgnore:
    def test_run_on_env_with_all_flags_defined(self):
        flags = MappingFlagStore({"A": "1", "B": "x"})
        assert not should_ignore(["@runOnEnv(A, B)"], flags)

    def test_run_on_env_with_a_missing_flag(self):
        assert should_ignore(["@runOnEnv(A,B)"], MappingFlagStore({"A": "1"}))

    def test_empty_value_is_not_defined(self):
        assert should_ignore(["@runOnEnv(A)"], MappingFlagStore({"A": ""}))

    def test_skip_on_env_needs_every_flag(self):
        flags = MappingFlagStore({"A": "1"})
        assert not should_ignore(["@skipOnEnv(A,B)"], flags)
        assert should_ignore(["@skipOnEnv(A)"], flags)

    def test_any_matching_skip_tag_skips(self):
        flags = MappingFlagStore({"B": "1"})
        assert should_ignore(["@skipOnEnv(A)", "@skipOnEnv(B)"], flags)

    def test_tag_name_is_case_insensitive(self):
        assert should_ignore(["@RUNONENV(A)"], MappingFlagStore())

    def test_empty_argument_list_is_malformed(self):
        with pytest.raises(MalformedTag):
            should_ignore(["@smoke", "@runOnEnv()"], MappingFlagStore(), first_line_no=4)

    def test_unrelated_tags_are_ignored(self):
        assert not should_ignore(["@smoke @wip"], MappingFlagStore())


class TestResolveRunOn:
    def test_ignore_tag_appended_to_last_tag_line(self):
        out = resolve_run_on(DOCUMENT.split("\n"), MappingFlagStore({"LOCAL": "1"}))
        assert out[2] == "  @smoke @runOnEnv(CLOUD) @ignore"
        assert out[6] == "  @skipOnEnv(LOCAL) @ignore"
        assert out[10] == "  Scenario: Always"

    def test_scenarios_that_run_are_untouched(self):
        lines = DOCUMENT.split("\n")
        out = resolve_run_on(lines, MappingFlagStore({"CLOUD": "aws"}))
        assert out == lines

    def test_custom_ignore_tag_and_callback(self):
        ignored = []
        out = resolve_run_on(
            DOCUMENT.split("\n"),
            MappingFlagStore({"CLOUD": "aws", "LOCAL": "1"}),
            ignore_tag="@skip",
            on_ignored=ignored.append,
        )
        assert out[6].endswith("@skip")
        assert ignored == ["Not on local"]

    def test_rerun_does_not_duplicate_the_tag(self):
        flags = MappingFlagStore()
        once = resolve_run_on(DOCUMENT.split("\n"), flags)
        twice = resolve_run_on(once, flags)
        assert twice == once
        assert once[2].count("@ignore") == 1

    def test_tags_not_followed_by_scenario(self):
        lines = ["@runOnEnv(X)", "Feature: F"]
        assert resolve_run_on(lines, MappingFlagStore()) == lines

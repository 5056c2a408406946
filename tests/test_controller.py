"""Tests for featurespec.controller — the full preprocessing pipeline."""

from __future__ import annotations

from pathlib import Path

import pytest

import featurespec
from featurespec.controller import FeaturePreprocessor, PreprocessorConfig, PreprocessResult, preprocess
from featurespec.errors import FeatureFileNotFound
from featurespec.flags import MappingFlagStore

COMMON_FEATURE = """\
Feature: Common
  Scenario: Log in
    Given I open the login page
    When I log in as admin
"""

SHOP_FEATURE = """\
@include(feature:common.feature, scenario:Log in)
Feature: Shop

  @background(SETUP)
  Background:
    Given a clean database
  @/background

  @runOnEnv(CLOUD)
  Scenario: Buy
    When I buy
"""

SHOP_WITH_SETUP = """\
Feature: Shop

  Background:
    Given I open the login page
    When I log in as admin
    Given a clean database

  @runOnEnv(CLOUD) @ignore
  Scenario: Buy
    When I buy
"""

SHOP_WITHOUT_SETUP = """\
Feature: Shop
  Background:
    Given I open the login page
    When I log in as admin


  @runOnEnv(CLOUD) @ignore
  Scenario: Buy
    When I buy
"""


@pytest.fixture
def shop(tmp_path: Path) -> Path:
    (tmp_path / "common.feature").write_text(COMMON_FEATURE, encoding="utf-8")
    path = tmp_path / "shop.feature"
    path.write_text(SHOP_FEATURE, encoding="utf-8")
    return path


def _preprocessor(**flags) -> FeaturePreprocessor:
    return FeaturePreprocessor(flags=MappingFlagStore(flags))


class TestPipeline:
    def test_kept_background_receives_feature_includes(self, shop):
        result = _preprocessor(SETUP="1").preprocess_file(shop)
        assert result.text == SHOP_WITH_SETUP

    def test_dropped_background_is_synthesized_again(self, shop):
        result = _preprocessor().preprocess_file(shop)
        assert result.text == SHOP_WITHOUT_SETUP

    def test_output_is_stable_when_run_twice(self, shop):
        pre = _preprocessor(SETUP="1")
        once = pre.preprocess_file(shop).text
        twice = pre.preprocess(once, source_path=shop).text
        assert twice == once

    def test_plain_document_round_trips(self):
        text = "Feature: F\r\n\n  Scenario: S\n    Given x\n\n"
        result = _preprocessor().preprocess(text)
        assert result.text == text
        assert not result.changed

    def test_passes_can_be_disabled(self, shop):
        config = PreprocessorConfig(resolve_run_on=False, resolve_includes=False)
        result = FeaturePreprocessor(config, flags=MappingFlagStore()).preprocess_file(shop)
        assert "@ignore" not in result.text
        assert result.text.startswith("@include(")

    def test_custom_ignore_tag(self, shop):
        config = PreprocessorConfig(ignore_tag="@skip")
        result = FeaturePreprocessor(config, flags=MappingFlagStore()).preprocess_file(shop)
        assert "  @runOnEnv(CLOUD) @skip" in result.text

    def test_environment_is_the_default_flag_store(self, shop, monkeypatch):
        monkeypatch.setenv("SETUP", "1")
        monkeypatch.delenv("CLOUD", raising=False)
        assert FeaturePreprocessor().preprocess_file(shop).text == SHOP_WITH_SETUP


class TestResult:
    def test_records_and_events(self, shop):
        events = []
        result = _preprocessor(SETUP="1").preprocess_file(
            shop, on_event=lambda event, data: events.append(event),
        )
        assert isinstance(result, PreprocessResult)
        assert result.changed
        assert result.backgrounds == [{"flag": "SETUP", "kept": True}]
        assert result.includes == [
            {"feature": "common.feature", "scenario": "Log in", "outline": False, "lines": 2},
        ]
        assert result.ignored == ["Buy"]
        assert events == ["background", "include", "ignore", "done"]

    def test_to_dict(self, shop):
        data = _preprocessor().preprocess_file(shop).to_dict()
        assert data["source_path"] == str(shop)
        assert set(data) == {"source_path", "text", "backgrounds", "includes", "ignored"}


class TestBaseDir:
    def test_text_without_source_uses_base_dir(self, shop):
        text = shop.read_text(encoding="utf-8")
        result = _preprocessor(SETUP="1").preprocess(text, base_dir=shop.parent)
        assert result.text == SHOP_WITH_SETUP

    def test_text_without_source_defaults_to_cwd(self, shop, monkeypatch):
        monkeypatch.chdir(shop.parent)
        text = shop.read_text(encoding="utf-8")
        assert _preprocessor(SETUP="1").preprocess(text).text == SHOP_WITH_SETUP

    def test_errors_propagate(self, tmp_path):
        text = "@include(feature:nowhere.feature, scenario:X)\nFeature: F\n"
        with pytest.raises(FeatureFileNotFound):
            _preprocessor().preprocess(text, base_dir=tmp_path)


class TestModuleFunction:
    def test_preprocess_with_dict_flags(self, shop):
        text = shop.read_text(encoding="utf-8")
        assert preprocess(text, source_path=str(shop), flags={"SETUP": "1"}) == SHOP_WITH_SETUP

    def test_package_exports(self):
        assert featurespec.preprocess is preprocess
        assert featurespec.__version__


class TestRunOnOnly:
    def test_first_call_appends_ignore_tag_then_stable(self):
        text = "Feature: F\n  @runOnEnv(X)\n  Scenario: S\n"
        once = preprocess(text, flags={})
        assert once == "Feature: F\n  @runOnEnv(X) @ignore\n  Scenario: S\n"
        assert preprocess(once, flags={}) == once

    def test_run_on_pass_disabled_leaves_document_alone(self):
        text = "Feature: F\n  @runOnEnv(X)\n  Scenario: S\n"
        config = PreprocessorConfig(resolve_run_on=False)
        assert FeaturePreprocessor(config, flags=MappingFlagStore()).preprocess(text).text == text

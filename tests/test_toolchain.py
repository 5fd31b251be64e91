"""Tests for Xcode version handling and the index store layout table."""

from __future__ import annotations

import os

import pytest

from conftest import FakeRunner
from core import toolchain
from core.process import ProcessResult


def test_parse_version():
    assert toolchain.parse_version("14") == (14, 0, 0)
    assert toolchain.parse_version("13.4.1") == (13, 4, 1)
    assert toolchain.parse_version("Xcode 15.0.1") == (15, 0, 1)


def test_parse_version_ignores_trailing_text():
    assert toolchain.parse_version("15.0 beta 3") == (15, 0, 0)
    assert toolchain.parse_version("14.3.1 (14E300c)") == (14, 3, 1)


def test_parse_version_rejects_garbage():
    with pytest.raises(ValueError):
        toolchain.parse_version("latest")


def test_at_least():
    assert toolchain.at_least((14, 0, 0), "14.0.0")
    assert not toolchain.at_least((13, 4, 1), "14.0.0")
    assert toolchain.at_least(None, "14.0.0")


def test_detect_xcode_version():
    fake = FakeRunner({"-version": ProcessResult(0, "Xcode 14.3.1\nBuild version 14E300c\n", "")})
    assert toolchain.detect_xcode_version(fake) == (14, 3, 1)


def test_detect_xcode_version_unavailable():
    assert toolchain.detect_xcode_version(FakeRunner()) is None


def test_detect_xcode_version_unexpected_output():
    fake = FakeRunner({"-version": ProcessResult(0, "something else", "")})
    assert toolchain.detect_xcode_version(fake) is None


def test_index_store_path_layouts():
    assert toolchain.index_store_path("/dd", (13, 0, 0)) == os.path.join("/dd", "Index", "DataStore")
    assert toolchain.index_store_path("/dd", (14, 0, 0)) == os.path.join("/dd", "Index.noindex", "DataStore")


def test_threshold_can_be_overridden(monkeypatch):
    monkeypatch.setattr(toolchain, "XCODE_14", "15.0.0")
    assert toolchain.index_store_layout((14, 2, 0)) == ("Index", "DataStore")


def test_register_layout_first(monkeypatch):
    monkeypatch.setattr(toolchain, "INDEX_STORE_LAYOUTS", list(toolchain.INDEX_STORE_LAYOUTS))
    toolchain.register_layout(lambda v: toolchain.at_least(v, "99.0"), "Index.v99", "Store", first=True)
    assert toolchain.index_store_layout((99, 1, 0)) == ("Index.v99", "Store")
    assert toolchain.index_store_layout((14, 0, 0)) == ("Index.noindex", "DataStore")


def test_resolve_xcode_version_prefers_configured():
    fake = FakeRunner()
    assert toolchain.resolve_xcode_version("13.1", fake) == (13, 1, 0)
    assert fake.calls == []

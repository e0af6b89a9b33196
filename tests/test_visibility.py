"""
Tests for the region-gated visibility rules.
"""

from __future__ import annotations

import pytest

from projects_api.domain.models import VisibilityDecision
from projects_api.domain.visibility import evaluate, is_exposed, needs_country, region_gate


COUNTRIES = ["BR", "DE", "FR", "US", None]
CODES = ["1", "2", "3", "", None, 2]


def _record(code=None, **extra):
    record = {"packageName": "pkg", **extra}
    if code is not None:
        record["code"] = code
    return record


# ── Region gate ──────────────────────────────────────────────────────


class TestRegionGate:
    def test_absent_ip_defaults_to_brazil(self):
        assert region_gate({"code": "2"}) == "BR"

    def test_empty_ip_is_ungated(self):
        assert region_gate({"ip": ""}) is None

    def test_country_ip(self):
        assert region_gate({"ip": "FR"}) == "FR"

    def test_needs_country(self):
        assert needs_country({"code": "2"})
        assert needs_country({"ip": "FR"})
        assert not needs_country({"ip": ""})
        assert not needs_country({"ip": None})


# ── Decision table ───────────────────────────────────────────────────


class TestDefaultGate:
    def test_brazil_with_visible_code_is_exposed(self):
        assert evaluate(_record("2"), "BR") is VisibilityDecision.EXPOSED

    def test_brazil_with_hidden_code(self):
        assert evaluate(_record("1"), "BR") is VisibilityDecision.HIDDEN_CODE

    @pytest.mark.parametrize("country", ["DE", "US", None])
    def test_other_countries_are_denied(self, country):
        assert evaluate(_record("2"), country) is VisibilityDecision.REGION_MISMATCH

    @pytest.mark.parametrize("country", COUNTRIES)
    def test_record_without_code_or_ip_never_exposed(self, country):
        assert not is_exposed({"packageName": "pkg"}, country)


class TestUngated:
    @pytest.mark.parametrize("country", COUNTRIES)
    def test_visible_code_exposed_everywhere(self, country):
        assert is_exposed(_record("2", ip=""), country)

    @pytest.mark.parametrize("country", COUNTRIES)
    def test_hidden_code_never_exposed(self, country):
        assert evaluate(_record("1", ip=""), country) is VisibilityDecision.HIDDEN_CODE


class TestCountryGate:
    def test_matching_country_with_visible_code(self):
        assert is_exposed(_record("2", ip="FR"), "FR")

    def test_matching_country_with_hidden_code(self):
        assert evaluate(_record("1", ip="FR"), "FR") is VisibilityDecision.HIDDEN_CODE

    @pytest.mark.parametrize("country", ["DE", "BR", "fr", None])
    def test_other_countries_are_denied(self, country):
        assert evaluate(_record("2", ip="FR"), country) is VisibilityDecision.REGION_MISMATCH

    def test_non_string_ip_denies_everyone(self):
        for country in COUNTRIES:
            assert not is_exposed(_record("2", ip=None), country)


class TestProperties:
    @pytest.mark.parametrize("code", [c for c in CODES if c != "2"])
    @pytest.mark.parametrize("ip", [None, "", "BR", "FR"])
    @pytest.mark.parametrize("country", COUNTRIES)
    def test_hidden_code_never_exposed(self, code, ip, country):
        record = _record(code) if ip is None else _record(code, ip=ip)
        assert not is_exposed(record, country)

    def test_only_string_two_is_visible(self):
        assert not is_exposed(_record(2, ip=""), "BR")
        assert is_exposed(_record("2", ip=""), "BR")

    def test_evaluation_does_not_mutate_record(self):
        record = _record("2")
        evaluate(record, "BR")
        assert record == {"packageName": "pkg", "code": "2"}

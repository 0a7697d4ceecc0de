"""Tests for the ModuleResolver use case."""

import logging

import pytest

from src.lmtoggle.instances.domain.entities import AppliedModule, ById, ByName
from src.lmtoggle.instances.use_cases.resolve_modules import ModuleResolver


@pytest.fixture
def applied_modules():
    return [
        AppliedModule(id=10, name="Ping", instance_count=1),
        AppliedModule(id=11, name="snmp64_if-", instance_count=48),
        AppliedModule(id=12, name="HostStatus", instance_count=0),
        AppliedModule(id=13, name="snmp64_if-", instance_count=2),
    ]


@pytest.fixture
def resolver():
    return ModuleResolver()


class TestModuleResolver:
    """Tests for selector matching."""

    def test_match_by_name(self, resolver, applied_modules):
        result = resolver.resolve(applied_modules, [ByName("Ping")])
        assert [m.id for m in result.matches] == [10]
        assert result.missed == []

    def test_match_by_id(self, resolver, applied_modules):
        result = resolver.resolve(applied_modules, [ById(12)])
        assert [m.id for m in result.matches] == [12]

    def test_name_is_exact(self, resolver, applied_modules):
        result = resolver.resolve(applied_modules, [ByName("ping")])
        assert result.found_count == 0

    def test_unknown_name_is_not_an_error(self, resolver, applied_modules, caplog):
        with caplog.at_level(logging.INFO):
            result = resolver.resolve(applied_modules, [ByName("NoSuchModule")])

        assert result.found_count == 0
        assert result.missed == [ByName("NoSuchModule")]
        assert "NoSuchModule" in caplog.text

    def test_duplicate_names_all_selected(self, resolver, applied_modules):
        result = resolver.resolve(applied_modules, [ByName("snmp64_if-")])
        assert [m.id for m in result.matches] == [11, 13]

    def test_name_and_id_deduplicated(self, resolver, applied_modules):
        result = resolver.resolve(applied_modules, [ById(10), ByName("Ping")])
        assert [m.id for m in result.matches] == [10]

    def test_name_pass_before_id_pass(self, resolver, applied_modules):
        result = resolver.resolve(applied_modules, [ById(12), ByName("Ping")])
        assert [m.id for m in result.matches] == [10, 12]

    def test_mixed_hits_and_misses(self, resolver, applied_modules):
        result = resolver.resolve(applied_modules, [ByName("Ping"), ById(999)])
        assert result.found_count == 1
        assert result.missed == [ById(999)]

    def test_no_instances_logged(self, resolver, applied_modules, caplog):
        with caplog.at_level(logging.INFO):
            resolver.resolve(applied_modules, [ById(12)])
        assert "with no instances" in caplog.text

    def test_empty_device(self, resolver):
        assert resolver.resolve([], [ByName("Ping")]).found_count == 0

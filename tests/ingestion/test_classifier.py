"""Tests for response classification."""

import pytest

from guildexport.ingestion.catalog import DATASET_CATALOG, DatasetDescriptor
from guildexport.ingestion.classifier import classify, find_by_schema, is_group_identifier
from guildexport.ingestion.schema import ObjectShape, TypeTag


@pytest.mark.parametrize("identifier", ["group_0_body", "group_12_body", "body"])
def test_group_identifiers(identifier):
    assert is_group_identifier(identifier) is True


@pytest.mark.parametrize("identifier", ["clanGetInfo", "bodyguard", "", None, 5])
def test_named_identifiers(identifier):
    assert is_group_identifier(identifier) is False


def test_named_lookup_ignores_payload():
    info = classify("clanGetInfo", {"unexpected": True})
    assert info.id == "clanGetInfo"


def test_unknown_name_is_a_miss(payloads):
    # Unnamed datasets are never looked up by name
    assert classify("guildStats", payloads["guildStats"]) is None
    assert classify("userGetInfo", {}) is None


def test_group_payload_matched_by_schema(payloads):
    assert classify("group_3_body", payloads["guildStats"]).id == "guildStats"
    assert classify("body", payloads["clanWarLeaderboard"]).id == "clanWarLeaderboard"


def test_group_payload_without_match():
    assert classify("group_1_body", {"something": "else"}) is None
    assert classify("group_1_body", None) is None
    assert classify("group_1_body", "text") is None


def test_non_string_identifier():
    assert classify(None, {}) is None


def test_first_matching_entry_wins():
    general = DatasetDescriptor("general", "General", "", False, False, ObjectShape({"a": TypeTag.NUMBER}))
    specific = DatasetDescriptor(
        "specific", "Specific", "", False, False, ObjectShape({"a": TypeTag.NUMBER, "b": TypeTag.STRING})
    )
    payload = {"a": 1, "b": "x"}

    assert find_by_schema(payload, [specific, general]).id == "specific"
    assert find_by_schema(payload, [general, specific]).id == "general"


def test_default_catalog_order(payloads):
    assert find_by_schema(payloads["clanRaidBossLog"], DATASET_CATALOG).id == "clanRaidBossLog"
    assert find_by_schema(payloads["clanRaidMinionLog"], DATASET_CATALOG).id == "clanRaidMinionLog"

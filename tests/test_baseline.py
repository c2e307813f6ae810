"""Tests for the baseline provider catalog."""

from __future__ import annotations

import dataclasses

import pytest

from azure_provider_report.core.baseline import DEFAULT_BASELINE_CATALOG, BaselineCatalog


def test_default_catalog_lists() -> None:
    assert DEFAULT_BASELINE_CATALOG.is_auto_registered("Microsoft.Authorization")
    assert DEFAULT_BASELINE_CATALOG.is_auto_registered("microsoft.support")
    assert DEFAULT_BASELINE_CATALOG.is_deprecated("Microsoft.ClassicCompute")
    assert "Microsoft.KeyVault" in DEFAULT_BASELINE_CATALOG.required
    assert DEFAULT_BASELINE_CATALOG.tier_names[0] == "Platform Management"


def test_network_sits_in_several_tiers() -> None:
    tiers = DEFAULT_BASELINE_CATALOG.tiers_for("Microsoft.Network")
    assert "Platform Connectivity" in tiers
    assert "Landing Zone Public" in tiers


def test_catalog_is_immutable() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_BASELINE_CATALOG.required = ()  # type: ignore[misc]


def test_overrides_replace_only_given_lists() -> None:
    catalog = DEFAULT_BASELINE_CATALOG.with_overrides({
        "required": ["Microsoft.Network", " "],
        "tiers": {"Sandbox": ["Microsoft.Web"]},
    })

    assert catalog.required == ("Microsoft.Network",)
    assert catalog.tiers == (("Sandbox", ("Microsoft.Web",)),)
    assert catalog.auto_registered == DEFAULT_BASELINE_CATALOG.auto_registered
    assert DEFAULT_BASELINE_CATALOG.required != catalog.required


def test_empty_overrides_return_same_catalog() -> None:
    catalog = BaselineCatalog()
    assert catalog.with_overrides({}) is catalog
    assert catalog.with_overrides(None) is catalog


@pytest.mark.parametrize("overrides", [
    {"unknown": []},
    {"required": "Microsoft.Network"},
    {"tiers": ["Microsoft.Network"]},
])
def test_invalid_overrides(overrides) -> None:
    with pytest.raises(ValueError):
        DEFAULT_BASELINE_CATALOG.with_overrides(overrides)


def test_to_dict_round_trips_through_overrides() -> None:
    catalog = BaselineCatalog().with_overrides(DEFAULT_BASELINE_CATALOG.to_dict())
    assert catalog == DEFAULT_BASELINE_CATALOG

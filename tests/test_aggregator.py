"""Tests for the provider aggregation and classification engine."""

from __future__ import annotations

import pytest

from azure_provider_report.core.aggregator import ProviderAggregator, usage_band_for
from azure_provider_report.core.models import (
    ProviderTag,
    RegistrationState,
    UsageBand,
)

from conftest import make_feed, registration


def _by_namespace(summaries):
    return {s.namespace: s for s in summaries}


def test_keyvault_in_one_of_three_subscriptions(catalog) -> None:
    agg = ProviderAggregator(catalog)
    agg.ingest_feed(make_feed("a", {"Microsoft.KeyVault": 2}))
    agg.ingest_feed(make_feed("b", {}, not_registered=("Microsoft.KeyVault",)))
    agg.ingest_feed(make_feed("c", {}))

    entry = agg.usage_matrix()["Microsoft.KeyVault"]
    assert entry.registered_count == 1
    assert entry.subscriptions_with_resources == 1
    assert entry.total_resources == 2
    assert entry.subscription_ids == ["a"]

    keyvault = _by_namespace(agg.classify())["Microsoft.KeyVault"]
    assert keyvault.percentage == 33.33
    assert keyvault.usage_band is UsageBand.MODERATE
    assert keyvault.is_control_plane is False
    assert keyvault.categories == ["Landing Zone Corp"]


def test_authorization_everywhere_without_resources(catalog) -> None:
    agg = ProviderAggregator(catalog)
    for sub in ("a", "b", "c"):
        agg.ingest_feed(make_feed(sub, {"Microsoft.Authorization": 0}))

    auth = _by_namespace(agg.classify())["Microsoft.Authorization"]
    assert auth.is_control_plane is True
    assert auth.plane == "control"
    assert auth.percentage == 100.0
    assert auth.usage_band is UsageBand.WIDELY_USED
    assert auth.has_tag(ProviderTag.AUTO_REGISTERED)
    assert not auth.has_tag(ProviderTag.DEPRECATED)


def test_untiered_provider_carries_other_category(catalog) -> None:
    agg = ProviderAggregator(catalog)
    agg.ingest_feed(make_feed("a", {"Microsoft.ClassicCompute": 1}))

    classic = agg.classify()[0]
    assert classic.tiers == ()
    assert classic.categories == ["Other"]
    assert classic.tags == frozenset({ProviderTag.DEPRECATED, ProviderTag.OTHER})
    assert classic.labels == frozenset({"deprecated", "Other", "widely-used"})


def test_provider_in_multiple_tiers(catalog) -> None:
    agg = ProviderAggregator(catalog)
    agg.ingest_feed(make_feed("a", {"Microsoft.Network": 3}))

    network = agg.classify()[0]
    assert network.tiers == ("Platform Connectivity", "Landing Zone Public")
    assert ProviderTag.OTHER not in network.tags
    assert network.categories.count("Other") == 0
    assert network.labels == frozenset({"widely-used"})


def test_namespace_matching_is_case_sensitive(catalog) -> None:
    agg = ProviderAggregator(catalog)
    agg.ingest_feed(make_feed("a", {"microsoft.support": 0, "Microsoft.Support": 0}))

    summaries = _by_namespace(agg.classify())
    assert summaries["microsoft.support"].has_tag(ProviderTag.AUTO_REGISTERED)
    assert not summaries["Microsoft.Support"].has_tag(ProviderTag.AUTO_REGISTERED)


@pytest.mark.parametrize("percentage, band", [
    (100.0, UsageBand.WIDELY_USED),
    (80.0, UsageBand.WIDELY_USED),
    (79.99, UsageBand.COMMON),
    (50.0, UsageBand.COMMON),
    (49.99, UsageBand.MODERATE),
    (20.0, UsageBand.MODERATE),
    (19.99, UsageBand.SPECIALIZED),
    (0.0, UsageBand.SPECIALIZED),
])
def test_usage_band_thresholds(percentage: float, band: UsageBand) -> None:
    assert usage_band_for(percentage) is band


def test_exactly_eighty_percent_is_widely_used(catalog) -> None:
    agg = ProviderAggregator(catalog)
    for sub in ("a", "b", "c", "d"):
        agg.ingest_feed(make_feed(sub, {"Microsoft.Storage": 1}))
    agg.ingest_feed(make_feed("e", {}))

    storage = agg.classify()[0]
    assert storage.percentage == 80.0
    assert storage.usage_band is UsageBand.WIDELY_USED


def test_percentage_counts_subscriptions_without_registrations(catalog) -> None:
    agg = ProviderAggregator(catalog)
    agg.ingest_feed(make_feed("a", {"Microsoft.Web": 0}))
    agg.ingest_feed(make_feed("b", {}))

    assert agg.total_subscriptions == 2
    assert agg.classify()[0].percentage == 50.0


def test_ordering_by_count_then_namespace(catalog) -> None:
    agg = ProviderAggregator(catalog)
    agg.ingest_feed(make_feed("a", {"Microsoft.Web": 0, "Microsoft.Cdn": 0, "Microsoft.Network": 0}))
    agg.ingest_feed(make_feed("b", {"Microsoft.Network": 0}))

    assert [s.namespace for s in agg.classify()] == ["Microsoft.Network", "Microsoft.Cdn", "Microsoft.Web"]


def test_registered_pairs_accounting_identity(catalog) -> None:
    agg = ProviderAggregator(catalog)
    feeds = [
        make_feed("a", {"Microsoft.Network": 2, "Microsoft.Web": 0}, not_registered=("Microsoft.Sql",)),
        make_feed("b", {"Microsoft.Network": 0}, not_registered=("Microsoft.Web",)),
        make_feed("c", {"Microsoft.Sql": 5, "Microsoft.Web": 1, "Microsoft.KeyVault": 1}),
    ]
    for feed in feeds:
        agg.ingest_feed(feed)

    registered_pairs = sum(1 for f in feeds for r in f.registrations if r.is_registered)
    summaries = agg.classify()
    assert sum(s.registered_count for s in summaries) == registered_pairs

    for summary in summaries:
        assert summary.subscriptions_with_resources <= summary.registered_count
        assert summary.total_resources >= summary.subscriptions_with_resources
        assert summary.is_control_plane == (summary.subscriptions_with_resources == 0)


def test_non_registered_states_are_not_aggregated(catalog) -> None:
    agg = ProviderAggregator(catalog)
    agg.ingest("a", [
        registration("a", "Microsoft.Web", 3, RegistrationState.REGISTERING),
        registration("a", "Microsoft.Sql", 1, RegistrationState.UNREGISTERING),
        registration("a", "Microsoft.Network", 0),
    ])

    assert list(agg.usage_matrix()) == ["Microsoft.Network"]
    summary = agg.subscription_summaries()[0]
    assert summary.registered_provider_count == 1
    assert summary.not_registered_namespaces == ("Microsoft.Sql", "Microsoft.Web")


def test_subscription_summary(catalog) -> None:
    agg = ProviderAggregator(catalog)
    feed = make_feed("a", {"Microsoft.Web": 2, "Microsoft.Compute": 0, "Microsoft.Network": 4}, name="Prod")
    # resources whose provider is not listed still count towards the subscription total
    feed.resource_counts["Microsoft.Unlisted"] = 3
    agg.ingest_feed(feed)

    summary = agg.subscription_summaries()[0]
    assert summary.subscription_name == "Prod"
    assert summary.registered_provider_count == 3
    assert summary.providers_with_resources_count == 3
    assert summary.total_resource_count == 9
    assert summary.registered_namespaces == ("Microsoft.Compute", "Microsoft.Network", "Microsoft.Web")


def test_subscription_summary_without_resource_counts(catalog) -> None:
    agg = ProviderAggregator(catalog)
    summary = agg.ingest("a", [registration("a", "Microsoft.Web", 2), registration("a", "Microsoft.Sql", 0)])

    assert summary.subscription_name == "a"
    assert summary.providers_with_resources_count == 1
    assert summary.total_resource_count == 2


def test_subscription_summaries_keep_ingestion_order(catalog) -> None:
    agg = ProviderAggregator(catalog)
    for sub in ("z", "a", "m"):
        agg.ingest_feed(make_feed(sub, {}))

    assert [s.subscription_id for s in agg.subscription_summaries()] == ["z", "a", "m"]


def test_compliance_found_and_missing(catalog) -> None:
    agg = ProviderAggregator(catalog)
    agg.ingest_feed(make_feed("a", {"A": 0}))
    agg.ingest_feed(make_feed("b", {"C": 1}))

    result = agg.compute_compliance(["A", "B", "C"])
    assert result.found == ("A", "C")
    assert result.missing == ("B",)
    assert result.compliance_percentage == 66.7
    assert len(result.found) + len(result.missing) == len(result.required)
    assert not result.is_compliant

    assert agg.compute_compliance(["A", "B", "C"]) == result


def test_compliance_preserves_required_order(catalog) -> None:
    agg = ProviderAggregator(catalog)
    agg.ingest_feed(make_feed("a", {"B": 0}))

    result = agg.compute_compliance(["D", "B", "A"])
    assert result.found == ("B",)
    assert result.missing == ("D", "A")
    assert result.compliance_percentage == 33.3


def test_compliance_rejects_empty_list(catalog) -> None:
    with pytest.raises(ValueError):
        ProviderAggregator(catalog).compute_compliance([])


def test_build_report(catalog) -> None:
    agg = ProviderAggregator(catalog)
    agg.ingest_feed(make_feed("a", {"Microsoft.KeyVault": 1, "Microsoft.Network": 0}))

    report = agg.build_report("Tenant report", include_unregistered=True)
    assert report.title == "Tenant report"
    assert report.total_subscriptions == 1
    assert report.required_compliance.missing == ("Microsoft.Storage",)
    assert report.recommended_compliance.compliance_percentage == 0.0
    assert report.control_plane_count == 1
    assert report.data_plane_count == 1
    assert report.usage_band_distribution()["widely-used"] == 2
    assert report.include_unregistered is True

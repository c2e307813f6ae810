"""Tenant-wide provider aggregation and classification"""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from .baseline import BaselineCatalog, DEFAULT_BASELINE_CATALOG
from .models import (
    ComplianceResult,
    FailedSubscription,
    ProviderRegistration,
    ProviderReport,
    ProviderSummary,
    ProviderTag,
    SubscriptionFeed,
    SubscriptionSummary,
    UsageBand,
    UsageMatrixEntry,
)
from ..utils.logger import setup_logger

# Lower bounds (inclusive), checked top to bottom
USAGE_BAND_THRESHOLDS = (
    (80.0, UsageBand.WIDELY_USED),
    (50.0, UsageBand.COMMON),
    (20.0, UsageBand.MODERATE),
)


def usage_band_for(percentage: float) -> UsageBand:
    """Map a registration percentage onto its usage band"""
    for threshold, band in USAGE_BAND_THRESHOLDS:
        if percentage >= threshold:
            return band
    return UsageBand.SPECIALIZED


class ProviderAggregator:
    """Accumulates per-subscription provider feeds, then derives the report data.

    Usage is two-phase: call :meth:`ingest` once per successfully collected
    subscription, then read :meth:`classify`, :meth:`subscription_summaries`
    and :meth:`compute_compliance`. Not safe for concurrent ingestion.
    """

    def __init__(self, catalog: Optional[BaselineCatalog] = None):
        self.catalog = catalog or DEFAULT_BASELINE_CATALOG
        self.logger = setup_logger(self.__class__.__name__)
        self._matrix: Dict[str, UsageMatrixEntry] = {}
        self._subscriptions: List[SubscriptionSummary] = []

    @property
    def total_subscriptions(self) -> int:
        return len(self._subscriptions)

    def ingest(
        self,
        subscription_id: str,
        registrations: Iterable[ProviderRegistration],
        subscription_name: str = "",
        resource_counts: Optional[Dict[str, int]] = None
    ) -> SubscriptionSummary:
        """Fold one subscription's provider registrations into the usage matrix"""

        registrations = list(registrations)
        registered = []
        not_registered = []

        for registration in registrations:
            if not registration.is_registered:
                not_registered.append(registration.namespace)
                continue

            registered.append(registration.namespace)
            entry = self._entry_for(registration.namespace)
            entry.registered_count += 1
            entry.subscription_ids.append(subscription_id)

            if registration.resource_count > 0:
                entry.subscriptions_with_resources += 1
                entry.total_resources += registration.resource_count

        if resource_counts is not None:
            total_resource_count = sum(resource_counts.values())
            with_resources = sum(1 for count in resource_counts.values() if count > 0)
        else:
            total_resource_count = sum(r.resource_count for r in registrations)
            with_resources = len({r.namespace for r in registrations if r.resource_count > 0})

        summary = SubscriptionSummary(
            subscription_id=subscription_id,
            subscription_name=subscription_name or subscription_id,
            registered_provider_count=len(registered),
            providers_with_resources_count=with_resources,
            total_resource_count=total_resource_count,
            registered_namespaces=tuple(sorted(registered)),
            not_registered_namespaces=tuple(sorted(not_registered)),
        )
        self._subscriptions.append(summary)

        self.logger.debug(
            f"Ingested {subscription_id}: {summary.registered_provider_count} registered providers, "
            f"{summary.total_resource_count} resources"
        )
        return summary

    def ingest_feed(self, feed: SubscriptionFeed) -> SubscriptionSummary:
        """Convenience wrapper for collector output"""
        return self.ingest(
            feed.subscription_id,
            feed.registrations,
            subscription_name=feed.subscription_name,
            resource_counts=feed.resource_counts,
        )

    def usage_matrix(self) -> Dict[str, UsageMatrixEntry]:
        """Snapshot of the raw usage matrix, keyed by namespace"""
        return {
            namespace: UsageMatrixEntry(
                namespace=entry.namespace,
                registered_count=entry.registered_count,
                subscriptions_with_resources=entry.subscriptions_with_resources,
                total_resources=entry.total_resources,
                subscription_ids=list(entry.subscription_ids),
            )
            for namespace, entry in self._matrix.items()
        }

    def classify(self) -> List[ProviderSummary]:
        """Classify every provider registered in at least one subscription"""

        total = self.total_subscriptions
        summaries = []

        for namespace, entry in self._matrix.items():
            percentage = round(entry.registered_count / total * 100, 2)

            tags = set()
            if self.catalog.is_auto_registered(namespace):
                tags.add(ProviderTag.AUTO_REGISTERED)
            if self.catalog.is_deprecated(namespace):
                tags.add(ProviderTag.DEPRECATED)

            tiers = self.catalog.tiers_for(namespace)
            if not tiers:
                tags.add(ProviderTag.OTHER)

            summaries.append(ProviderSummary(
                namespace=namespace,
                registered_count=entry.registered_count,
                subscriptions_with_resources=entry.subscriptions_with_resources,
                total_resources=entry.total_resources,
                percentage=percentage,
                is_control_plane=entry.subscriptions_with_resources == 0,
                usage_band=usage_band_for(percentage),
                tags=frozenset(tags),
                tiers=tiers,
                subscription_ids=tuple(entry.subscription_ids),
            ))

        summaries.sort(key=lambda s: (-s.registered_count, s.namespace))
        return summaries

    def subscription_summaries(self) -> List[SubscriptionSummary]:
        """Subscription summaries in ingestion order"""
        return list(self._subscriptions)

    def compute_compliance(self, required: Sequence[str]) -> ComplianceResult:
        """Check which required providers are registered anywhere in the tenant"""

        required = tuple(required)
        if not required:
            raise ValueError("Compliance requires a non-empty provider list")

        found = tuple(p for p in required if p in self._matrix)
        missing = tuple(p for p in required if p not in self._matrix)

        return ComplianceResult(
            required=required,
            found=found,
            missing=missing,
            compliance_percentage=round(len(found) / len(required) * 100, 1),
        )

    def build_report(
        self,
        title: str,
        failed_subscriptions: Optional[List[FailedSubscription]] = None,
        include_unregistered: bool = False,
        generated_at: Optional[datetime] = None
    ) -> ProviderReport:
        """Derive everything the renderer needs in one pass"""

        report = ProviderReport(
            title=title,
            generated_at=generated_at or datetime.now(timezone.utc),
            total_subscriptions=self.total_subscriptions,
            providers=self.classify(),
            subscriptions=self.subscription_summaries(),
            required_compliance=self.compute_compliance(self.catalog.required) if self.catalog.required else None,
            recommended_compliance=self.compute_compliance(self.catalog.recommended) if self.catalog.recommended else None,
            failed_subscriptions=list(failed_subscriptions or []),
            include_unregistered=include_unregistered,
        )

        self.logger.info(
            f"Classified {len(report.providers)} providers across {report.total_subscriptions} subscriptions"
        )
        return report

    def _entry_for(self, namespace: str) -> UsageMatrixEntry:
        entry = self._matrix.get(namespace)
        if entry is None:
            entry = UsageMatrixEntry(namespace=namespace)
            self._matrix[namespace] = entry
        return entry

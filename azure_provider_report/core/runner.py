"""Main orchestrator for a provider report run"""

import time
from pathlib import Path
from typing import List, Optional, Tuple

from .aggregator import ProviderAggregator
from .baseline import BaselineCatalog
from .interfaces import IProviderCollector
from .models import FailedSubscription, ProviderReport, ReportConfiguration
from ..auth.manager import AuthenticationManager
from ..collector.provider_collector import ProviderCollector
from ..utils.config import build_catalog
from ..utils.logger import setup_logger


class OutputDirectoryError(OSError):
    """The report output directory could not be created"""


class ProviderReportRunner:
    """Collects every subscription sequentially and aggregates the results"""

    def __init__(
        self,
        config: Optional[ReportConfiguration] = None,
        auth_manager: Optional[AuthenticationManager] = None,
        collector: Optional[IProviderCollector] = None,
        catalog: Optional[BaselineCatalog] = None
    ):
        self.config = config or ReportConfiguration()
        self.logger = setup_logger(self.__class__.__name__)
        self.auth_manager = auth_manager or AuthenticationManager()
        self.collector = collector or ProviderCollector(self.auth_manager)
        self.catalog = catalog or build_catalog(self.config)
        self.failed_subscriptions: List[FailedSubscription] = []

    async def run(self) -> ProviderReport:
        """Authenticate, prepare output, then collect and aggregate every subscription.

        Authentication and output directory failures abort the run. A failure
        collecting one subscription is recorded and that subscription is left
        out of every aggregate.
        """

        start_time = time.time()

        await self.auth_manager.authenticate()
        self.prepare_output_dir()

        subscriptions = self._filter_subscriptions(await self.auth_manager.get_accessible_subscriptions())
        self.logger.info(f"Collecting providers for {len(subscriptions)} subscriptions")

        aggregator = ProviderAggregator(self.catalog)
        self.failed_subscriptions = []

        for subscription_id, subscription_name in subscriptions:
            try:
                feed = await self.collector.collect(subscription_id, subscription_name)
            except Exception as e:
                self.logger.error(f"Error collecting subscription {subscription_name} ({subscription_id}): {e}")
                self.failed_subscriptions.append(FailedSubscription(
                    subscription_id=subscription_id,
                    subscription_name=subscription_name,
                    error=str(e),
                ))
                continue

            aggregator.ingest_feed(feed)

        report = aggregator.build_report(
            title=self.config.report_title,
            failed_subscriptions=self.failed_subscriptions,
            include_unregistered=self.config.include_unregistered,
        )

        self.logger.info(
            f"Run completed in {time.time() - start_time:.2f}s: "
            f"{report.total_subscriptions} subscriptions ingested, {len(self.failed_subscriptions)} failed"
        )
        return report

    def prepare_output_dir(self) -> Path:
        """Create the output directory, raising OutputDirectoryError if that is not possible"""
        output_dir = Path(self.config.output_dir)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputDirectoryError(f"Cannot create output directory {output_dir}: {e}") from e
        return output_dir

    def _filter_subscriptions(self, subscriptions: List[Tuple[str, str]]) -> List[Tuple[str, str]]:
        included = set(self.config.subscription_ids)
        excluded = set(self.config.excluded_subscription_ids)

        selected = []
        for subscription_id, name in subscriptions:
            if included and subscription_id not in included:
                continue
            if subscription_id in excluded:
                self.logger.debug(f"Excluding subscription {name} ({subscription_id})")
                continue
            selected.append((subscription_id, name))

        missing = included - {sub_id for sub_id, _ in subscriptions}
        for subscription_id in sorted(missing):
            self.logger.warning(f"Subscription {subscription_id} is not accessible or not enabled")

        return selected

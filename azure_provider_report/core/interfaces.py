"""Core interfaces for the Azure Resource Provider Report system"""

from abc import ABC, abstractmethod

from .models import ProviderReport, SubscriptionFeed


class IProviderCollector(ABC):
    """Interface for per-subscription provider collectors"""

    @abstractmethod
    async def collect(self, subscription_id: str, subscription_name: str) -> SubscriptionFeed:
        """Collect provider registrations and resource counts for one subscription"""
        pass


class IReportGenerator(ABC):
    """Interface for report generators"""

    @abstractmethod
    def generate_report(self, report: ProviderReport, output_path: str) -> str:
        """Generate report and return its path"""
        pass

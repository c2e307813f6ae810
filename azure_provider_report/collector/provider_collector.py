"""Provider registration collector backed by Azure Resource Manager"""

from collections import Counter
from typing import Dict, Iterable, Optional

from ..auth.manager import AuthenticationManager
from ..core.interfaces import IProviderCollector
from ..core.models import ProviderRegistration, RegistrationState, SubscriptionFeed
from ..utils.logger import setup_logger


def provider_namespace(resource_type: Optional[str]) -> Optional[str]:
    """Provider namespace of a resource type, e.g. Microsoft.Compute for Microsoft.Compute/disks"""
    if not resource_type:
        return None
    return resource_type.split('/', 1)[0]


def count_resources_by_namespace(resource_types: Iterable[Optional[str]]) -> Dict[str, int]:
    """Count resources per provider namespace, case-sensitive"""
    counts = Counter()
    for resource_type in resource_types:
        namespace = provider_namespace(resource_type)
        if namespace:
            counts[namespace] += 1
    return dict(counts)


class ProviderCollector(IProviderCollector):
    """Fetch providers and resources for one subscription at a time"""

    def __init__(self, auth_manager: AuthenticationManager):
        self.auth_manager = auth_manager
        self.logger = setup_logger(self.__class__.__name__)

    async def collect(self, subscription_id: str, subscription_name: str) -> SubscriptionFeed:
        """Collect provider registrations and resource counts.

        Azure SDK errors propagate so the caller can skip the subscription.
        """

        self.logger.debug(f"Collecting providers for {subscription_name} ({subscription_id})")
        client = await self.auth_manager.get_resource_client(subscription_id)

        resource_counts = count_resources_by_namespace(
            resource.type for resource in client.resources.list()
        )

        registrations = []
        seen = set()
        for provider in client.providers.list():
            namespace = provider.namespace
            if not namespace or namespace in seen:
                continue
            seen.add(namespace)
            registrations.append(ProviderRegistration(
                subscription_id=subscription_id,
                namespace=namespace,
                registration_state=RegistrationState.parse(provider.registration_state),
                resource_count=resource_counts.get(namespace, 0),
            ))

        registered = sum(1 for r in registrations if r.is_registered)
        self.logger.info(
            f"{subscription_name}: {registered}/{len(registrations)} providers registered, "
            f"{sum(resource_counts.values())} resources"
        )

        return SubscriptionFeed(
            subscription_id=subscription_id,
            subscription_name=subscription_name,
            registrations=registrations,
            resource_counts=resource_counts,
        )

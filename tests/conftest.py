"""Shared pytest fixtures."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Dict, List, Tuple
from unittest.mock import MagicMock

import pytest

from azure_provider_report.core.baseline import BaselineCatalog
from azure_provider_report.core.models import (
    ProviderRegistration,
    RegistrationState,
    SubscriptionFeed,
)


def registration(subscription_id: str, namespace: str, resources: int = 0,
                 state: RegistrationState = RegistrationState.REGISTERED) -> ProviderRegistration:
    return ProviderRegistration(
        subscription_id=subscription_id,
        namespace=namespace,
        registration_state=state,
        resource_count=resources,
    )


def make_feed(subscription_id: str, registered: Dict[str, int],
              not_registered: Tuple[str, ...] = (), name: str = "") -> SubscriptionFeed:
    """Feed where ``registered`` maps namespace -> resource count"""
    registrations = [registration(subscription_id, ns, count) for ns, count in registered.items()]
    registrations += [
        registration(subscription_id, ns, state=RegistrationState.NOT_REGISTERED) for ns in not_registered
    ]
    return SubscriptionFeed(
        subscription_id=subscription_id,
        subscription_name=name or f"Subscription {subscription_id}",
        registrations=registrations,
        resource_counts={ns: count for ns, count in registered.items() if count > 0},
    )


@pytest.fixture
def catalog() -> BaselineCatalog:
    """Small substitute baseline catalog."""
    return BaselineCatalog(
        auto_registered=("Microsoft.Authorization", "Microsoft.Resources", "microsoft.support"),
        deprecated=("Microsoft.ClassicCompute",),
        required=("Microsoft.KeyVault", "Microsoft.Network", "Microsoft.Storage"),
        recommended=("Microsoft.Web",),
        tiers=(
            ("Platform Connectivity", ("Microsoft.Network", "Microsoft.Cdn")),
            ("Landing Zone Public", ("Microsoft.Network", "Microsoft.Web")),
            ("Landing Zone Corp", ("Microsoft.KeyVault", "Microsoft.Storage")),
        ),
    )


class FakeAuthManager:
    """Stands in for AuthenticationManager without touching Azure."""

    def __init__(self, subscriptions: List[Tuple[str, str]], fail_auth: bool = False):
        self.subscriptions = subscriptions
        self.fail_auth = fail_auth
        self.clients: Dict[str, MagicMock] = {}

    async def authenticate(self) -> bool:
        if self.fail_auth:
            from azure.core.exceptions import ClientAuthenticationError
            raise ClientAuthenticationError("Unable to authenticate with Azure")
        return True

    async def get_accessible_subscriptions(self) -> List[Tuple[str, str]]:
        return list(self.subscriptions)

    async def get_resource_client(self, subscription_id: str) -> MagicMock:
        return self.clients[subscription_id]


def make_client(providers: Dict[str, str], resource_types: List[str]) -> MagicMock:
    """Mock ResourceManagementClient; ``providers`` maps namespace -> registration state."""
    client = MagicMock()
    client.providers.list.return_value = [
        SimpleNamespace(namespace=ns, registration_state=state) for ns, state in providers.items()
    ]
    client.resources.list.return_value = [SimpleNamespace(type=t) for t in resource_types]
    return client

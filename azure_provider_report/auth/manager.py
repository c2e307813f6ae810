"""Authentication manager for Azure services"""

import os
from typing import Dict, List, Tuple

from azure.core.exceptions import ClientAuthenticationError
from azure.identity import AzureCliCredential, DefaultAzureCredential, EnvironmentCredential
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.subscription import SubscriptionClient

from ..utils.logger import setup_logger


class AuthenticationManager:
    """Manages Azure authentication and client creation"""

    def __init__(self, credential=None):
        self.logger = setup_logger(self.__class__.__name__)
        self.credential = credential
        self._client_cache: Dict[str, ResourceManagementClient] = {}

    async def authenticate(self) -> bool:
        """Authenticate with Azure, trying environment, CLI, then the default chain"""

        if self.credential is not None:
            return True

        candidates = []
        if all(os.getenv(var) for var in ['AZURE_TENANT_ID', 'AZURE_CLIENT_ID', 'AZURE_CLIENT_SECRET']):
            candidates.append(("environment variables", EnvironmentCredential))
        candidates.append(("Azure CLI", AzureCliCredential))
        candidates.append(("default credential chain", DefaultAzureCredential))

        for description, credential_type in candidates:
            try:
                credential = credential_type()
                self._test_credential(credential)
            except Exception as e:
                self.logger.debug(f"Authentication using {description} failed: {e}")
                continue

            self.credential = credential
            self.logger.info(f"Authenticated using {description}")
            return True

        raise ClientAuthenticationError("Unable to authenticate with Azure")

    def _test_credential(self, credential) -> None:
        """Test the credential by listing subscriptions"""
        subscription_client = SubscriptionClient(credential)
        next(iter(subscription_client.subscriptions.list()), None)

    async def get_accessible_subscriptions(self) -> List[Tuple[str, str]]:
        """Get (subscription id, display name) for every enabled subscription"""

        await self.authenticate()

        subscription_client = SubscriptionClient(self.credential)
        subscriptions = []

        for sub in subscription_client.subscriptions.list():
            state = getattr(sub.state, "value", sub.state)
            if state != 'Enabled':
                self.logger.debug(f"Skipping subscription {sub.display_name} ({sub.subscription_id}) in state {state}")
                continue
            subscriptions.append((sub.subscription_id, sub.display_name))
            self.logger.debug(f"Found subscription: {sub.display_name} ({sub.subscription_id})")

        self.logger.info(f"Found {len(subscriptions)} enabled subscriptions")
        return subscriptions

    async def get_resource_client(self, subscription_id: str) -> ResourceManagementClient:
        """Get a cached ARM client for a subscription"""

        await self.authenticate()

        client = self._client_cache.get(subscription_id)
        if client is None:
            client = ResourceManagementClient(self.credential, subscription_id)
            self._client_cache[subscription_id] = client
            self.logger.debug(f"Created resource client for subscription {subscription_id}")
        return client


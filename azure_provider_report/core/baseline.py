"""Baseline provider catalog used for classification and compliance"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Optional, Tuple

# Namespaces are matched exactly as ARM returns them. ARM reports the
# support provider in lowercase, so it is listed that way here.
AUTO_REGISTERED_PROVIDERS = (
    "Microsoft.ADHybridHealthService",
    "Microsoft.Authorization",
    "Microsoft.Billing",
    "Microsoft.ClassicSubscription",
    "Microsoft.Commerce",
    "Microsoft.Consumption",
    "Microsoft.CostManagement",
    "Microsoft.Features",
    "Microsoft.MarketplaceOrdering",
    "Microsoft.Portal",
    "Microsoft.ResourceGraph",
    "Microsoft.ResourceIntelligence",
    "Microsoft.Resources",
    "Microsoft.SerialConsole",
    "microsoft.support",
)

DEPRECATED_PROVIDERS = (
    "Microsoft.BingMaps",
    "Microsoft.ClassicCompute",
    "Microsoft.ClassicInfrastructureMigrate",
    "Microsoft.ClassicNetwork",
    "Microsoft.ClassicStorage",
    "Microsoft.DBforMariaDB",
    "Microsoft.Genomics",
    "Microsoft.MixedReality",
    "Microsoft.TimeSeriesInsights",
)

REQUIRED_LANDING_ZONE_PROVIDERS = (
    "Microsoft.Advisor",
    "Microsoft.AlertsManagement",
    "Microsoft.Authorization",
    "Microsoft.Automation",
    "Microsoft.Compute",
    "Microsoft.GuestConfiguration",
    "Microsoft.Insights",
    "Microsoft.KeyVault",
    "Microsoft.ManagedIdentity",
    "Microsoft.Network",
    "Microsoft.OperationalInsights",
    "Microsoft.OperationsManagement",
    "Microsoft.PolicyInsights",
    "Microsoft.RecoveryServices",
    "Microsoft.ResourceHealth",
    "Microsoft.Resources",
    "Microsoft.Security",
    "Microsoft.Storage",
)

RECOMMENDED_LANDING_ZONE_PROVIDERS = (
    "Microsoft.ChangeAnalysis",
    "Microsoft.ContainerRegistry",
    "Microsoft.ContainerService",
    "Microsoft.DataProtection",
    "Microsoft.EventGrid",
    "Microsoft.Maintenance",
    "Microsoft.ManagedServices",
    "Microsoft.Monitor",
    "Microsoft.SecurityInsights",
    "Microsoft.Sql",
    "Microsoft.Web",
)

# Subscription archetypes. A provider can sit in several tiers at once.
BASELINE_TIERS = (
    ("Platform Management", (
        "Microsoft.AlertsManagement",
        "Microsoft.Automation",
        "Microsoft.ChangeAnalysis",
        "Microsoft.Insights",
        "Microsoft.Maintenance",
        "Microsoft.Monitor",
        "Microsoft.OperationalInsights",
        "Microsoft.OperationsManagement",
        "Microsoft.SecurityInsights",
    )),
    ("Platform Connectivity", (
        "Microsoft.Cdn",
        "Microsoft.Insights",
        "Microsoft.Network",
        "Microsoft.OperationalInsights",
        "Microsoft.Security",
    )),
    ("Platform Identity", (
        "Microsoft.AAD",
        "Microsoft.AzureActiveDirectory",
        "Microsoft.Compute",
        "Microsoft.KeyVault",
        "Microsoft.ManagedIdentity",
        "Microsoft.Network",
    )),
    ("Landing Zone Corp", (
        "Microsoft.Compute",
        "Microsoft.ContainerRegistry",
        "Microsoft.ContainerService",
        "Microsoft.DataProtection",
        "Microsoft.KeyVault",
        "Microsoft.Network",
        "Microsoft.RecoveryServices",
        "Microsoft.Sql",
        "Microsoft.Storage",
        "Microsoft.Web",
    )),
    ("Landing Zone Public", (
        "Microsoft.ApiManagement",
        "Microsoft.Cdn",
        "Microsoft.Compute",
        "Microsoft.ContainerService",
        "Microsoft.KeyVault",
        "Microsoft.Network",
        "Microsoft.Storage",
        "Microsoft.Web",
    )),
)


@dataclass(frozen=True)
class BaselineCatalog:
    """Immutable named provider lists, built once per run"""
    auto_registered: Tuple[str, ...] = AUTO_REGISTERED_PROVIDERS
    deprecated: Tuple[str, ...] = DEPRECATED_PROVIDERS
    required: Tuple[str, ...] = REQUIRED_LANDING_ZONE_PROVIDERS
    recommended: Tuple[str, ...] = RECOMMENDED_LANDING_ZONE_PROVIDERS
    tiers: Tuple[Tuple[str, Tuple[str, ...]], ...] = BASELINE_TIERS

    def is_auto_registered(self, namespace: str) -> bool:
        return namespace in self.auto_registered

    def is_deprecated(self, namespace: str) -> bool:
        return namespace in self.deprecated

    def tiers_for(self, namespace: str) -> Tuple[str, ...]:
        """Names of every tier listing the namespace, in catalog order"""
        return tuple(name for name, members in self.tiers if namespace in members)

    @property
    def tier_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.tiers)

    def with_overrides(self, overrides: Optional[Dict[str, Any]]) -> "BaselineCatalog":
        """Return a copy with the lists present in ``overrides`` replaced.

        ``overrides`` is the ``baseline`` section of a configuration file:
        ``auto_registered``, ``deprecated``, ``required`` and ``recommended``
        are lists of namespaces, ``tiers`` maps tier names to lists.
        """
        if not overrides:
            return self

        unknown = set(overrides) - {"auto_registered", "deprecated", "required", "recommended", "tiers"}
        if unknown:
            raise ValueError(f"Unknown baseline catalog keys: {', '.join(sorted(unknown))}")

        changes: Dict[str, Any] = {}
        for key in ("auto_registered", "deprecated", "required", "recommended"):
            if overrides.get(key) is not None:
                changes[key] = _as_namespaces(overrides[key], key)

        if overrides.get("tiers") is not None:
            tiers = overrides["tiers"]
            if not isinstance(tiers, dict):
                raise ValueError("Baseline 'tiers' must map tier names to provider lists")
            changes["tiers"] = tuple(
                (str(name), _as_namespaces(members, f"tiers.{name}"))
                for name, members in tiers.items()
            )

        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "auto_registered": list(self.auto_registered),
            "deprecated": list(self.deprecated),
            "required": list(self.required),
            "recommended": list(self.recommended),
            "tiers": {name: list(members) for name, members in self.tiers},
        }


def _as_namespaces(value: Iterable[str], key: str) -> Tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ValueError(f"Baseline '{key}' must be a list of provider namespaces")
    return tuple(str(item).strip() for item in value if str(item).strip())


DEFAULT_BASELINE_CATALOG = BaselineCatalog()

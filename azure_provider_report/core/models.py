"""Core data models for Azure Resource Provider Report"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple


class RegistrationState(Enum):
    """Registration state of a resource provider on a subscription"""
    REGISTERED = "Registered"
    NOT_REGISTERED = "NotRegistered"
    REGISTERING = "Registering"
    UNREGISTERING = "Unregistering"

    @classmethod
    def parse(cls, value: Optional[str]) -> "RegistrationState":
        """Map the state string reported by ARM, unknown values count as not registered"""
        for state in cls:
            if state.value == value:
                return state
        return cls.NOT_REGISTERED


class ProviderTag(Enum):
    """Catalog-derived tags attached to a provider"""
    AUTO_REGISTERED = "auto-registered"
    DEPRECATED = "deprecated"
    OTHER = "Other"


class UsageBand(Enum):
    """Tenant-wide adoption band, derived from the registration percentage"""
    WIDELY_USED = "widely-used"
    COMMON = "common"
    MODERATE = "moderate"
    SPECIALIZED = "specialized"


@dataclass(frozen=True)
class ProviderRegistration:
    """One provider's state on one subscription, as reported by the collector"""
    subscription_id: str
    namespace: str
    registration_state: RegistrationState
    resource_count: int = 0

    @property
    def is_registered(self) -> bool:
        return self.registration_state is RegistrationState.REGISTERED


@dataclass
class SubscriptionFeed:
    """Everything the collector gathered for a single subscription"""
    subscription_id: str
    subscription_name: str
    registrations: List[ProviderRegistration] = field(default_factory=list)
    resource_counts: Dict[str, int] = field(default_factory=dict)


@dataclass
class UsageMatrixEntry:
    """Tenant-wide accumulator for one provider namespace"""
    namespace: str
    registered_count: int = 0
    subscriptions_with_resources: int = 0
    total_resources: int = 0
    subscription_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ProviderSummary:
    """Classified, read-only view of one provider across the tenant"""
    namespace: str
    registered_count: int
    subscriptions_with_resources: int
    total_resources: int
    percentage: float
    is_control_plane: bool
    usage_band: UsageBand
    tags: FrozenSet[ProviderTag]
    tiers: Tuple[str, ...]
    subscription_ids: Tuple[str, ...] = ()

    @property
    def categories(self) -> List[str]:
        """Baseline tiers the provider belongs to, or the Other category"""
        return list(self.tiers) if self.tiers else [ProviderTag.OTHER.value]

    @property
    def labels(self) -> FrozenSet[str]:
        """Catalog tags and the usage band as one label set"""
        return frozenset(tag.value for tag in self.tags) | {self.usage_band.value}

    @property
    def plane(self) -> str:
        return "control" if self.is_control_plane else "data"

    def has_tag(self, tag: ProviderTag) -> bool:
        return tag in self.tags


@dataclass(frozen=True)
class SubscriptionSummary:
    """Per-subscription totals for the drill-down view"""
    subscription_id: str
    subscription_name: str
    registered_provider_count: int
    providers_with_resources_count: int
    total_resource_count: int
    registered_namespaces: Tuple[str, ...]
    not_registered_namespaces: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ComplianceResult:
    """Tenant-level presence check against a required provider list"""
    required: Tuple[str, ...]
    found: Tuple[str, ...]
    missing: Tuple[str, ...]
    compliance_percentage: float

    @property
    def is_compliant(self) -> bool:
        return not self.missing


@dataclass
class ReportConfiguration:
    """Configuration for a report run"""
    output_dir: str = "reports"
    report_title: str = "Azure Resource Provider Report"
    include_unregistered: bool = False
    export_json: bool = False
    subscription_ids: List[str] = field(default_factory=list)
    excluded_subscription_ids: List[str] = field(default_factory=list)
    baseline: Dict[str, Any] = field(default_factory=dict)


@dataclass
class FailedSubscription:
    """A subscription excluded from the report because collection failed"""
    subscription_id: str
    subscription_name: str
    error: str


@dataclass
class ProviderReport:
    """Report-ready dataset handed to the renderer"""
    title: str
    generated_at: datetime
    total_subscriptions: int
    providers: List[ProviderSummary] = field(default_factory=list)
    subscriptions: List[SubscriptionSummary] = field(default_factory=list)
    required_compliance: Optional[ComplianceResult] = None
    recommended_compliance: Optional[ComplianceResult] = None
    failed_subscriptions: List[FailedSubscription] = field(default_factory=list)
    include_unregistered: bool = False

    @property
    def control_plane_count(self) -> int:
        return sum(1 for p in self.providers if p.is_control_plane)

    @property
    def data_plane_count(self) -> int:
        return len(self.providers) - self.control_plane_count

    @property
    def total_resources(self) -> int:
        return sum(s.total_resource_count for s in self.subscriptions)

    def usage_band_distribution(self) -> Dict[str, int]:
        """Provider count per usage band, in band order"""
        distribution = {band.value: 0 for band in UsageBand}
        for provider in self.providers:
            distribution[provider.usage_band.value] += 1
        return distribution

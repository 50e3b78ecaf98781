"""
autoscaler/cloudprovider/catalog.py
────────────────────────────────────
CapabilityCatalog: every static lookup the derivation engine consults,
bundled into one frozen value.

Built once (usually CapabilityCatalog.default()) before any InstanceType is
constructed, then passed in explicitly. Nothing reads module-level mutable
state, so a test can build an isolated catalog with a different label
domain or a one-entry ENI table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from autoscaler.cloudprovider.amifamily import (
    DEFAULT_AMI_FAMILIES,
    AMIFamily,
    get_ami_family,
)
from autoscaler.cloudprovider.branch_interfaces import (
    DEFAULT_BRANCH_INTERFACE_LIMITS,
    BranchInterfaceLimits,
)
from autoscaler.shared.labels import DEFAULT_LABEL_REGISTRY, LabelRegistry


@dataclass(frozen=True)
class CapabilityCatalog:
    """
    Fields:
        labels            → label vocabulary and architecture table.
        ami_families      → AMI-family name → AMIFamily.
        branch_interfaces → machine-type name → BranchInterfaceLimits.
    """
    labels: LabelRegistry = field(default_factory=lambda: DEFAULT_LABEL_REGISTRY)
    ami_families: Mapping[str, AMIFamily] = field(default_factory=lambda: DEFAULT_AMI_FAMILIES)
    branch_interfaces: Mapping[str, BranchInterfaceLimits] = field(
        default_factory=lambda: DEFAULT_BRANCH_INTERFACE_LIMITS
    )

    # Holds MappingProxyType tables, so instances are compared but never hashed.
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        object.__setattr__(self, "ami_families", MappingProxyType(dict(self.ami_families)))
        object.__setattr__(self, "branch_interfaces", MappingProxyType(dict(self.branch_interfaces)))

    @classmethod
    def default(cls) -> "CapabilityCatalog":
        return _DEFAULT_CATALOG

    def ami_family(self, name: str) -> AMIFamily:
        """See get_ami_family(); raises UnsupportedAMIFamilyError."""
        return get_ami_family(name, self.ami_families)

    def branch_interface_limits(self, instance_type: str) -> Optional[BranchInterfaceLimits]:
        return self.branch_interfaces.get(instance_type)


_DEFAULT_CATALOG = CapabilityCatalog()

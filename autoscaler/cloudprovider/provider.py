"""
autoscaler/cloudprovider/provider.py
─────────────────────────────────────
InstanceTypeProvider: builds the candidate list for one evaluation cycle.

Pipeline
─────────
  EC2 DescribeInstanceTypes items   ──► RawOfferingMetadata.from_ec2()
  EC2 DescribeInstanceTypeOfferings ──► offerings_from_ec2()
                                             │
                                             ▼
              InstanceTypeProvider.build(metadata, offerings_by_name)
                                             │
                                             ▼
                        List[InstanceType], cheapest price score first

What gets skipped (logged, never raised)
─────────────────────────────────────────
  • incomplete metadata  (IncompleteInstanceTypeMetadataError)
  • unrecognised architecture: the normaliser returns a diagnostic string
    such as "[graviton3x]"; the provider treats that as unsupported.

The provider performs no I/O itself. Fetching the EC2 payloads (and retrying
those calls) belongs to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from autoscaler.cloudprovider.architecture import is_canonical_architecture
from autoscaler.cloudprovider.catalog import CapabilityCatalog
from autoscaler.cloudprovider.instancetype import (
    IncompleteInstanceTypeMetadataError,
    InstanceType,
)
from autoscaler.shared.labels import LABEL_ARCH
from autoscaler.shared.models import (
    CapacityType,
    Offering,
    ProvisioningConfig,
    RawOfferingMetadata,
)

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY_TYPES: Sequence[CapacityType] = (CapacityType.ON_DEMAND, CapacityType.SPOT)


def build_offerings(
    zones: Iterable[str],
    capacity_types: Iterable[CapacityType] = DEFAULT_CAPACITY_TYPES,
) -> List[Offering]:
    """
    Every (zone, capacity type) pair, zones outer, in input order.
    Duplicate zones are collapsed.
    """
    capacity_types = list(capacity_types)
    seen_zones = dict.fromkeys(zones)
    return [
        Offering(zone=zone, capacity_type=capacity_type)
        for zone in seen_zones
        for capacity_type in capacity_types
    ]


def offerings_from_ec2(
    type_offerings: Iterable[Mapping[str, Any]],
    capacity_types: Iterable[CapacityType] = DEFAULT_CAPACITY_TYPES,
) -> Dict[str, List[Offering]]:
    """
    Group EC2 DescribeInstanceTypeOfferings items (LocationType
    "availability-zone") into machine-type name → offerings.

    Each item looks like {"InstanceType": "m5.large", "Location": "us-west-2a"}.
    """
    zones_by_type: Dict[str, List[str]] = {}
    for item in type_offerings:
        zones_by_type.setdefault(item["InstanceType"], []).append(item["Location"])
    capacity_types = list(capacity_types)
    return {
        name: build_offerings(zones, capacity_types)
        for name, zones in zones_by_type.items()
    }


class InstanceTypeProvider:
    """
    Builds InstanceTypes for one provisioning config.

    Stateless apart from its (read-only) config and catalog: one provider
    can serve every evaluation cycle, and build() can be called from several
    threads at once.
    """

    def __init__(
        self,
        config: ProvisioningConfig,
        catalog: Optional[CapabilityCatalog] = None,
    ) -> None:
        self.config = config
        self.catalog = catalog or CapabilityCatalog.default()

    def build(
        self,
        metadata_items: Iterable[RawOfferingMetadata],
        offerings_by_name: Mapping[str, Sequence[Offering]],
    ) -> List[InstanceType]:
        """
        Construct one InstanceType per usable metadata item.

        Args:
            metadata_items:    Raw metadata, one item per machine type.
            offerings_by_name: Offerings keyed by machine-type name. A type
                               missing from this map gets no offerings (its
                               zone / capacity-type requirements are empty).

        Returns:
            InstanceTypes sorted by ascending price score, then by name.
        """
        built: List[InstanceType] = []
        skipped = 0
        for metadata in metadata_items:
            try:
                instance_type = InstanceType(
                    metadata,
                    self.config,
                    offerings_by_name.get(metadata.name, ()),
                    self.catalog,
                )
            except IncompleteInstanceTypeMetadataError as exc:
                logger.warning("Skipping instance type %s: %s", metadata.name, exc)
                skipped += 1
                continue

            arch = instance_type.requirements.single(LABEL_ARCH)
            if not is_canonical_architecture(arch, self.catalog.labels.architectures):
                logger.warning(
                    "Skipping instance type %s: unsupported architecture %s",
                    metadata.name, arch,
                )
                skipped += 1
                continue

            built.append(instance_type)

        built.sort(key=lambda it: (it.price, it.name))
        logger.info(
            "InstanceTypeProvider built %d instance types (%d skipped).",
            len(built), skipped,
        )
        return built

    def from_ec2(
        self,
        instance_types_payload: Iterable[Mapping[str, Any]],
        type_offerings_payload: Iterable[Mapping[str, Any]],
        capacity_types: Iterable[CapacityType] = DEFAULT_CAPACITY_TYPES,
    ) -> List[InstanceType]:
        """build() straight from the two EC2 response item lists."""
        return self.build(
            (RawOfferingMetadata.from_ec2(item) for item in instance_types_payload),
            offerings_from_ec2(type_offerings_payload, capacity_types),
        )

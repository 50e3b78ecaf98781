"""
autoscaler/cloudprovider/amifamily.py
──────────────────────────────────────
AMI-family lookup: the few facts about an OS image family that capacity
and overhead derivation depend on.

Only the three facts the derivation engine reads are stored here:
  root_device_name     → which block device becomes the node's ephemeral
                         storage (so a block-device override can target it)
  default_volume_size  → ephemeral storage when no override targets the root
  storage_overhead     → filesystem space the image itself takes

Which names and container runtimes are allowed is ProvisioningConfig's
concern, not this table's.

Everything else about AMIs (image resolution, user data, bootstrap) lives
outside this package.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from autoscaler.shared.models import (
    AMI_FAMILY_AL2,
    AMI_FAMILY_BOTTLEROCKET,
    AMI_FAMILY_UBUNTU,
)
from autoscaler.shared.quantity import Quantity, quantity

DEFAULT_VOLUME_SIZE: Quantity = quantity("20Gi")
"""Root EBS volume size when the provisioning config does not override it."""

DEFAULT_STORAGE_OVERHEAD: Quantity = quantity("5Gi")
"""Ephemeral storage consumed by the OS image on every supported family."""


class UnsupportedAMIFamilyError(Exception):
    """
    Raised by get_ami_family() when a family name is not in the lookup.

    ProvisioningConfig already rejects unknown names at validation time, so
    this only fires for callers that bypass the config model or inject a
    reduced family table.
    """

    def __init__(self, family: str) -> None:
        self.family = family
        super().__init__(f"unsupported AMI family {family!r}")


@dataclass(frozen=True)
class AMIFamily:
    """Static description of one AMI family."""
    name: str
    root_device_name: str
    default_volume_size: Quantity = DEFAULT_VOLUME_SIZE
    storage_overhead: Quantity = DEFAULT_STORAGE_OVERHEAD


AL2 = AMIFamily(
    name=AMI_FAMILY_AL2,
    root_device_name="/dev/xvda",
)

# Bottlerocket boots from a small OS volume; pods use the second (data) volume.
BOTTLEROCKET = AMIFamily(
    name=AMI_FAMILY_BOTTLEROCKET,
    root_device_name="/dev/xvdb",
)

UBUNTU = AMIFamily(
    name=AMI_FAMILY_UBUNTU,
    root_device_name="/dev/sda1",
)

DEFAULT_AMI_FAMILIES: Mapping[str, AMIFamily] = MappingProxyType({
    family.name: family for family in (AL2, BOTTLEROCKET, UBUNTU)
})


def get_ami_family(
    name: str,
    families: Mapping[str, AMIFamily] = DEFAULT_AMI_FAMILIES,
) -> AMIFamily:
    """
    Look up an AMI family by name.

    Which names (and container runtimes) are allowed is decided by
    ProvisioningConfig validation; this table only carries the storage facts.
    An injected table can override those facts for a supported name.

    Raises:
        UnsupportedAMIFamilyError: `name` is not in `families`.
    """
    try:
        return families[name]
    except KeyError:
        raise UnsupportedAMIFamilyError(name) from None

"""
autoscaler/cloudprovider — the instance-type derivation engine.

Public API:
    InstanceType                         — immutable derived model (composition root)
    IncompleteInstanceTypeMetadataError  — required metadata missing
    InstanceTypeProvider                 — batch construction for one config
    build_offerings / offerings_from_ec2 — offering helpers
    CapabilityCatalog                    — labels + AMI families + ENI table
    AMIFamily, get_ami_family, UnsupportedAMIFamilyError
    BranchInterfaceLimits
    normalize_architecture, is_canonical_architecture

Usage:
    from autoscaler.cloudprovider import InstanceType
    from autoscaler.shared import ProvisioningConfig, RawOfferingMetadata

    it = InstanceType(metadata, ProvisioningConfig(), offerings)
    it.resources, it.overhead, it.requirements, it.price
"""

from autoscaler.cloudprovider.amifamily import (
    AMIFamily,
    UnsupportedAMIFamilyError,
    get_ami_family,
)
from autoscaler.cloudprovider.architecture import (
    is_canonical_architecture,
    normalize_architecture,
)
from autoscaler.cloudprovider.branch_interfaces import BranchInterfaceLimits
from autoscaler.cloudprovider.catalog import CapabilityCatalog
from autoscaler.cloudprovider.instancetype import (
    IncompleteInstanceTypeMetadataError,
    InstanceType,
)
from autoscaler.cloudprovider.provider import (
    InstanceTypeProvider,
    build_offerings,
    offerings_from_ec2,
)

__all__ = [
    "AMIFamily",
    "UnsupportedAMIFamilyError",
    "get_ami_family",
    "is_canonical_architecture",
    "normalize_architecture",
    "BranchInterfaceLimits",
    "CapabilityCatalog",
    "IncompleteInstanceTypeMetadataError",
    "InstanceType",
    "InstanceTypeProvider",
    "build_offerings",
    "offerings_from_ec2",
]

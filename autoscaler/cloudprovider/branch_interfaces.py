"""
autoscaler/cloudprovider/branch_interfaces.py
──────────────────────────────────────────────
Branch-interface capability table (security groups for pods).

With pod ENIs enabled, the VPC resource controller attaches a trunk
interface to the node and hands each pod its own branch interface. Only
some machine types support trunking, and each supports a fixed number of
branch interfaces. The Resource Computer advertises that number as the
vpc.amazonaws.com/pod-eni extended resource.

The authoritative table is owned by the VPC resource controller. This module
ships the subset for common general-purpose / compute / memory families;
callers that need the full list inject their own Mapping through
CapabilityCatalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class BranchInterfaceLimits:
    """
    Trunking capability of one machine type.

    branch_interface       → number of branch ENIs (pods with their own
                             security groups) the type supports.
    is_trunking_compatible → False for types that cannot host a trunk ENI;
                             branch_interface is ignored for them.
    """
    branch_interface: int
    is_trunking_compatible: bool = True


DEFAULT_BRANCH_INTERFACE_LIMITS: Mapping[str, BranchInterfaceLimits] = MappingProxyType({
    "c5.large": BranchInterfaceLimits(branch_interface=9),
    "c5.xlarge": BranchInterfaceLimits(branch_interface=18),
    "c5.2xlarge": BranchInterfaceLimits(branch_interface=38),
    "c5.4xlarge": BranchInterfaceLimits(branch_interface=54),
    "m5.large": BranchInterfaceLimits(branch_interface=9),
    "m5.xlarge": BranchInterfaceLimits(branch_interface=18),
    "m5.2xlarge": BranchInterfaceLimits(branch_interface=38),
    "m5.4xlarge": BranchInterfaceLimits(branch_interface=54),
    "r5.large": BranchInterfaceLimits(branch_interface=9),
    "r5.xlarge": BranchInterfaceLimits(branch_interface=18),
    "r5.2xlarge": BranchInterfaceLimits(branch_interface=38),
    "t3.medium": BranchInterfaceLimits(branch_interface=0, is_trunking_compatible=False),
    "t3.large": BranchInterfaceLimits(branch_interface=0, is_trunking_compatible=False),
})

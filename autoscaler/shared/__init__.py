"""
autoscaler/shared — value types shared by every derivation component.

Public API:
    Quantity, ResourceList     — exact resource magnitudes
    Requirements               — label → admissible values
    LabelRegistry              — immutable label vocabulary
    RawOfferingMetadata        — raw machine-type metadata
    Offering, CapacityType     — where / how a type can be bought
    ProvisioningConfig         — operator choices (AMI family, overrides, flags)
"""

from autoscaler.shared.labels import DEFAULT_LABEL_REGISTRY, LabelRegistry
from autoscaler.shared.models import (
    BlockDevice,
    BlockDeviceMapping,
    CapacityType,
    GpuDevice,
    InferenceAccelerator,
    NetworkInfo,
    Offering,
    ProvisioningConfig,
    RawOfferingMetadata,
)
from autoscaler.shared.quantity import Quantity, ResourceList, quantity
from autoscaler.shared.requirements import Requirements

__all__ = [
    "DEFAULT_LABEL_REGISTRY",
    "LabelRegistry",
    "BlockDevice",
    "BlockDeviceMapping",
    "CapacityType",
    "GpuDevice",
    "InferenceAccelerator",
    "NetworkInfo",
    "Offering",
    "ProvisioningConfig",
    "RawOfferingMetadata",
    "Quantity",
    "ResourceList",
    "quantity",
    "Requirements",
]

"""
autoscaler/shared/models.py
───────────────────────────
Input data structures for the instance-type derivation engine.

Design philosophy
-----------------
Every model answers one question: "What does the engine *need to know*
about this machine type (or this provisioning setup) to derive capacity,
overhead, labels and a price score?"

All models are frozen. A RawOfferingMetadata or ProvisioningConfig is
shared read-only by every InstanceType built from it, possibly across
threads, so nothing here may change after validation.

Reading guide
-------------
Read top-to-bottom. Each model builds on the ones above it.
  SECTION 1  enumerations and AMI-family names
  SECTION 2  machine-type metadata (what the cloud says about a type)
  SECTION 3  offerings (where and how a type can be bought)
  SECTION 4  provisioning configuration (what the operator chose)
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from autoscaler.shared.quantity import Quantity


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 1: ENUMERATIONS
# ─────────────────────────────────────────────────────────────────────────────

class CapacityType(str, Enum):
    """
    Purchase model of an offering.

    ON_DEMAND → Reserved capacity. Predictable. Expensive.
    SPOT      → Spare capacity, reclaimable with a 2-minute warning.

    The values are the label values written to karpenter.sh/capacity-type.
    """
    ON_DEMAND = "on-demand"
    SPOT = "spot"


AMI_FAMILY_AL2 = "AL2"
AMI_FAMILY_BOTTLEROCKET = "Bottlerocket"
AMI_FAMILY_UBUNTU = "Ubuntu"

SUPPORTED_AMI_FAMILIES: Tuple[str, ...] = (
    AMI_FAMILY_BOTTLEROCKET,
    AMI_FAMILY_AL2,
    AMI_FAMILY_UBUNTU,
)

SUPPORTED_CONTAINER_RUNTIMES_BY_AMI_FAMILY: Mapping[str, FrozenSet[str]] = {
    AMI_FAMILY_BOTTLEROCKET: frozenset({"containerd"}),
    AMI_FAMILY_AL2: frozenset({"dockerd", "containerd"}),
    AMI_FAMILY_UBUNTU: frozenset({"dockerd", "containerd"}),
}


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 2: MACHINE-TYPE METADATA
# What a describe-instance-types call tells us about one machine type.
# ─────────────────────────────────────────────────────────────────────────────

class GpuDevice(BaseModel):
    """
    One GPU model attached to a machine type.

    A p4d.24xlarge reports a single descriptor:
        GpuDevice(name="A100", manufacturer="NVIDIA", count=8, memory_mib=40960)

    memory_mib is per GPU, not the total.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    manufacturer: str
    count: int = Field(0, ge=0)
    memory_mib: int = Field(0, ge=0, description="VRAM per GPU in MiB")


class InferenceAccelerator(BaseModel):
    """An inference accelerator (e.g. AWS Inferentia). Only the count is used."""
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    manufacturer: Optional[str] = None
    count: int = Field(0, ge=0)


class NetworkInfo(BaseModel):
    """
    Network-interface limits. These bound the number of pods a node can run
    when every pod gets its own VPC IP address.
    """
    model_config = ConfigDict(frozen=True)

    maximum_network_interfaces: int = Field(..., ge=0)
    ipv4_addresses_per_interface: int = Field(..., ge=1)


class RawOfferingMetadata(BaseModel):
    """
    Raw, provider-reported description of a purchasable machine type.

    Why vcpus / memory_mib / network are Optional:
        Cloud payloads are loaded as-is, and a partial payload is still a
        valid *payload*. It is not a valid *machine type*: InstanceType checks
        these three at construction and refuses to build without them
        (see missing_required_fields()).

    Optional sections (gpus, inference_accelerators, local_storage_gb) are
    simply empty / None when the type has no such hardware.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Machine-type name, e.g. 'm5.large'")
    vcpus: Optional[int] = Field(None, ge=1, description="Default vCPU count")
    memory_mib: Optional[int] = Field(None, ge=0, description="Physical memory in MiB")
    gpus: Tuple[GpuDevice, ...] = ()
    inference_accelerators: Tuple[InferenceAccelerator, ...] = ()
    network: Optional[NetworkInfo] = None
    architectures: Tuple[str, ...] = Field(
        (), description="Cloud architecture identifiers, e.g. ('x86_64',)"
    )
    local_storage_gb: Optional[int] = Field(
        None, ge=0, description="Total local instance storage in GB. None if EBS-only."
    )

    def missing_required_fields(self) -> List[str]:
        """Names of required fields that are absent. Empty when complete."""
        missing = []
        if self.vcpus is None:
            missing.append("vcpus")
        if self.memory_mib is None:
            missing.append("memory_mib")
        if self.network is None:
            missing.append("network")
        return missing

    @classmethod
    def from_ec2(cls, payload: Mapping[str, Any]) -> "RawOfferingMetadata":
        """
        Adapt one InstanceTypes[] item of an EC2 DescribeInstanceTypes
        response (boto3 shape, PascalCase keys) to this flat model.

        Missing sections stay None / empty; validation of required fields
        is the composition root's job, not the adapter's.
        """
        vcpu_info = payload.get("VCpuInfo") or {}
        memory_info = payload.get("MemoryInfo") or {}
        gpu_info = payload.get("GpuInfo") or {}
        accel_info = payload.get("InferenceAcceleratorInfo") or {}
        network_info = payload.get("NetworkInfo")
        processor_info = payload.get("ProcessorInfo") or {}
        storage_info = payload.get("InstanceStorageInfo")

        network = None
        if (
            network_info is not None
            and network_info.get("MaximumNetworkInterfaces") is not None
            and network_info.get("Ipv4AddressesPerInterface") is not None
        ):
            network = NetworkInfo(
                maximum_network_interfaces=network_info.get("MaximumNetworkInterfaces"),
                ipv4_addresses_per_interface=network_info.get("Ipv4AddressesPerInterface"),
            )

        return cls(
            name=payload["InstanceType"],
            vcpus=vcpu_info.get("DefaultVCpus"),
            memory_mib=memory_info.get("SizeInMiB"),
            gpus=tuple(
                GpuDevice(
                    name=gpu.get("Name", ""),
                    manufacturer=gpu.get("Manufacturer", ""),
                    count=gpu.get("Count") or 0,
                    memory_mib=(gpu.get("MemoryInfo") or {}).get("SizeInMiB") or 0,
                )
                for gpu in gpu_info.get("Gpus") or []
            ),
            inference_accelerators=tuple(
                InferenceAccelerator(
                    name=acc.get("Name"),
                    manufacturer=acc.get("Manufacturer"),
                    count=acc.get("Count") or 0,
                )
                for acc in accel_info.get("Accelerators") or []
            ),
            network=network,
            architectures=tuple(processor_info.get("SupportedArchitectures") or ()),
            local_storage_gb=(storage_info or {}).get("TotalSizeInGB"),
        )


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 3: OFFERINGS
# ─────────────────────────────────────────────────────────────────────────────

class Offering(BaseModel):
    """
    A purchasable (zone, capacity type) combination for a machine type.

    The set of offerings decides which values the zone and capacity-type
    requirements admit. No offerings → both requirement sets are empty.
    """
    model_config = ConfigDict(frozen=True)

    zone: str = Field(..., min_length=1, description="Availability zone, e.g. 'us-west-2a'")
    capacity_type: CapacityType = CapacityType.ON_DEMAND


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 4: PROVISIONING CONFIGURATION
# ─────────────────────────────────────────────────────────────────────────────

class _CamelModel(BaseModel):
    # Config documents use camelCase (amiFamily, blockDeviceMappings, …);
    # Python callers may use field names directly.
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class BlockDevice(_CamelModel):
    """EBS settings of one block-device override. Only the size matters here."""
    volume_size: Quantity


class BlockDeviceMapping(_CamelModel):
    """
    A block-device override from the provisioning config.

    If device_name matches the AMI family's root device, volume_size becomes
    the node's ephemeral-storage capacity.
    """
    device_name: str = Field(..., min_length=1)
    ebs: BlockDevice


class ProvisioningConfig(_CamelModel):
    """
    The operator's provisioning choices that affect derived capacity.

    Fields:
        ami_family            → OS image family: AL2 (default), Bottlerocket, Ubuntu.
                                Decides the root device name and storage overhead.
        block_device_mappings → Optional volume overrides. None = use family defaults.
        max_pods              → Explicit pod-capacity cap. None = derive from ENI limits.
        enable_pod_eni        → Advertise branch interfaces (security groups for pods)
                                on trunking-compatible types.
        container_runtime     → Optional runtime choice; must be supported by the family.

    One config is typically shared by every InstanceType of an evaluation
    cycle. It is frozen so that sharing is safe.
    """
    ami_family: str = AMI_FAMILY_AL2
    block_device_mappings: Optional[Tuple[BlockDeviceMapping, ...]] = None
    max_pods: Optional[int] = Field(None, ge=0)
    enable_pod_eni: bool = Field(False, alias="enablePodENI")
    container_runtime: Optional[str] = None

    @field_validator("ami_family")
    @classmethod
    def _check_ami_family(cls, value: str) -> str:
        if value not in SUPPORTED_AMI_FAMILIES:
            raise ValueError(
                f"unsupported AMI family {value!r}; expected one of "
                f"{', '.join(SUPPORTED_AMI_FAMILIES)}"
            )
        return value

    @model_validator(mode="after")
    def _check_container_runtime(self) -> "ProvisioningConfig":
        if self.container_runtime is None:
            return self
        supported = SUPPORTED_CONTAINER_RUNTIMES_BY_AMI_FAMILY[self.ami_family]
        if self.container_runtime not in supported:
            raise ValueError(
                f"container runtime {self.container_runtime!r} is not supported by "
                f"AMI family {self.ami_family!r}; expected one of {', '.join(sorted(supported))}"
            )
        return self

    def block_device_for(self, device_name: str) -> Optional[BlockDeviceMapping]:
        """The override for `device_name`, or None. First match wins."""
        for mapping in self.block_device_mappings or ():
            if mapping.device_name == device_name:
                return mapping
        return None

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ProvisioningConfig":
        """
        Load and validate a JSON provisioning document.

        Raises:
            OSError:                  file cannot be read.
            pydantic.ValidationError: content is not a valid config.
        """
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "ProvisioningConfig":
        """Validate an already-decoded document (e.g. from a CRD spec)."""
        return cls.model_validate(data)

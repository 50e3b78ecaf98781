"""
autoscaler/cloudprovider/resources.py
──────────────────────────────────────
Resource Computer: the capacity a node of a given machine type advertises.

Formulas
─────────
  cpu                        vCPU count
  memory                     floor(memory MiB × EC2_VM_AVAILABLE_MEMORY_FACTOR) Mi
  ephemeral-storage          root-device override size, else family default
  pods                       max_pods override, else ENI-limited pods:
                               max ENIs × (IPv4 per ENI − 1) + 2
  nvidia.com/gpu             Σ GPU counts with manufacturer "NVIDIA"
  amd.com/gpu                Σ GPU counts with manufacturer "AMD"
  aws.amazon.com/neuron      Σ inference-accelerator counts
  vpc.amazonaws.com/pod-eni  branch interfaces, if enabled AND listed AND trunking
  smarter-devices/fuse       1, always

Why "− 1" and "+ 2" in the pod formula?
    Each ENI's primary IPv4 address belongs to the node, not to a pod.
    The +2 covers the host-network pods (kube-proxy, aws-node) that never
    consume a VPC address.

Absent optional sections count as zero. Pure: no I/O, no mutation.
"""

from __future__ import annotations

from decimal import Decimal

from autoscaler.cloudprovider.catalog import CapabilityCatalog
from autoscaler.shared.models import ProvisioningConfig, RawOfferingMetadata
from autoscaler.shared.quantity import (
    RESOURCE_AMD_GPU,
    RESOURCE_AWS_NEURON,
    RESOURCE_AWS_POD_ENI,
    RESOURCE_CPU,
    RESOURCE_EPHEMERAL_STORAGE,
    RESOURCE_MEMORY,
    RESOURCE_NVIDIA_GPU,
    RESOURCE_PODS,
    RESOURCE_SMARTER_DEVICES_FUSE,
    Quantity,
    ResourceList,
)

EC2_VM_AVAILABLE_MEMORY_FACTOR: Decimal = Decimal("0.925")
"""Share of physical memory visible to the node.

Policy constant: assumes the hypervisor and firmware keep less than 7.25%
of the machine's memory. Not measured per type.
"""

SMARTER_DEVICES_FUSE_COUNT: int = 1
"""/dev/fuse device slots advertised on every node, regardless of hardware."""

MANUFACTURER_NVIDIA = "NVIDIA"
MANUFACTURER_AMD = "AMD"


def compute_resources(
    metadata: RawOfferingMetadata,
    config: ProvisioningConfig,
    catalog: CapabilityCatalog,
) -> ResourceList:
    """Capacity of one machine type. Required metadata must be present."""
    return ResourceList({
        RESOURCE_CPU: cpu(metadata),
        RESOURCE_MEMORY: memory(metadata),
        RESOURCE_EPHEMERAL_STORAGE: ephemeral_storage(config, catalog),
        RESOURCE_PODS: pods(metadata, config),
        RESOURCE_AWS_POD_ENI: aws_pod_eni(metadata, config, catalog),
        RESOURCE_NVIDIA_GPU: gpus_by_manufacturer(metadata, MANUFACTURER_NVIDIA),
        RESOURCE_AMD_GPU: gpus_by_manufacturer(metadata, MANUFACTURER_AMD),
        RESOURCE_AWS_NEURON: aws_neurons(metadata),
        RESOURCE_SMARTER_DEVICES_FUSE: Quantity(SMARTER_DEVICES_FUSE_COUNT),
    })


# ── Individual resources ──────────────────────────────────────────────────────

def cpu(metadata: RawOfferingMetadata) -> Quantity:
    return Quantity(metadata.vcpus)


def memory(metadata: RawOfferingMetadata) -> Quantity:
    """Usable memory, floored to a whole MiB: 8192 MiB → 7577Mi."""
    usable_mib = int(Decimal(metadata.memory_mib) * EC2_VM_AVAILABLE_MEMORY_FACTOR)
    return Quantity.from_mebibytes(usable_mib)


def ephemeral_storage(config: ProvisioningConfig, catalog: CapabilityCatalog) -> Quantity:
    """
    Size of the volume that backs pod storage.

    Uses the block-device override whose device name matches the AMI family's
    root device; any other override (extra data volumes) is ignored here.
    """
    family = catalog.ami_family(config.ami_family)
    override = config.block_device_for(family.root_device_name)
    if override is not None:
        return override.ebs.volume_size
    return family.default_volume_size


def eni_limited_pods(metadata: RawOfferingMetadata) -> int:
    """Pods the network interfaces can address: ENIs × (IPs per ENI − 1) + 2."""
    network = metadata.network
    return network.maximum_network_interfaces * (network.ipv4_addresses_per_interface - 1) + 2


def pods(metadata: RawOfferingMetadata, config: ProvisioningConfig) -> Quantity:
    if config.max_pods is not None:
        return Quantity(config.max_pods)
    return Quantity(eni_limited_pods(metadata))


def aws_pod_eni(
    metadata: RawOfferingMetadata,
    config: ProvisioningConfig,
    catalog: CapabilityCatalog,
) -> Quantity:
    limits = catalog.branch_interface_limits(metadata.name)
    if config.enable_pod_eni and limits is not None and limits.is_trunking_compatible:
        return Quantity(limits.branch_interface)
    return Quantity(0)


def gpus_by_manufacturer(metadata: RawOfferingMetadata, manufacturer: str) -> Quantity:
    """Total GPUs from one manufacturer. Exact match: "NVIDIA", not "nvidia"."""
    return Quantity(sum(gpu.count for gpu in metadata.gpus if gpu.manufacturer == manufacturer))


def aws_neurons(metadata: RawOfferingMetadata) -> Quantity:
    return Quantity(sum(accelerator.count for accelerator in metadata.inference_accelerators))

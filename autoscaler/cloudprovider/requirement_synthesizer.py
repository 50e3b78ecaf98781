"""
autoscaler/cloudprovider/requirement_synthesizer.py
────────────────────────────────────────────────────
Requirement Synthesizer: the label → admissible-values mapping a machine
type satisfies.

What gets emitted
──────────────────
  node.kubernetes.io/instance-type   {name}
  kubernetes.io/arch                 {normalised architecture}
  kubernetes.io/os                   {"linux"}
  topology.kubernetes.io/zone        distinct offering zones   (may be empty)
  karpenter.sh/capacity-type         distinct capacity types   (may be empty)
  <domain>/instance.cpu              {"<vcpus>"}
  <domain>/instance.memory           {"<memory MiB>"}
  <domain>/instance.family / .size   only if the name splits into exactly
                                     two parts on "."  ("m5.large" → m5, large)
  <domain>/instance.gpu.*            only if exactly ONE distinct GPU model

Known limitation
─────────────────
A machine type reporting several distinct GPU models gets no GPU labels at
all. There is no way to express "4 of model A and 2 of model B" with single
valued labels, so none are written. The GPU *resources* are still counted
per manufacturer by the Resource Computer.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from autoscaler.cloudprovider.architecture import normalize_architecture
from autoscaler.shared.labels import (
    LABEL_ARCH,
    LABEL_CAPACITY_TYPE,
    LABEL_INSTANCE_TYPE,
    LABEL_OS,
    LABEL_TOPOLOGY_ZONE,
    OPERATING_SYSTEM_LINUX,
    LabelRegistry,
)
from autoscaler.shared.models import GpuDevice, Offering, RawOfferingMetadata
from autoscaler.shared.requirements import Requirements

logger = logging.getLogger(__name__)

INSTANCE_TYPE_SEPARATOR = "."


def lower_kebab_case(value: str) -> str:
    """'Tesla V100' → 'tesla-v100'. Spaces become hyphens, then lowercase."""
    return value.replace(" ", "-").lower()


def compute_requirements(
    metadata: RawOfferingMetadata,
    offerings: Sequence[Offering],
    labels: LabelRegistry,
) -> Requirements:
    """
    Build the Requirements of one machine type.

    Assumes vcpus and memory_mib are present (the composition root checks
    this before calling).
    """
    requirements = Requirements({
        # Well known upstream
        LABEL_INSTANCE_TYPE: {metadata.name},
        LABEL_ARCH: {normalize_architecture(metadata.architectures, labels.architectures)},
        LABEL_OS: {OPERATING_SYSTEM_LINUX},
        LABEL_TOPOLOGY_ZONE: {offering.zone for offering in offerings},
        LABEL_CAPACITY_TYPE: {offering.capacity_type.value for offering in offerings},
        # Resources
        labels.instance_cpu: {str(metadata.vcpus)},
        labels.instance_memory: {str(metadata.memory_mib)},
    })

    parts = metadata.name.split(INSTANCE_TYPE_SEPARATOR)
    if len(parts) == 2:
        requirements = requirements.add({
            labels.instance_family: {parts[0]},
            labels.instance_size: {parts[1]},
        })

    gpu_labels = _gpu_requirements(metadata.name, metadata.gpus, labels)
    if gpu_labels:
        requirements = requirements.add(gpu_labels)
    return requirements


def _gpu_requirements(
    name: str,
    gpus: Iterable[GpuDevice],
    labels: LabelRegistry,
) -> Dict[str, Set[str]]:
    models: Dict[Tuple[str, str, int], List[GpuDevice]] = {}
    for gpu in gpus:
        models.setdefault((gpu.manufacturer, gpu.name, gpu.memory_mib), []).append(gpu)

    if not models:
        return {}
    if len(models) > 1:
        logger.debug(
            "Instance type %s reports %d distinct GPU models; omitting GPU labels.",
            name, len(models),
        )
        return {}

    (manufacturer, gpu_name, memory_mib), devices = next(iter(models.items()))
    return {
        labels.instance_gpu_name: {lower_kebab_case(gpu_name)},
        labels.instance_gpu_manufacturer: {lower_kebab_case(manufacturer)},
        labels.instance_gpu_count: {str(sum(gpu.count for gpu in devices))},
        labels.instance_gpu_memory: {str(memory_mib)},
    }

"""
autoscaler/shared/labels.py
───────────────────────────
The label vocabulary this package emits, and the registry that holds it.

Every key below is a contract string: the provisioning scheduler, node
templates and user-written node selectors match against them verbatim.
Renaming one is a breaking change.

Two groups of keys
------------------
  Upstream (well known to every Kubernetes component):
      node.kubernetes.io/instance-type, kubernetes.io/arch, kubernetes.io/os,
      topology.kubernetes.io/zone, karpenter.sh/capacity-type

  Provider domain (LABEL_DOMAIN = "karpenter.k8s.aws"):
      <domain>/instance.family, .size, .cpu, .memory,
      <domain>/instance.gpu.name, .gpu.manufacturer, .gpu.count, .gpu.memory

The registry
------------
Instead of a process-wide mutable set that every importer appends to,
LabelRegistry is a frozen value built once and passed to whoever needs it.
Tests can build their own registry (another domain, another architecture
table) without touching global state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 1: UPSTREAM LABELS AND VALUES
# ─────────────────────────────────────────────────────────────────────────────

LABEL_INSTANCE_TYPE = "node.kubernetes.io/instance-type"
LABEL_ARCH = "kubernetes.io/arch"
LABEL_OS = "kubernetes.io/os"
LABEL_TOPOLOGY_ZONE = "topology.kubernetes.io/zone"
LABEL_CAPACITY_TYPE = "karpenter.sh/capacity-type"

ARCHITECTURE_AMD64 = "amd64"
ARCHITECTURE_ARM64 = "arm64"
OPERATING_SYSTEM_LINUX = "linux"


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 2: PROVIDER-DOMAIN LABELS
# ─────────────────────────────────────────────────────────────────────────────

LABEL_DOMAIN = "karpenter.k8s.aws"

INSTANCE_FAMILY_LABEL_KEY = LABEL_DOMAIN + "/instance.family"
INSTANCE_SIZE_LABEL_KEY = LABEL_DOMAIN + "/instance.size"
INSTANCE_CPU_LABEL_KEY = LABEL_DOMAIN + "/instance.cpu"
INSTANCE_MEMORY_LABEL_KEY = LABEL_DOMAIN + "/instance.memory"
INSTANCE_GPU_NAME_LABEL_KEY = LABEL_DOMAIN + "/instance.gpu.name"
INSTANCE_GPU_MANUFACTURER_LABEL_KEY = LABEL_DOMAIN + "/instance.gpu.manufacturer"
INSTANCE_GPU_COUNT_LABEL_KEY = LABEL_DOMAIN + "/instance.gpu.count"
INSTANCE_GPU_MEMORY_LABEL_KEY = LABEL_DOMAIN + "/instance.gpu.memory"

# Cloud vocabulary → Kubernetes vocabulary. Exactly two entries: x86_64 is
# renamed, arm64 passes through.
AWS_TO_KUBE_ARCHITECTURES: Mapping[str, str] = MappingProxyType({
    "x86_64": ARCHITECTURE_AMD64,
    ARCHITECTURE_ARM64: ARCHITECTURE_ARM64,
})

_UPSTREAM_WELL_KNOWN: FrozenSet[str] = frozenset({
    LABEL_INSTANCE_TYPE,
    LABEL_ARCH,
    LABEL_OS,
    LABEL_TOPOLOGY_ZONE,
    LABEL_CAPACITY_TYPE,
})


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 3: REGISTRY
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LabelRegistry:
    """
    Immutable label vocabulary for one cloud provider.

    Fields:
        domain                   → provider label domain, e.g. "karpenter.k8s.aws".
                                   All instance.* keys are derived from it.
        architectures            → cloud architecture id → Kubernetes arch.
        restricted_label_domains → domains users may not set labels under
                                   (only the provider writes them).
    """
    domain: str = LABEL_DOMAIN
    architectures: Mapping[str, str] = field(
        default_factory=lambda: AWS_TO_KUBE_ARCHITECTURES
    )
    restricted_label_domains: FrozenSet[str] = frozenset({LABEL_DOMAIN})

    # Holds a MappingProxyType, so instances are compared but never hashed.
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        # Freeze caller-supplied dicts so the registry cannot change later.
        object.__setattr__(self, "architectures", MappingProxyType(dict(self.architectures)))
        object.__setattr__(self, "restricted_label_domains", frozenset(self.restricted_label_domains))

    # ── Derived keys ──────────────────────────────────────────────────────────

    @property
    def instance_family(self) -> str:
        return self.domain + "/instance.family"

    @property
    def instance_size(self) -> str:
        return self.domain + "/instance.size"

    @property
    def instance_cpu(self) -> str:
        return self.domain + "/instance.cpu"

    @property
    def instance_memory(self) -> str:
        return self.domain + "/instance.memory"

    @property
    def instance_gpu_name(self) -> str:
        return self.domain + "/instance.gpu.name"

    @property
    def instance_gpu_manufacturer(self) -> str:
        return self.domain + "/instance.gpu.manufacturer"

    @property
    def instance_gpu_count(self) -> str:
        return self.domain + "/instance.gpu.count"

    @property
    def instance_gpu_memory(self) -> str:
        return self.domain + "/instance.gpu.memory"

    @property
    def provider_labels(self) -> FrozenSet[str]:
        """All provider-domain keys this registry can emit."""
        return frozenset({
            self.instance_family,
            self.instance_size,
            self.instance_cpu,
            self.instance_memory,
            self.instance_gpu_name,
            self.instance_gpu_manufacturer,
            self.instance_gpu_count,
            self.instance_gpu_memory,
        })

    @property
    def well_known_labels(self) -> FrozenSet[str]:
        """Upstream keys plus provider keys."""
        return _UPSTREAM_WELL_KNOWN | self.provider_labels

    # ── Queries ───────────────────────────────────────────────────────────────

    def is_well_known(self, label: str) -> bool:
        return label in self.well_known_labels

    def is_restricted(self, label: str) -> bool:
        """
        True if `label` lives under a restricted domain (or a subdomain of one).

        "karpenter.k8s.aws/instance.cpu" and "x.karpenter.k8s.aws/foo" are
        restricted; "example.com/team" is not.
        """
        domain = _label_domain(label)
        if domain is None:
            return False
        return any(
            domain == restricted or domain.endswith("." + restricted)
            for restricted in self.restricted_label_domains
        )


def _label_domain(label: str) -> Optional[str]:
    if "/" not in label:
        return None
    return label.split("/", 1)[0]


DEFAULT_LABEL_REGISTRY = LabelRegistry()

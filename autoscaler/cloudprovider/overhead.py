"""
autoscaler/cloudprovider/overhead.py
─────────────────────────────────────
Overhead Computer: resources the node runtime withholds from pods.

allocatable = capacity − overhead. The scheduler must subtract this before
bin-packing, otherwise it would plan pods into memory the kubelet keeps.

The three entries
──────────────────
1. cpu:
     SYSTEM_RESERVED_CPU_MILLI (100m)
   + kube-reserved, banded on the machine's total milli-CPU:

       band (milli-CPU)     rate
       0     – 1000         6%
       1000  – 2000         1%
       2000  – 4000         0.5%
       4000  – 2^31         0.25%

     A band contributes trunc((min(total, end) − start) × rate) when its
     start ≤ total. Bands above the machine contribute nothing.
       2 vCPU  → 100 + 60 + 10              = 170m
       4 vCPU  → 100 + 60 + 10 + 10         = 180m
       96 vCPU → 100 + 60 + 10 + 10 + 230   = 410m

     Rates are held as integer parts-per-100000 so the sum is exact;
     the bands are evaluated together as numpy int64 vectors.

2. memory:
     kube-reserved (11 × pods + 255) + system-reserved 100 + eviction 100, MiB.
     pods is ALWAYS the ENI-limited value. An administrative max_pods cap
     lowers how many pods run, not how much the kubelet reserves.

3. ephemeral-storage:
     the AMI family's storage overhead constant.

Deterministic and total: always exactly three entries.
"""

from __future__ import annotations

import numpy as np

from autoscaler.cloudprovider.catalog import CapabilityCatalog
from autoscaler.cloudprovider.resources import cpu, eni_limited_pods
from autoscaler.shared.models import ProvisioningConfig, RawOfferingMetadata
from autoscaler.shared.quantity import (
    RESOURCE_CPU,
    RESOURCE_EPHEMERAL_STORAGE,
    RESOURCE_MEMORY,
    Quantity,
    ResourceList,
)

SYSTEM_RESERVED_CPU_MILLI: int = 100
SYSTEM_RESERVED_MEMORY_MIB: int = 100
EVICTION_THRESHOLD_MEMORY_MIB: int = 100
"""Default kubelet hard eviction threshold (memory.available < 100Mi)."""

KUBE_RESERVED_MEMORY_PER_POD_MIB: int = 11
KUBE_RESERVED_MEMORY_BASE_MIB: int = 255

_RATE_DENOMINATOR = 100_000

# (start, end, rate in parts per 100000), milli-CPU
CPU_OVERHEAD_BANDS = (
    (0, 1000, 6_000),       # 6%
    (1000, 2000, 1_000),    # 1%
    (2000, 4000, 500),      # 0.5%
    (4000, 1 << 31, 250),   # 0.25%
)

_BAND_STARTS = np.array([band[0] for band in CPU_OVERHEAD_BANDS], dtype=np.int64)
_BAND_ENDS = np.array([band[1] for band in CPU_OVERHEAD_BANDS], dtype=np.int64)
_BAND_RATES = np.array([band[2] for band in CPU_OVERHEAD_BANDS], dtype=np.int64)


def compute_overhead(
    metadata: RawOfferingMetadata,
    config: ProvisioningConfig,
    catalog: CapabilityCatalog,
) -> ResourceList:
    family = catalog.ami_family(config.ami_family)
    return ResourceList({
        RESOURCE_CPU: Quantity.from_milli(cpu_overhead_milli(cpu(metadata).milli_value())),
        RESOURCE_MEMORY: Quantity.from_mebibytes(memory_overhead_mib(eni_limited_pods(metadata))),
        RESOURCE_EPHEMERAL_STORAGE: family.storage_overhead,
    })


def cpu_overhead_milli(total_milli_cpu: int) -> int:
    """System-reserved plus banded kube-reserved CPU, in milli-CPU."""
    covered = np.minimum(total_milli_cpu, _BAND_ENDS) - _BAND_STARTS
    covered = np.where(_BAND_STARTS <= total_milli_cpu, covered, 0)
    kube_reserved = (covered * _BAND_RATES) // _RATE_DENOMINATOR
    return SYSTEM_RESERVED_CPU_MILLI + int(kube_reserved.sum())


def memory_overhead_mib(eni_pods: int) -> int:
    kube_reserved = KUBE_RESERVED_MEMORY_PER_POD_MIB * eni_pods + KUBE_RESERVED_MEMORY_BASE_MIB
    return kube_reserved + SYSTEM_RESERVED_MEMORY_MIB + EVICTION_THRESHOLD_MEMORY_MIB

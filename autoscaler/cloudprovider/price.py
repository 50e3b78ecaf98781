"""
autoscaler/cloudprovider/price.py
──────────────────────────────────
Price Heuristic: a dimensionless score that ranks machine types.

    price = 1     × vCPU
          + 1/1024 × memory MiB        (i.e. 1 per GiB)
          + 5     × GPU count
          + 5     × inference-accelerator count
          + 0.01  × local storage GB

This is NOT money. It exists so that, among machine types that all satisfy
a workload, the scheduler prefers the smaller one. Every weight is positive,
so the score is strictly monotonic in each input; ties are left to the
consumer.
"""

from __future__ import annotations

import numpy as np

from autoscaler.shared.models import RawOfferingMetadata

CPU_COST_WEIGHT: float = 1.0
MEMORY_MIB_COST_WEIGHT: float = 1 / 1024.0
GPU_COST_WEIGHT: float = 5.0
INFERENCE_COST_WEIGHT: float = 5.0
LOCAL_STORAGE_COST_WEIGHT: float = 1 / 100.0

_WEIGHTS = np.array(
    [
        CPU_COST_WEIGHT,
        MEMORY_MIB_COST_WEIGHT,
        GPU_COST_WEIGHT,
        INFERENCE_COST_WEIGHT,
        LOCAL_STORAGE_COST_WEIGHT,
    ],
    dtype=np.float64,
)


def compute_price(metadata: RawOfferingMetadata) -> float:
    magnitudes = np.array(
        [
            metadata.vcpus,
            metadata.memory_mib,
            sum(gpu.count for gpu in metadata.gpus),
            sum(accelerator.count for accelerator in metadata.inference_accelerators),
            metadata.local_storage_gb or 0,
        ],
        dtype=np.float64,
    )
    return float(_WEIGHTS @ magnitudes)

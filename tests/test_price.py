"""
tests/test_price.py
────────────────────
Test suite for autoscaler/cloudprovider/price.py

The price is a ranking heuristic. We check the weights and that it is
monotonic in every input; absolute values only matter through ordering.
"""

from __future__ import annotations

from typing import Optional, Sequence

import pytest

from autoscaler.cloudprovider.price import (
    CPU_COST_WEIGHT,
    GPU_COST_WEIGHT,
    INFERENCE_COST_WEIGHT,
    LOCAL_STORAGE_COST_WEIGHT,
    MEMORY_MIB_COST_WEIGHT,
    compute_price,
)
from autoscaler.shared.models import (
    GpuDevice,
    InferenceAccelerator,
    NetworkInfo,
    RawOfferingMetadata,
)


def _make_metadata(
    vcpus: int = 2,
    memory_mib: int = 8192,
    gpu_count: int = 0,
    accelerator_count: int = 0,
    local_storage_gb: Optional[int] = None,
) -> RawOfferingMetadata:
    gpus: Sequence[GpuDevice] = ()
    if gpu_count:
        gpus = (GpuDevice(name="T4", manufacturer="NVIDIA", count=gpu_count, memory_mib=16384),)
    accelerators: Sequence[InferenceAccelerator] = ()
    if accelerator_count:
        accelerators = (InferenceAccelerator(name="Inferentia", count=accelerator_count),)
    return RawOfferingMetadata(
        name="test.large",
        vcpus=vcpus,
        memory_mib=memory_mib,
        gpus=gpus,
        inference_accelerators=accelerators,
        local_storage_gb=local_storage_gb,
        network=NetworkInfo(maximum_network_interfaces=3, ipv4_addresses_per_interface=10),
    )


class TestWeights:

    def test_weight_constants(self) -> None:
        assert CPU_COST_WEIGHT == 1.0
        assert MEMORY_MIB_COST_WEIGHT == pytest.approx(1 / 1024)
        assert GPU_COST_WEIGHT == 5.0
        assert INFERENCE_COST_WEIGHT == 5.0
        assert LOCAL_STORAGE_COST_WEIGHT == pytest.approx(0.01)

    def test_m5_large(self) -> None:
        """2 vCPU + 8 GiB → 2 + 8 = 10."""
        assert compute_price(_make_metadata()) == pytest.approx(10.0)

    def test_all_terms(self) -> None:
        """96 + 1152 + 5×8 + 5×2 + 0.01×8000 = 1378."""
        metadata = _make_metadata(
            vcpus=96,
            memory_mib=1179648,
            gpu_count=8,
            accelerator_count=2,
            local_storage_gb=8000,
        )
        assert compute_price(metadata) == pytest.approx(1378.0)

    def test_returns_python_float(self) -> None:
        assert type(compute_price(_make_metadata())) is float


class TestMonotonicity:

    @pytest.mark.parametrize("field, low, high", [
        ("vcpus", 2, 4),
        ("memory_mib", 8192, 16384),
        ("gpu_count", 0, 1),
        ("accelerator_count", 0, 1),
        ("local_storage_gb", 0, 100),
    ])
    def test_strictly_increasing(self, field: str, low: int, high: int) -> None:
        assert compute_price(_make_metadata(**{field: low})) < compute_price(_make_metadata(**{field: high}))

    def test_vcpu_sweep(self) -> None:
        prices = [compute_price(_make_metadata(vcpus=n)) for n in (1, 2, 4, 8, 16, 32, 64)]
        assert all(a < b for a, b in zip(prices, prices[1:]))

    def test_missing_local_storage_equals_zero(self) -> None:
        assert compute_price(_make_metadata(local_storage_gb=None)) == compute_price(
            _make_metadata(local_storage_gb=0)
        )

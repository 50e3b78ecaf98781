"""
tests/test_requirement_synthesizer.py
──────────────────────────────────────
Test suite for autoscaler/cloudprovider/architecture.py and
autoscaler/cloudprovider/requirement_synthesizer.py

What we are testing
────────────────────
The Requirements mapping is what pod node-selectors are matched against.
A wrong or missing label silently makes a machine type unschedulable (or,
worse, schedulable for pods it cannot run), so every key is checked.

Test groups
────────────
Group 1: Architecture Normalizer — table lookup and diagnostic fallback
Group 2: Core labels            — type, arch, os, cpu, memory
Group 3: Offerings              — zone / capacity-type sets, empty offerings
Group 4: Family / size split
Group 5: GPU labels             — single model, multi-model omission, kebab case
"""

from __future__ import annotations

import logging
from typing import List, Sequence

import pytest

from autoscaler.cloudprovider.architecture import (
    is_canonical_architecture,
    normalize_architecture,
)
from autoscaler.cloudprovider.requirement_synthesizer import (
    compute_requirements,
    lower_kebab_case,
)
from autoscaler.shared.labels import (
    DEFAULT_LABEL_REGISTRY,
    INSTANCE_CPU_LABEL_KEY,
    INSTANCE_FAMILY_LABEL_KEY,
    INSTANCE_GPU_COUNT_LABEL_KEY,
    INSTANCE_GPU_MANUFACTURER_LABEL_KEY,
    INSTANCE_GPU_MEMORY_LABEL_KEY,
    INSTANCE_GPU_NAME_LABEL_KEY,
    INSTANCE_MEMORY_LABEL_KEY,
    INSTANCE_SIZE_LABEL_KEY,
    LABEL_ARCH,
    LABEL_CAPACITY_TYPE,
    LABEL_INSTANCE_TYPE,
    LABEL_OS,
    LABEL_TOPOLOGY_ZONE,
    LabelRegistry,
)
from autoscaler.shared.models import (
    CapacityType,
    GpuDevice,
    NetworkInfo,
    Offering,
    RawOfferingMetadata,
)

GPU_LABELS = (
    INSTANCE_GPU_NAME_LABEL_KEY,
    INSTANCE_GPU_MANUFACTURER_LABEL_KEY,
    INSTANCE_GPU_COUNT_LABEL_KEY,
    INSTANCE_GPU_MEMORY_LABEL_KEY,
)


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _make_metadata(
    name: str = "m5.large",
    vcpus: int = 2,
    memory_mib: int = 8192,
    architectures: Sequence[str] = ("x86_64",),
    gpus: Sequence[GpuDevice] = (),
) -> RawOfferingMetadata:
    return RawOfferingMetadata(
        name=name,
        vcpus=vcpus,
        memory_mib=memory_mib,
        architectures=tuple(architectures),
        gpus=tuple(gpus),
        network=NetworkInfo(maximum_network_interfaces=3, ipv4_addresses_per_interface=10),
    )


def _offerings() -> List[Offering]:
    return [
        Offering(zone="us-west-2a", capacity_type=CapacityType.ON_DEMAND),
        Offering(zone="us-west-2a", capacity_type=CapacityType.SPOT),
        Offering(zone="us-west-2b", capacity_type=CapacityType.SPOT),
    ]


def _requirements(metadata: RawOfferingMetadata, offerings: Sequence[Offering] = ()):
    return compute_requirements(metadata, list(offerings), DEFAULT_LABEL_REGISTRY)


# ─────────────────────────────────────────────────────────────────────────────
# Group 1: Architecture Normalizer
# ─────────────────────────────────────────────────────────────────────────────

class TestArchitectureNormalizer:

    def test_x86_64_is_renamed(self) -> None:
        assert normalize_architecture(["x86_64"]) == "amd64"

    def test_arm64_passes_through(self) -> None:
        assert normalize_architecture(["arm64"]) == "arm64"

    def test_first_recognised_entry_wins(self) -> None:
        assert normalize_architecture(["i386", "x86_64"]) == "amd64"

    def test_unrecognised_returns_diagnostic_string(self) -> None:
        value = normalize_architecture(["graviton3x"])
        assert value == "[graviton3x]"
        assert not is_canonical_architecture(value)

    def test_unrecognised_list_is_joined(self) -> None:
        assert normalize_architecture(["i386", "x86_64_mac"]) == "[i386 x86_64_mac]"

    def test_empty_list(self) -> None:
        assert normalize_architecture([]) == "[]"

    def test_canonical_values(self) -> None:
        assert is_canonical_architecture("amd64")
        assert is_canonical_architecture("arm64")
        assert not is_canonical_architecture("x86_64")

    def test_custom_table(self) -> None:
        table = {"riscv64": "riscv64"}
        assert normalize_architecture(["riscv64"], table) == "riscv64"
        assert normalize_architecture(["x86_64"], table) == "[x86_64]"


# ─────────────────────────────────────────────────────────────────────────────
# Group 2: Core labels
# ─────────────────────────────────────────────────────────────────────────────

class TestCoreLabels:

    def test_single_valued_labels(self) -> None:
        reqs = _requirements(_make_metadata(), _offerings())
        assert reqs[LABEL_INSTANCE_TYPE] == {"m5.large"}
        assert reqs[LABEL_ARCH] == {"amd64"}
        assert reqs[LABEL_OS] == {"linux"}
        assert reqs[INSTANCE_CPU_LABEL_KEY] == {"2"}
        assert reqs[INSTANCE_MEMORY_LABEL_KEY] == {"8192"}

    def test_unrecognised_architecture_label_carries_diagnostic(self) -> None:
        reqs = _requirements(_make_metadata(architectures=["graviton3x"]))
        assert reqs[LABEL_ARCH] == {"[graviton3x]"}

    def test_custom_registry_domain(self) -> None:
        registry = LabelRegistry(domain="example.cloud")
        reqs = compute_requirements(_make_metadata(), [], registry)
        assert reqs["example.cloud/instance.cpu"] == {"2"}
        assert not reqs.has(INSTANCE_CPU_LABEL_KEY)


# ─────────────────────────────────────────────────────────────────────────────
# Group 3: Offerings
# ─────────────────────────────────────────────────────────────────────────────

class TestOfferingLabels:

    def test_distinct_zones_and_capacity_types(self) -> None:
        reqs = _requirements(_make_metadata(), _offerings())
        assert reqs[LABEL_TOPOLOGY_ZONE] == {"us-west-2a", "us-west-2b"}
        assert reqs[LABEL_CAPACITY_TYPE] == {"on-demand", "spot"}

    def test_no_offerings_yields_present_but_empty_sets(self) -> None:
        """Empty means 'nothing admissible', not 'anything goes'."""
        reqs = _requirements(_make_metadata(), [])
        assert reqs.has(LABEL_TOPOLOGY_ZONE)
        assert reqs.has(LABEL_CAPACITY_TYPE)
        assert reqs[LABEL_TOPOLOGY_ZONE] == frozenset()
        assert reqs[LABEL_CAPACITY_TYPE] == frozenset()


# ─────────────────────────────────────────────────────────────────────────────
# Group 4: Family / size
# ─────────────────────────────────────────────────────────────────────────────

class TestFamilyAndSize:

    def test_two_part_name_is_split(self) -> None:
        reqs = _requirements(_make_metadata(name="m5.large"))
        assert reqs[INSTANCE_FAMILY_LABEL_KEY] == {"m5"}
        assert reqs[INSTANCE_SIZE_LABEL_KEY] == {"large"}

    @pytest.mark.parametrize("name", ["metal", "u-6tb1.metal.extra"])
    def test_other_names_omit_both_labels(self, name: str) -> None:
        reqs = _requirements(_make_metadata(name=name))
        assert not reqs.has(INSTANCE_FAMILY_LABEL_KEY)
        assert not reqs.has(INSTANCE_SIZE_LABEL_KEY)
        assert reqs[LABEL_INSTANCE_TYPE] == {name}


# ─────────────────────────────────────────────────────────────────────────────
# Group 5: GPU labels
# ─────────────────────────────────────────────────────────────────────────────

class TestGpuLabels:

    def test_single_gpu_model(self) -> None:
        gpu = GpuDevice(name="A100", manufacturer="NVIDIA", count=8, memory_mib=40960)
        reqs = _requirements(_make_metadata(name="p4d.24xlarge", vcpus=96, gpus=[gpu]))
        assert reqs[INSTANCE_GPU_NAME_LABEL_KEY] == {"a100"}
        assert reqs[INSTANCE_GPU_MANUFACTURER_LABEL_KEY] == {"nvidia"}
        assert reqs[INSTANCE_GPU_COUNT_LABEL_KEY] == {"8"}
        assert reqs[INSTANCE_GPU_MEMORY_LABEL_KEY] == {"40960"}

    def test_multiple_gpu_models_omit_all_gpu_labels(self, caplog: pytest.LogCaptureFixture) -> None:
        gpus = [
            GpuDevice(name="T4", manufacturer="NVIDIA", count=4, memory_mib=16384),
            GpuDevice(name="Radeon Pro V520", manufacturer="AMD", count=2, memory_mib=8192),
        ]
        with caplog.at_level(logging.DEBUG, logger="autoscaler.cloudprovider.requirement_synthesizer"):
            reqs = _requirements(_make_metadata(name="mixed.8xlarge", gpus=gpus))

        for key in GPU_LABELS:
            assert not reqs.has(key)
        assert "distinct GPU models" in caplog.text

    def test_no_gpus_no_gpu_labels(self) -> None:
        reqs = _requirements(_make_metadata())
        for key in GPU_LABELS:
            assert not reqs.has(key)

    def test_repeated_descriptor_of_one_model_counts_as_one_model(self) -> None:
        gpu = GpuDevice(name="T4", manufacturer="NVIDIA", count=1, memory_mib=16384)
        reqs = _requirements(_make_metadata(gpus=[gpu, gpu]))
        assert reqs[INSTANCE_GPU_NAME_LABEL_KEY] == {"t4"}
        assert reqs[INSTANCE_GPU_COUNT_LABEL_KEY] == {"2"}

    def test_gpu_name_is_kebab_cased(self) -> None:
        gpu = GpuDevice(name="Radeon Pro V520", manufacturer="AMD", count=1, memory_mib=8192)
        reqs = _requirements(_make_metadata(name="g4ad.xlarge", gpus=[gpu]))
        assert reqs[INSTANCE_GPU_NAME_LABEL_KEY] == {"radeon-pro-v520"}
        assert reqs[INSTANCE_GPU_MANUFACTURER_LABEL_KEY] == {"amd"}

    @pytest.mark.parametrize("raw, expected", [
        ("Tesla V100", "tesla-v100"),
        ("NVIDIA", "nvidia"),
        ("a  b", "a--b"),
        ("", ""),
    ])
    def test_lower_kebab_case(self, raw: str, expected: str) -> None:
        assert lower_kebab_case(raw) == expected

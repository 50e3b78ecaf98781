"""
autoscaler/cloudprovider/architecture.py
─────────────────────────────────────────
Architecture Normalizer: cloud architecture ids → kubernetes.io/arch values.

EC2 reports ("x86_64",) or ("arm64",) (occasionally more than one, e.g.
("i386", "x86_64")). Kubernetes expects "amd64" / "arm64". The first
reported id found in the table wins.

An unrecognised list is NOT an error here. The joined raw list is returned
as a diagnostic string, e.g. "[graviton3x]", so the value shows up readably
in logs and label dumps. It is never a canonical architecture; consumers
that treat architecture as a hard constraint must check
is_canonical_architecture() and reject the machine type.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from autoscaler.shared.labels import AWS_TO_KUBE_ARCHITECTURES


def normalize_architecture(
    architectures: Iterable[str],
    table: Mapping[str, str] = AWS_TO_KUBE_ARCHITECTURES,
) -> str:
    reported = list(architectures)
    for architecture in reported:
        if architecture in table:
            return table[architecture]
    return "[" + " ".join(reported) + "]"


def is_canonical_architecture(
    value: str,
    table: Mapping[str, str] = AWS_TO_KUBE_ARCHITECTURES,
) -> bool:
    """True if `value` is one of the table's Kubernetes-side identifiers."""
    return value in set(table.values())

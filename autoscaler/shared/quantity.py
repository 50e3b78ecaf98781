"""
autoscaler/shared/quantity.py
─────────────────────────────
Exact resource magnitudes: Quantity and ResourceList.

Why not plain floats?
---------------------
Every number this package hands to the provisioning scheduler ends up
compared against pod requests and serialised into node objects. A float
like 7577.599999999 MiB would drift on the way out. Quantity keeps the
magnitude as a decimal.Decimal in base units (cores, bytes, pods) so that
"8192Mi" always prints back as "8Gi" and 100m + 70m is exactly 170m.

Parsing is delegated to the Kubernetes client (kubernetes.utils.parse_quantity),
which understands every suffix the API server accepts ("100m", "8192Mi",
"20Gi", "1e3"). This module only adds arithmetic and a canonical string form.

Reading guide
-------------
  Quantity      → one magnitude plus its display format (BinarySI / DecimalSI)
  ResourceList  → immutable mapping of resource name → Quantity
  RESOURCE_*    → the resource names the derivation engine emits
"""

from __future__ import annotations

import functools
from decimal import ROUND_CEILING, Decimal
from typing import Any, Dict, Iterator, Mapping, Optional, Union

from kubernetes.utils import parse_quantity
from pydantic_core import core_schema


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 1: RESOURCE NAMES
# ─────────────────────────────────────────────────────────────────────────────

RESOURCE_CPU = "cpu"
RESOURCE_MEMORY = "memory"
RESOURCE_EPHEMERAL_STORAGE = "ephemeral-storage"
RESOURCE_PODS = "pods"

# Extended resources advertised by device plugins on the node.
RESOURCE_NVIDIA_GPU = "nvidia.com/gpu"
RESOURCE_AMD_GPU = "amd.com/gpu"
RESOURCE_AWS_NEURON = "aws.amazon.com/neuron"
RESOURCE_AWS_POD_ENI = "vpc.amazonaws.com/pod-eni"
RESOURCE_SMARTER_DEVICES_FUSE = "smarter-devices/fuse"


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 2: QUANTITY
# ─────────────────────────────────────────────────────────────────────────────

BINARY_SI = "BinarySI"
DECIMAL_SI = "DecimalSI"

# Largest first, so str() picks the biggest suffix that divides exactly.
_BINARY_SUFFIXES = (
    ("Ei", 1024 ** 6),
    ("Pi", 1024 ** 5),
    ("Ti", 1024 ** 4),
    ("Gi", 1024 ** 3),
    ("Mi", 1024 ** 2),
    ("Ki", 1024),
)

_MILLI = Decimal(1000)
_MEBI = 1024 ** 2

QuantityLike = Union["Quantity", str, int, Decimal]


@functools.total_ordering
class Quantity:
    """
    An exact, immutable resource magnitude.

    The amount is stored in base units (cores for CPU, bytes for memory and
    storage, plain counts for pods and extended resources). The format only
    affects how the value is printed:

        BinarySI  → "8Gi", "7577Mi"   (memory, storage)
        DecimalSI → "4", "170m"       (CPU, counts)

    Equality and ordering compare amounts only, so Quantity("1Gi") equals
    Quantity("1073741824").
    """

    __slots__ = ("_amount", "_format")

    def __init__(self, amount: Union[Decimal, int] = 0, fmt: str = DECIMAL_SI) -> None:
        if fmt not in (BINARY_SI, DECIMAL_SI):
            raise ValueError(f"unknown quantity format {fmt!r}")
        self._amount = Decimal(amount)
        self._format = fmt

    # ── Constructors ──────────────────────────────────────────────────────────

    @classmethod
    def parse(cls, value: QuantityLike) -> "Quantity":
        """
        Build a Quantity from a Kubernetes quantity string or a number.

        Raises:
            ValueError: if the kubernetes client cannot parse the value.
        """
        if isinstance(value, Quantity):
            return value
        if isinstance(value, bool):
            raise ValueError(f"invalid quantity {value!r}")
        if isinstance(value, (int, Decimal)):
            return cls(Decimal(value), DECIMAL_SI)
        text = str(value).strip()
        amount = parse_quantity(text)
        fmt = BINARY_SI if text.endswith("i") else DECIMAL_SI
        return cls(amount, fmt)

    @classmethod
    def from_milli(cls, milli: int) -> "Quantity":
        """A DecimalSI quantity of `milli` thousandths, e.g. from_milli(170) → 170m."""
        return cls(Decimal(milli) / _MILLI, DECIMAL_SI)

    @classmethod
    def from_mebibytes(cls, mebibytes: int) -> "Quantity":
        """A BinarySI quantity of `mebibytes` MiB."""
        return cls(Decimal(mebibytes) * _MEBI, BINARY_SI)

    # ── Accessors ─────────────────────────────────────────────────────────────

    @property
    def amount(self) -> Decimal:
        """Exact magnitude in base units."""
        return self._amount

    @property
    def format(self) -> str:
        return self._format

    def value(self) -> int:
        """Magnitude in base units, rounded up to an integer."""
        return int(self._amount.to_integral_value(rounding=ROUND_CEILING))

    def milli_value(self) -> int:
        """Magnitude in thousandths of a base unit, rounded up."""
        return int((self._amount * _MILLI).to_integral_value(rounding=ROUND_CEILING))

    def is_zero(self) -> bool:
        return self._amount == 0

    # ── Arithmetic ────────────────────────────────────────────────────────────

    def __add__(self, other: "Quantity") -> "Quantity":
        if not isinstance(other, Quantity):
            return NotImplemented
        return Quantity(self._amount + other._amount, self._format)

    def __sub__(self, other: "Quantity") -> "Quantity":
        if not isinstance(other, Quantity):
            return NotImplemented
        return Quantity(self._amount - other._amount, self._format)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Quantity):
            return NotImplemented
        return self._amount == other._amount

    def __lt__(self, other: "Quantity") -> bool:
        if not isinstance(other, Quantity):
            return NotImplemented
        return self._amount < other._amount

    def __hash__(self) -> int:
        return hash(self._amount)

    # ── Rendering ─────────────────────────────────────────────────────────────

    def __str__(self) -> str:
        amount = self._amount
        integral = amount == amount.to_integral_value()

        if self._format == BINARY_SI and integral and amount != 0:
            whole = int(amount)
            for suffix, multiplier in _BINARY_SUFFIXES:
                if whole % multiplier == 0:
                    return f"{whole // multiplier}{suffix}"
            return str(whole)

        if integral:
            return str(int(amount))
        milli = amount * _MILLI
        if milli == milli.to_integral_value():
            return f"{int(milli)}m"
        return format(amount.normalize(), "f")

    def __repr__(self) -> str:
        return f"Quantity({str(self)!r})"

    # ── pydantic integration ──────────────────────────────────────────────────

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        # Accept "20Gi" / 20 / Quantity on input; dump the canonical string.
        return core_schema.no_info_plain_validator_function(
            cls.parse,
            serialization=core_schema.to_string_ser_schema(),
        )


def quantity(value: QuantityLike) -> Quantity:
    """Shorthand for Quantity.parse, used heavily in tests and tables."""
    return Quantity.parse(value)


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 3: RESOURCE LIST
# ─────────────────────────────────────────────────────────────────────────────

class ResourceList(Mapping[str, Quantity]):
    """
    Immutable mapping of resource name → Quantity.

    Used for two different roles with the same shape:
      • an instance type's capacity  (InstanceType.resources)
      • what the node runtime keeps  (InstanceType.overhead)

    Construction copies the input, so later changes to the caller's dict
    never leak into a derived InstanceType.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Optional[Mapping[str, QuantityLike]] = None) -> None:
        self._entries: Dict[str, Quantity] = {
            name: Quantity.parse(value) for name, value in (entries or {}).items()
        }

    def __getitem__(self, name: str) -> Quantity:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        body = ", ".join(f"{name!r}: {str(q)!r}" for name, q in self._entries.items())
        return f"ResourceList({{{body}}})"

    def subtract(self, other: Mapping[str, Quantity]) -> "ResourceList":
        """
        Per-key difference, keeping exactly the keys of `self`.

        Keys present only in `other` are ignored; keys missing from `other`
        are treated as zero. Used for allocatable = capacity − overhead.
        """
        return ResourceList({
            name: q - other[name] if name in other else q
            for name, q in self._entries.items()
        })

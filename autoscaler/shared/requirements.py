"""
autoscaler/shared/requirements.py
──────────────────────────────────
Requirements: label key → set of admissible values.

This is the scheduling-constraint half of an InstanceType. The provisioning
scheduler intersects a pod's node selectors / affinities with these sets to
decide whether a machine type could ever host the pod.

Semantics
---------
  • Values are unordered and unique (frozenset of str).
  • Merging two Requirements unions the value sets key by key.
  • An EMPTY set is meaningful: it says "no admissible value". It appears
    for zone / capacity-type when a machine type has no offerings, and must
    never be read as "anything goes".
"""

from __future__ import annotations

from typing import AbstractSet, FrozenSet, Iterable, Iterator, Mapping, Optional

_EMPTY: FrozenSet[str] = frozenset()


class Requirements(Mapping[str, FrozenSet[str]]):
    """Immutable label → admissible-values mapping with union-per-key merge."""

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping[str, Iterable[str]]] = None) -> None:
        self._values = {key: frozenset(vals) for key, vals in (values or {}).items()}

    def __getitem__(self, key: str) -> FrozenSet[str]:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        body = ", ".join(f"{k!r}: {sorted(v)!r}" for k, v in sorted(self._values.items()))
        return f"Requirements({{{body}}})"

    def has(self, key: str) -> bool:
        return key in self._values

    def get(self, key: str, default: Optional[AbstractSet[str]] = None) -> FrozenSet[str]:  # type: ignore[override]
        """Value set for `key`; an empty set (not None) when the key is absent."""
        if key in self._values:
            return self._values[key]
        return frozenset(default) if default is not None else _EMPTY

    def single(self, key: str) -> str:
        """
        The only admissible value of a single-valued key.

        Raises:
            KeyError:   key is absent.
            ValueError: key does not hold exactly one value.
        """
        values = self._values[key]
        if len(values) != 1:
            raise ValueError(f"requirement {key!r} has {len(values)} values, expected 1")
        return next(iter(values))

    def add(self, other: Mapping[str, Iterable[str]]) -> "Requirements":
        """Return a new Requirements with `other` unioned in key by key."""
        merged = dict(self._values)
        for key, vals in other.items():
            merged[key] = merged.get(key, _EMPTY) | frozenset(vals)
        return Requirements(merged)

    def __or__(self, other: Mapping[str, Iterable[str]]) -> "Requirements":
        if not isinstance(other, Mapping):
            return NotImplemented
        return self.add(other)

"""
autoscaler/cloudprovider/instancetype.py
─────────────────────────────────────────
InstanceType: the immutable model the provisioning scheduler consumes.

What this is
─────────────
One InstanceType per candidate machine type per evaluation cycle. It is
built from a (metadata, config, offerings) triple, derives everything once
in __init__, and is read-only afterwards:

    it = InstanceType(metadata, config, offerings)
    it.name           "m5.large"
    it.requirements   Requirements  (label → admissible values)
    it.resources      ResourceList  (capacity)
    it.overhead       ResourceList  (kept by the node runtime)
    it.offerings      Tuple[Offering, ...]
    it.price          float         (ranking score, not money)
    it.allocatable()  resources − overhead

Ownership
──────────
  metadata   owned    (frozen model)
  offerings  owned    (copied into a tuple)
  config     shared   (one ProvisioningConfig serves every type in a cycle)
  catalog    shared   (static lookups, CapabilityCatalog.default() if omitted)

Error handling contract
────────────────────────
  IncompleteInstanceTypeMetadataError: vCPU, memory or network info missing.
      Raised before any derivation runs, so a half-built InstanceType never
      exists. Everything else (unknown architecture, odd names, several GPU
      models, no offerings) derives a value instead of failing.

Thread safety
──────────────
Construction reads only its inputs; nothing is shared mutably. A built
InstanceType can be read from any number of threads without locking.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from autoscaler.cloudprovider.catalog import CapabilityCatalog
from autoscaler.cloudprovider.overhead import compute_overhead
from autoscaler.cloudprovider.price import compute_price
from autoscaler.cloudprovider.requirement_synthesizer import compute_requirements
from autoscaler.cloudprovider.resources import compute_resources
from autoscaler.shared.models import Offering, ProvisioningConfig, RawOfferingMetadata
from autoscaler.shared.quantity import ResourceList
from autoscaler.shared.requirements import Requirements

logger = logging.getLogger(__name__)


class IncompleteInstanceTypeMetadataError(Exception):
    """
    Raised when machine-type metadata lacks a field every derivation needs.

    Attributes:
        name:    The machine-type name from the metadata.
        missing: Names of the absent fields, e.g. ["network"].

    Caller contract (InstanceTypeProvider):
        Catch this, log it, skip the machine type. Do not retry: the same
        payload will fail the same way.
    """

    def __init__(self, name: str, missing: List[str]) -> None:
        self.name = name
        self.missing = list(missing)
        super().__init__(
            f"incomplete machine-type metadata for {name!r}: "
            f"missing {', '.join(self.missing)}"
        )


class InstanceType:
    """
    Immutable derived description of one machine type.

    Raises:
        IncompleteInstanceTypeMetadataError: from __init__, see module docs.
    """

    __slots__ = (
        "_metadata",
        "_config",
        "_catalog",
        "_offerings",
        "_requirements",
        "_resources",
        "_overhead",
        "_price",
    )

    def __init__(
        self,
        metadata: RawOfferingMetadata,
        config: ProvisioningConfig,
        offerings: Iterable[Offering] = (),
        catalog: Optional[CapabilityCatalog] = None,
    ) -> None:
        missing = metadata.missing_required_fields()
        if missing:
            raise IncompleteInstanceTypeMetadataError(metadata.name, missing)

        catalog = catalog or CapabilityCatalog.default()
        set_ = object.__setattr__
        set_(self, "_metadata", metadata)
        set_(self, "_config", config)
        set_(self, "_catalog", catalog)
        set_(self, "_offerings", tuple(offerings))

        set_(self, "_requirements", compute_requirements(metadata, self._offerings, catalog.labels))
        set_(self, "_resources", compute_resources(metadata, config, catalog))
        set_(self, "_overhead", compute_overhead(metadata, config, catalog))
        set_(self, "_price", compute_price(metadata))

        logger.debug("Derived instance type %s (price score %.3f).", metadata.name, self._price)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"InstanceType is immutable; cannot set {name!r}")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"InstanceType is immutable; cannot delete {name!r}")

    def __repr__(self) -> str:
        return f"InstanceType(name={self.name!r}, price={self._price:.3f})"

    # ── Accessors ─────────────────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._metadata.name

    @property
    def metadata(self) -> RawOfferingMetadata:
        return self._metadata

    @property
    def config(self) -> ProvisioningConfig:
        return self._config

    @property
    def catalog(self) -> CapabilityCatalog:
        return self._catalog

    @property
    def offerings(self) -> Tuple[Offering, ...]:
        return self._offerings

    @property
    def requirements(self) -> Requirements:
        return self._requirements

    @property
    def resources(self) -> ResourceList:
        return self._resources

    @property
    def overhead(self) -> ResourceList:
        """
        Resources the node runtime reserves. Computed following
        https://kubernetes.io/docs/tasks/administer-cluster/reserve-compute-resources/#node-allocatable
        with the Bottlerocket kube-reserved formulas. These are exact only for
        ENI-limited nodes.
        """
        return self._overhead

    @property
    def price(self) -> float:
        return self._price

    def allocatable(self) -> ResourceList:
        """Capacity left for pods: resources − overhead, key by key."""
        return self._resources.subtract(self._overhead)

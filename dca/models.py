"""Immutable value types passed between the purchase steps."""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import metadata
from typing import Optional


@dataclass(frozen=True)
class PurchaseRequest:
    """Fiat amount to spend, in minor units (cents)."""

    amount_in_cents: int


@dataclass(frozen=True)
class PlacementResult:
    """Identifies the order Kraken accepted."""

    transaction_id: str
    description: str


@dataclass(frozen=True)
class OrderInfo:
    """Settlement facts for an executed order."""

    price: float
    cost: float
    fee: float
    volume_purchased: float


@dataclass(frozen=True)
class OrderResult:
    """Everything a successful ``place_order`` call produced."""

    volume: float
    placement: PlacementResult
    info: Optional[OrderInfo] = None


@dataclass(frozen=True)
class BuildInfo:
    """Version metadata of the running build.

    Construct once at the entry point and pass it to whatever reports it.
    """

    version: str = "dev"
    commit: str = "dev"
    date: str = "dev"

    @classmethod
    def current(cls) -> "BuildInfo":
        try:
            version = metadata.version("kraken-dca")
        except metadata.PackageNotFoundError:
            version = "dev"
        return cls(
            version=version,
            commit=os.getenv("DCA_COMMIT", "dev"),
            date=os.getenv("DCA_BUILD_DATE", "dev"),
        )

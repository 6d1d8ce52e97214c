"""Cost estimation entities."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class CostEstimate:
    """Estimated spend of one invocation, already rounded for display."""

    duration_ms: int
    compute_cost_usd: Decimal
    storage_cost_usd: Decimal
    total_cost_usd: Decimal
    total_cost_local: Decimal
    local_currency_symbol: str = "₹"

    def to_dict(self) -> dict[str, str]:
        return {
            "duration": f"{self.duration_ms}ms",
            "compute_cost_usd": f"${self.compute_cost_usd}",
            "storage_cost_usd": f"${self.storage_cost_usd}",
            "total_cost_usd": f"${self.total_cost_usd}",
            "total_cost_local": f"{self.local_currency_symbol}{self.total_cost_local}",
        }

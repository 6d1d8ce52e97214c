"""Invocation cost estimator."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from scheduled_e2e_runner.configuration.runtime_settings import CostSettings

from .cost_models import CostEstimate

USD_PLACES = Decimal("0.000001")
LOCAL_CURRENCY_PLACES = Decimal("0.0001")
_MS_PER_SECOND = Decimal(1000)


def compute_cost_usd(duration_ms: int, cost_settings: CostSettings | None = None) -> Decimal:
    """Unrounded compute cost: GB-seconds times the per GB-second rate."""
    settings = cost_settings or CostSettings()
    if duration_ms < 0:
        raise ValueError("duration_ms must not be negative.")
    gb_seconds = settings.memory_gb * Decimal(duration_ms) / _MS_PER_SECOND
    return gb_seconds * settings.gb_second_rate_usd


def estimate_cost(duration_ms: int, cost_settings: CostSettings | None = None) -> CostEstimate:
    """Estimate compute plus storage spend for a run of the given duration."""
    settings = cost_settings or CostSettings()
    compute_raw = compute_cost_usd(duration_ms, settings)
    total_raw = compute_raw + settings.storage_cost_usd
    total_usd = _quantize(total_raw, USD_PLACES)
    return CostEstimate(
        duration_ms=duration_ms,
        compute_cost_usd=_quantize(compute_raw, USD_PLACES),
        storage_cost_usd=_quantize(settings.storage_cost_usd, USD_PLACES),
        total_cost_usd=total_usd,
        total_cost_local=_quantize(total_usd * settings.local_currency_rate, LOCAL_CURRENCY_PLACES),
        local_currency_symbol=settings.local_currency_symbol,
    )


def _quantize(value: Decimal, places: Decimal) -> Decimal:
    return value.quantize(places, rounding=ROUND_HALF_UP)

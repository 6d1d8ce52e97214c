"""Cost estimation exports."""

from .cost_models import CostEstimate
from .invocation_cost_estimator import compute_cost_usd, estimate_cost

__all__ = ["CostEstimate", "compute_cost_usd", "estimate_cost"]

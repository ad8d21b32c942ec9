"""
Allocation: split an expense total across assets/vehicles.
"""
from .engine import (
    allocate, seed_allocations, update_amount, update_percentage,
    reconcile, validate_allocations,
)

__all__ = [
    "allocate", "seed_allocations", "update_amount", "update_percentage",
    "reconcile", "validate_allocations",
]

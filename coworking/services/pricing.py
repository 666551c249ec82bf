"""Reservation pricing.

All amounts are integers in the smallest currency unit. The monthly discount is
truncated, never rounded up, so the same inputs always produce the same price.
"""
from __future__ import annotations

MONTHLY_DISCOUNT_MIN_DAYS = 28


def calculate_price(days: int, daily_rate: int, monthly_discount: int = 0) -> int:
    """Return the total price for a stay of ``days`` days."""

    if days < 0:
        raise ValueError("days must not be negative")
    if daily_rate < 0:
        raise ValueError("daily_rate must not be negative")
    if not 0 <= monthly_discount <= 100:
        raise ValueError("monthly_discount must be between 0 and 100")

    base = days * daily_rate
    if days >= MONTHLY_DISCOUNT_MIN_DAYS and monthly_discount > 0:
        return base - (base * monthly_discount) // 100
    return base

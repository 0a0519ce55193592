"""Integer rebasing between decimal precisions."""
from __future__ import annotations


def scale(amount: int, from_precision: int, to_precision: int) -> int:
    """Convert ``amount`` from ``from_precision`` decimals to ``to_precision``.

    Downscaling truncates toward zero, so precision below the target is
    discarded and the result is never larger than the exact value.
    Upscaling is exact.

    Examples:
        scale(1_500_000, 6, 3) → 1_500
        scale(1_999, 3, 0) → 1
        scale(7, 0, 18) → 7_000_000_000_000_000_000
    """
    if amount < 0:
        raise ValueError(f"amount must be non-negative, got {amount}")
    if from_precision < 0 or to_precision < 0:
        raise ValueError(
            f"precisions must be non-negative, got {from_precision} -> {to_precision}"
        )

    if from_precision > to_precision:
        return amount // 10 ** (from_precision - to_precision)
    return amount * 10 ** (to_precision - from_precision)

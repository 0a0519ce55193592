"""Asset transfer protocol: moves assets between holders and engine custody."""
from typing import Protocol


class AssetTransfer(Protocol):
    """Abstract interface for asset movement.

    Both calls report failure by returning ``False`` rather than raising.
    """

    async def transfer_in(self, account: str, asset: str, amount: int) -> bool: ...

    async def transfer_out(self, account: str, asset: str, amount: int) -> bool: ...

"""Access control protocol: privileged operator lookup."""
from typing import Protocol


class AccessControl(Protocol):
    def is_authorized_operator(self, identity: str) -> bool: ...

"""
Plan storage port (abstract interface).

Defines the contract for key-value backends that hold persisted plan
documents as JSON.
"""

from abc import ABC, abstractmethod
from typing import Any, List


class PlanStoragePort(ABC):
    """Abstract interface for plan document storage."""

    @abstractmethod
    def get_json(self, key: str, default: Any = None) -> Any:
        """
        Read and decode the JSON value stored under key.

        Returns default when the key is absent. Undecodable values and
        backend failures raise; callers decide how to degrade.
        """
        ...

    @abstractmethod
    def set_json(self, key: str, value: Any) -> None:
        """Encode value as JSON and store it under key."""
        ...

    @abstractmethod
    def set_raw(self, key: str, text: str) -> None:
        """Store already-encoded text under key, without validation."""
        ...

    @abstractmethod
    def keys(self) -> List[str]:
        ...

    def close(self) -> None:
        """Release backend resources."""
        pass

"""Permission protocols for permstore.

Ports consumed by the permission store but owned elsewhere.
"""

from abc import abstractmethod
from typing import Protocol, runtime_checkable, Dict, Any


@runtime_checkable
class ApplicationPermissionRegistry(Protocol):
    """Protocol for looking up the permissions an application declares.

    The returned mapping has two optional sections keyed by full
    permission name::

        {"type": {"app:feature": "boolean"}, "params": {"app:feature": {...}}}
    """

    @abstractmethod
    async def get_application_permissions(self, app: str) -> Dict[str, Dict[str, Any]]:
        """Get the declared permission types and params of ``app``."""
        ...

"""Result of resolving a new permission's type and params."""

from dataclasses import dataclass
from typing import Any, Optional

from ....config.constants import DEFAULT_PERMISSION_TYPE, TypeResolutionStatus


@dataclass(frozen=True)
class TypeResolution:
    """Type and params for a permission name, and how they were found.

    ``DEFAULTED`` covers names without an application segment, names the
    application does not declare, and registry failures; ``error`` holds
    the swallowed registry exception in the last case.
    """

    perm_type: str = DEFAULT_PERMISSION_TYPE
    params: Optional[Any] = None
    status: TypeResolutionStatus = TypeResolutionStatus.DEFAULTED
    error: Optional[BaseException] = None

    @property
    def resolved(self) -> bool:
        return self.status == TypeResolutionStatus.RESOLVED

    @property
    def defaulted(self) -> bool:
        return self.status == TypeResolutionStatus.DEFAULTED

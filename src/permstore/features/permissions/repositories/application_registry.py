"""In-memory application permission registry.

Applications declare the non-default type and params of their permissions
here; the store consults it when creating new permission records.
"""

import logging
from typing import Any, Dict, Optional

from ..utils.path_codec import top_level_name

logger = logging.getLogger(__name__)


class StaticPermissionRegistry:
    """ApplicationPermissionRegistry backed by a dict of declarations."""

    def __init__(self, declarations: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None):
        self._declarations: Dict[str, Dict[str, Dict[str, Any]]] = {}
        for app, declaration in (declarations or {}).items():
            self._declarations[app] = {
                "type": dict(declaration.get("type", {})),
                "params": dict(declaration.get("params", {})),
            }

    def register(self, name: str, perm_type: str, params: Optional[Any] = None) -> None:
        """Declare the type (and params) of the full permission ``name``."""
        app = top_level_name(name)
        declaration = self._declarations.setdefault(app, {"type": {}, "params": {}})
        declaration["type"][name] = perm_type
        if params is not None:
            declaration["params"][name] = params
        logger.debug(f"Registered permission {name} with type {perm_type}")

    async def get_application_permissions(self, app: str) -> Dict[str, Dict[str, Any]]:
        if app not in self._declarations:
            raise LookupError(f"Application '{app}' has not declared any permissions")
        return self._declarations[app]

"""Administrative command registry.

Admin routes look commands up here by name instead of switching over a fixed
set of actions. The defaults are simulated: they acknowledge the request and
do nothing else.
"""

from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, List, Optional
import structlog

logger = structlog.get_logger("dashboard_service.admin")

AdminHandler = Callable[[], str]


class UnknownAdminAction(KeyError):
    """No command is registered under the requested name."""


@dataclass(frozen=True)
class AdminResult:
    ok: bool
    action: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class AdminCommandRegistry:
    """Name -> handler map for admin actions.

    A handler takes no arguments and returns the message reported back to
    the caller.
    """

    def __init__(self):
        self._handlers: Dict[str, AdminHandler] = {}

    def register(self, name: str, handler: AdminHandler) -> None:
        if name in self._handlers:
            raise ValueError(f"Admin action already registered: {name}")
        self._handlers[name] = handler

    def get(self, name: str) -> Optional[AdminHandler]:
        return self._handlers.get(name)

    def names(self) -> List[str]:
        return sorted(self._handlers)

    def __contains__(self, name: str) -> bool:
        return name in self._handlers

    def execute(self, name: str) -> AdminResult:
        """Run the command registered as ``name``.

        Raises
        - UnknownAdminAction: nothing is registered under ``name``
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownAdminAction(name)
        message = handler()
        logger.info("Admin action executed", action=name)
        return AdminResult(ok=True, action=name, message=message)


def create_default_registry() -> AdminCommandRegistry:
    """Registry with the simulated ``restart``, ``reload-cache`` and ``clear-logs`` actions."""
    registry = AdminCommandRegistry()
    registry.register(
        "restart",
        lambda: "Simulated restart accepted (no-op in this environment)."
    )
    registry.register("reload-cache", lambda: "Simulated cache reload completed.")
    registry.register("clear-logs", lambda: "Simulated log clearance completed.")
    return registry

"""
Shared guards for the service layer: entity loading and the capability check
that runs before any engine rule.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

from dreamleague.config import get_settings
from dreamleague.errors import EntityNotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

AdminCheck = Callable[[str], bool]


def require_found(entity: Optional[T], kind: str, entity_id: str) -> T:
    if entity is None:
        raise EntityNotFoundError(f"{kind} not found: {entity_id}")
    return entity


def require_controller(controller_id: str, caller_id: str | None, kind: str, entity_id: str) -> None:
    """Reject the call unless caller_id is the recorded controller of the entity."""
    if caller_id is None or caller_id != controller_id:
        logger.debug("Rejected %s on %s %s (controller %s)", caller_id, kind, entity_id, controller_id)
        raise UnauthorizedError(f"Caller does not control {kind} {entity_id}")


def default_admin_check(user_id: str) -> bool:
    return get_settings().is_admin(user_id)

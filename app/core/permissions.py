from dataclasses import dataclass, field
from logging import getLogger
from app.exceptions import UnauthorizedError
from app.models import ADMIN_ROLE, USER_ROLE

logger = getLogger(__name__)

@dataclass(frozen=True)
class Principal:
    """The authenticated caller as seen by the services: an opaque id and its roles."""
    user_id: str
    roles: frozenset[str] = field(default_factory=lambda: frozenset({USER_ROLE}))

    def has_role(self, role: str) -> bool:
        return role in self.roles

def require_role(principal: Principal | None, role: str):
    if principal is None or not principal.has_role(role):
        actor = principal.user_id if principal else 'anonymous'
        logger.warning(f'{actor} denied: missing role {role}')
        raise UnauthorizedError()
    return principal

def require_admin(principal: Principal | None):
    return require_role(principal, ADMIN_ROLE)

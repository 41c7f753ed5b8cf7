from typing import Callable, Iterable, Optional

from course_builder.utils.decorators import current_role

LOAD = "load"
SAVE = "save"
ENABLE = "enable"


class AuthGate:
    """Decides whether the current caller may perform `operation` on a document."""

    def check(self, operation: str, document_id: str) -> bool:
        raise NotImplementedError


class AllowAllGate(AuthGate):
    def check(self, operation, document_id):
        return True


class RoleAuthGate(AuthGate):
    """
    Allows callers whose role is one of `roles`. The role comes from the
    verified JWT's `role` claim unless another loader is given.
    """

    def __init__(self, roles: Iterable[str], role_loader: Optional[Callable[[], Optional[str]]] = None):
        self.roles = frozenset(roles)
        self.role_loader = role_loader or current_role

    def check(self, operation, document_id):
        return self.role_loader() in self.roles

from .decorators import require_role, current_actor

from .audit import log_audit

__all__ = [
    # Decorators
    "require_role",
    "current_actor",
    # Audit
    "log_audit",
]

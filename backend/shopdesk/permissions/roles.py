# Overview: Capability table keyed by role.
# Admin holds every permission; employees get the day-to-day shop floor set.

from ..models.auth import ROLE_ADMIN, ROLE_EMPLOYEE
from .definitions import PERMISSION_DEFINITIONS


ROLE_PERMISSIONS = {
    ROLE_ADMIN: frozenset(perm[0] for perm in PERMISSION_DEFINITIONS),
    ROLE_EMPLOYEE: frozenset({
        "VIEW_ONHOLD",
        "CREATE_ONHOLD",
        "VIEW_ACTIVE",
        "DEDUCT_ACTIVE_STOCK",
        "RECORD_SALE",
        "VIEW_SALES",
    }),
}

# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- INVENTORY --

INVENTORY_PERMISSIONS = [
    (
        "VIEW_ONHOLD",
        "View On-Hold Items",
        "List items staged for approval",
        PermissionCategory.INVENTORY,
    ),
    (
        "CREATE_ONHOLD",
        "Stage Items",
        "Add new items to the on-hold queue",
        PermissionCategory.INVENTORY,
    ),
    (
        "APPROVE_ONHOLD",
        "Approve Items",
        "Move a pending item into active inventory",
        PermissionCategory.INVENTORY,
    ),
    (
        "REJECT_ONHOLD",
        "Reject Items",
        "Mark a pending item as rejected",
        PermissionCategory.INVENTORY,
    ),
    (
        "DELETE_ONHOLD",
        "Delete On-Hold Items",
        "Remove approved or rejected items from the queue",
        PermissionCategory.INVENTORY,
    ),
    (
        "VIEW_ACTIVE",
        "View Active Inventory",
        "Search and look up sellable items",
        PermissionCategory.INVENTORY,
    ),
    (
        "DEDUCT_ACTIVE_STOCK",
        "Deduct Stock",
        "Reduce the quantity of an active item",
        PermissionCategory.INVENTORY,
    ),
    (
        "UPDATE_ACTIVE",
        "Edit Active Items",
        "Change name, price, tags, brand, quantity or tax flag",
        PermissionCategory.INVENTORY,
    ),
    (
        "DELETE_ACTIVE",
        "Delete Active Items",
        "Remove an item from active inventory",
        PermissionCategory.INVENTORY,
    ),
]


# -- SALES --

SALES_PERMISSIONS = [
    (
        "RECORD_SALE",
        "Record Sale",
        "Bill a customer and deduct stock (POS access)",
        PermissionCategory.SALES,
    ),
    (
        "VIEW_SALES",
        "View Sales",
        "View sales history and individual bills",
        PermissionCategory.SALES,
    ),
]


# -- REPORTS --

REPORT_PERMISSIONS = [
    (
        "VIEW_ANALYTICS",
        "View Analytics",
        "Sales totals by year and month",
        PermissionCategory.REPORTS,
    ),
    (
        "VIEW_LOW_STOCK",
        "View Low Stock",
        "Active items at or below the alert threshold",
        PermissionCategory.REPORTS,
    ),
]


# -- USERS --

USER_PERMISSIONS = [
    (
        "MANAGE_USERS",
        "Manage Users",
        "List accounts and approve or disapprove them",
        PermissionCategory.USERS,
    ),
]


PERMISSION_DEFINITIONS = (
    INVENTORY_PERMISSIONS
    + SALES_PERMISSIONS
    + REPORT_PERMISSIONS
    + USER_PERMISSIONS
)

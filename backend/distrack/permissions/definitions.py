# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- INVENTORY --

INVENTORY_PERMISSIONS = [
    (
        "VIEW_PRODUCTS",
        "View Products",
        "List products with initial and remaining stock",
        PermissionCategory.INVENTORY,
    ),
    (
        "MANAGE_PRODUCTS",
        "Manage Products",
        "Create products and bulk-import product lists",
        PermissionCategory.INVENTORY,
    ),
    (
        "VIEW_AVAILABLE_STOCK",
        "View Available Stock",
        "List products that still have remaining stock to allocate",
        PermissionCategory.INVENTORY,
    ),
]


# -- DISTRIBUTION --

DISTRIBUTION_PERMISSIONS = [
    (
        "CREATE_DISTRIBUTION",
        "Create Distribution",
        "Record stock handed out to a worker",
        PermissionCategory.DISTRIBUTION,
    ),
    (
        "VIEW_WORKER_DIRECTORY",
        "View Worker Directory",
        "List recently served worker identities",
        PermissionCategory.DISTRIBUTION,
    ),
    (
        "VIEW_DISTRIBUTIONS",
        "View Distributions",
        "List distribution history (workers only see their own)",
        PermissionCategory.DISTRIBUTION,
    ),
    (
        "VIEW_ALL_DISTRIBUTIONS",
        "View All Distributions",
        "See every distribution in the company, not only ones you recorded",
        PermissionCategory.DISTRIBUTION,
    ),
]


# -- REPORTING --

REPORTING_PERMISSIONS = [
    (
        "VIEW_REPORTS",
        "View Reports",
        "Filtered distribution reports and product/worker analytics",
        PermissionCategory.REPORTING,
    ),
    (
        "VIEW_DASHBOARD",
        "View Dashboard",
        "Company stock and distribution summary",
        PermissionCategory.REPORTING,
    ),
]


PERMISSION_DEFINITIONS = (
    INVENTORY_PERMISSIONS
    + DISTRIBUTION_PERMISSIONS
    + REPORTING_PERMISSIONS
)

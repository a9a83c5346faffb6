# Overview: Declarative role -> permission table.
# This is the only place that decides which role may run which operation.
# VIEW_ALL_DISTRIBUTIONS widens distribution visibility from "rows I recorded"
# to every row in the company.

ROLE_PERMISSIONS = {
    "admin": frozenset({
        "VIEW_PRODUCTS",
        "VIEW_DISTRIBUTIONS",
        "VIEW_ALL_DISTRIBUTIONS",
        "VIEW_REPORTS",
        "VIEW_DASHBOARD",
    }),
    "manager": frozenset({
        "VIEW_PRODUCTS",
        "MANAGE_PRODUCTS",
        "VIEW_AVAILABLE_STOCK",
        "CREATE_DISTRIBUTION",
        "VIEW_WORKER_DIRECTORY",
        "VIEW_DISTRIBUTIONS",
        "VIEW_ALL_DISTRIBUTIONS",
        "VIEW_REPORTS",
        "VIEW_DASHBOARD",
    }),
    "worker": frozenset({
        "VIEW_DISTRIBUTIONS",
        "VIEW_REPORTS",
        "VIEW_DASHBOARD",
    }),
}

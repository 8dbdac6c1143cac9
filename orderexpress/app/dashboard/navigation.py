"""Which dashboard sections each role may open."""
from __future__ import annotations

OVERVIEW = "overview"
PRODUCTS = "products"
INVENTORY = "inventory"
ORDERING = "ordering"
ANALYTICS = "analytics"
SETTINGS = "settings"

SECTIONS = (OVERVIEW, PRODUCTS, INVENTORY, ORDERING, ANALYTICS)

SECTION_TITLES = {
    OVERVIEW: "Overview",
    PRODUCTS: "Products",
    INVENTORY: "Inventory",
    ORDERING: "Ordering",
    ANALYTICS: "Analytics",
    SETTINGS: "Settings",
}

# Ordered: the first entry is where a role lands when it asks for a section it may not see.
ROLE_SECTIONS: dict[str, tuple[str, ...]] = {
    "admin": (OVERVIEW, PRODUCTS, INVENTORY, ORDERING, ANALYTICS),
    "inventory_manager": (PRODUCTS, INVENTORY),
    "ordering_manager": (PRODUCTS, ORDERING),
    "sales_manager": (ANALYTICS,),
}


def allowed_sections(role: str) -> tuple[str, ...]:
    try:
        return ROLE_SECTIONS[role]
    except KeyError:
        raise ValueError(f"unknown role: {role!r}") from None


def is_section_allowed(role: str, section: str) -> bool:
    # settings is reachable by every role
    return section == SETTINGS or section in allowed_sections(role)


def gate_section(role: str, active: "str | None") -> str:
    """Return the section to show: `active` if the role may see it, else the role's first section."""
    if active and is_section_allowed(role, active):
        return active
    return allowed_sections(role)[0]


def menu_for(role: str) -> list[tuple[str, str]]:
    """(key, title) pairs for the sidebar, settings last."""
    items = [(key, SECTION_TITLES[key]) for key in allowed_sections(role)]
    items.append((SETTINGS, SECTION_TITLES[SETTINGS]))
    return items

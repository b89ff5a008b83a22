"""AcademicWorks listing-table selector constants with fallbacks.

Each constant is a tuple so callers iterate until a match is found.
The first entry is the markup every portal currently serves.
"""

# --- Listing rows ---
ROW_SELECTORS: tuple[str, ...] = (
    "table.striped-table tbody tr",
    "table.opportunities-table tbody tr",
    # html.parser adds no implicit <tbody>
    "table.striped-table tr",
    "table.opportunities-table tr",
)

# --- Amount cell ---
AMOUNT_SELECTORS: tuple[str, ...] = (
    "td.strong.h4",
    "td.amount",
)

# --- Name + link anchor inside the row header ---
NAME_LINK_SELECTORS: tuple[str, ...] = (
    'th[scope="row"] a',
    "th a",
)

# --- Description block inside the row header ---
DESCRIPTION_SELECTORS: tuple[str, ...] = (
    'th[scope="row"] .mq-no-bp-only',
    "th .description",
)

# --- Deadline text ---
DEADLINE_SELECTORS: tuple[str, ...] = (
    "td.center span.mq-no-bp-only",
    "td.center",
)

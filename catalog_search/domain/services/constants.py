
# Sort modes accepted by the ranking engine
SORT_RELEVANCE = "relevance"
SORT_PRICE = "price"
SORT_NEWEST = "newest"
SORT_SALES = "sales"
ALL_SORTS = {SORT_RELEVANCE, SORT_PRICE, SORT_NEWEST, SORT_SALES}

# Field each explicit sort mode orders by
SORT_FIELDS = {
    SORT_RELEVANCE: "score",
    SORT_PRICE: "price",
    SORT_NEWEST: "createdAt",
    SORT_SALES: "sales",
}

# Engines reported in SearchOutcome.engine
ENGINE_NONE = "none"
ENGINE_RANKING = "ranking"
ENGINE_REGEX_FALLBACK = "regex_fallback"

# Response messages
MSG_EMPTY_QUERY = "Empty search query."
MSG_RANKED = "Search results from MongoDB."
MSG_FALLBACK = "Search results from regex fallback."
MSG_FAILED = "Search failed due to an internal error."

# Projection defaults for incomplete catalog records
DEFAULT_PRODUCT_NAME = "Unknown Product"
DEFAULT_CATEGORY = "Products"

# Snippets
SNIPPET_MAX_LENGTH = 150
SNIPPET_WINDOW = 30
SUGGESTION_SNIPPET_LENGTH = 120

# Fields fetched by the suggestion scorer (no full document fetch)
SUGGESTION_PROJECTION = {
    "name": 1,
    "images": 1,
    "category": 1,
    "description": 1,
    "tags": 1,
    "sales": 1,
    "views": 1,
}

# Fields fetched by the regex fallback
FALLBACK_PROJECTION = {
    "name": 1,
    "slug": 1,
    "price": 1,
    "category": 1,
    "images": 1,
    "description": 1,
    "sales": 1,
    "views": 1,
    "createdAt": 1,
    "stock": 1,
}

# Fields matched by the suggestion regex
SUGGESTION_MATCH_FIELDS = ("name", "description", "category", "tags")

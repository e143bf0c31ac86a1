"""
Constants for the Potluck Planner application.

This module defines all system-wide constants including:
- Application metadata
- Category defaults (slot counts, icons, colors)
- Enrichment (OpenAI / Giphy) settings
- UI constants
"""

from typing import Dict, List

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Potluck Planner"
APP_VERSION = "0.1.0"
DATABASE_FILENAME = "potluck_planner.db"

# ============================================================================
# Categories
# ============================================================================

DEFAULT_CATEGORY_SLOTS = 3
DEFAULT_CATEGORY_ICON = "📦"
DEFAULT_CATEGORY_COLOR = "from-gray-400 to-gray-600"

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500

# Catalog seeded into an empty database
DEFAULT_CATEGORIES: List[Dict] = [
    {
        "name": "Main Dishes",
        "storage_key": "main_dishes",
        "title_en": "Main Dishes",
        "title_da": "Hovedretter",
        "singular_en": "Main Dish",
        "singular_da": "Hovedret",
        "placeholder_en": "What main dish are you bringing?",
        "placeholder_da": "Hvilken hovedret tager du med?",
        "icon": "🍖",
        "color_class": "from-red-400 to-red-600",
        "slots": 3,
    },
    {
        "name": "Side Dishes",
        "storage_key": "side_dishes",
        "title_en": "Side Dishes",
        "title_da": "Tilbehør",
        "singular_en": "Side Dish",
        "singular_da": "Tilbehør",
        "placeholder_en": "Salad, bread, potatoes...",
        "placeholder_da": "Salat, brød, kartofler...",
        "icon": "🥗",
        "color_class": "from-green-400 to-green-600",
        "slots": 3,
    },
    {
        "name": "Desserts",
        "storage_key": "desserts",
        "title_en": "Desserts",
        "title_da": "Desserter",
        "singular_en": "Dessert",
        "singular_da": "Dessert",
        "placeholder_en": "Cake, pie, ice cream...",
        "placeholder_da": "Kage, tærte, is...",
        "icon": "🍰",
        "color_class": "from-pink-400 to-pink-600",
        "slots": 2,
    },
    {
        "name": "Drinks",
        "storage_key": "drinks",
        "title_en": "Drinks",
        "title_da": "Drikkevarer",
        "singular_en": "Drink",
        "singular_da": "Drik",
        "placeholder_en": "Soda, juice, beer...",
        "placeholder_da": "Sodavand, juice, øl...",
        "icon": "🥤",
        "color_class": "from-blue-400 to-blue-600",
        "slots": 2,
    },
    {
        "name": "Additional Items",
        "storage_key": "additional",
        "title_en": "Additional Items",
        "title_da": "Andet",
        "singular_en": "Item",
        "singular_da": "Ting",
        "placeholder_en": "Napkins, plates, games...",
        "placeholder_da": "Servietter, tallerkener, spil...",
        "icon": "✨",
        "color_class": "from-purple-400 to-purple-600",
        "slots": 0,
        "is_unbounded": True,
    },
]

# ============================================================================
# Enrichment
# ============================================================================

OPENAI_DEFAULT_MODEL = "gpt-3.5-turbo"
OPENAI_MAX_TOKENS = 20
OPENAI_TEMPERATURE = 0.3

EXTRACTION_SYSTEM_PROMPT = (
    "You are a helpful assistant that extracts the main food, drink, or other "
    "potluck item from a description. Return only the primary food, drink, or "
    "other potluck item name, nothing else. If multiple items are mentioned, "
    "return the most prominent one. Keep it simple and searchable (e.g., "
    "'pizza', 'napkins', 'cookies', 'beer', 'salad'). If the description is in "
    "Danish, return the result in English."
)

GIPHY_SEARCH_URL = "https://api.giphy.com/v1/gifs/search"
GIPHY_RATING = "g"
GIPHY_LANG = "en"
GIPHY_PICKER_LIMIT = 12

HTTP_TIMEOUT_SECONDS = 10

# ============================================================================
# Change feed / store
# ============================================================================

DEFAULT_POLL_INTERVAL_SECONDS = 5.0
STORE_WRITE_ATTEMPTS = 3
STORE_RETRY_BACKOFF_SECONDS = 0.2

# ============================================================================
# UI
# ============================================================================

SUPPORTED_LANGUAGES: List[str] = ["en", "da"]
DEFAULT_LANGUAGE = "en"
CARD_COLUMNS = 3

PADDING_SMALL = 5
PADDING_MEDIUM = 10

# Milliseconds between checks of the UI event queue
UI_QUEUE_POLL_MS = 100

# Accent colors keyed by the color word of a category's color_class
# ("from-red-400 to-red-600" -> "red")
ACCENT_COLORS: Dict[str, str] = {
    "red": "#ef4444",
    "green": "#22c55e",
    "pink": "#ec4899",
    "blue": "#3b82f6",
    "purple": "#a855f7",
    "yellow": "#eab308",
    "orange": "#f97316",
    "gray": "#6b7280",
}
DEFAULT_ACCENT_COLOR = "#6b7280"

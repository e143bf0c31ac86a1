"""
English and Danish UI strings.

Usage:
    from potluck.utils.translations import get_translation

    get_translation("da", "save")  # 'Gem'
"""

from typing import Dict

from .constants import DEFAULT_LANGUAGE

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "en": {
        "your_name": "Your Name",
        "what_bringing": "What are you bringing?",
        "enter_name": "Enter your name",
        "describe_bringing": "Describe what you're bringing...",
        "save": "Save",
        "saving": "Saving...",
        "cancel": "Cancel",
        "clear": "Clear",
        "remove": "Remove",
        "click_to_sign_up": "Click to sign up!",
        "add_item": "Add item",
        "loading_signups": "Loading signups...",
        "incomplete_warning": (
            "You have incomplete entries. Please fill in all names and "
            "descriptions before leaving."
        ),
        "by": "by",
        "dish": "Dish",
        "no_potlucks": "No potlucks yet",
        "save_failed": "The registration could not be saved.",
        "remove_failed": "The registration could not be removed.",
    },
    "da": {
        "your_name": "Dit navn",
        "what_bringing": "Hvad medbringer du?",
        "enter_name": "Indtast dit navn",
        "describe_bringing": "Beskriv hvad du medbringer...",
        "save": "Gem",
        "saving": "Gemmer...",
        "cancel": "Annuller",
        "clear": "Ryd",
        "remove": "Fjern",
        "click_to_sign_up": "Klik for at tilmelde dig!",
        "add_item": "Tilføj",
        "loading_signups": "Indlæser potluck tilmeldinger...",
        "incomplete_warning": (
            "Du har ufuldstændige indtastninger. Udfyld venligst alle navne "
            "og beskrivelser før du forlader siden."
        ),
        "by": "af",
        "dish": "Ret",
        "no_potlucks": "Ingen potlucks endnu",
        "save_failed": "Tilmeldingen kunne ikke gemmes.",
        "remove_failed": "Tilmeldingen kunne ikke fjernes.",
    },
}


def get_translation(language: str, key: str) -> str:
    """
    Look up a UI string.

    Unknown languages fall back to English; unknown keys return the key itself.
    """
    table = TRANSLATIONS.get(language) or TRANSLATIONS[DEFAULT_LANGUAGE]
    return table.get(key, key)


def localized(obj, field: str, language: str) -> str:
    """
    Read a bilingual attribute such as ``title_en``/``title_da``.

    Args:
        obj: Model or object carrying ``<field>_<lang>`` attributes
        field: Field prefix (e.g. "title", "placeholder")
        language: "en" or "da"

    Returns:
        The localized value, or an empty string when unset
    """
    if language not in TRANSLATIONS:
        language = DEFAULT_LANGUAGE
    return getattr(obj, f"{field}_{language}", None) or ""

"""Board widgets."""

from potluck.ui.components.additional_section import AdditionalSection
from potluck.ui.components.category_section import CategorySection
from potluck.ui.components.registration_card import RegistrationCard

__all__ = ["AdditionalSection", "CategorySection", "RegistrationCard"]

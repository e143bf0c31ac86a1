"""Admin dialogs for potlucks, the category catalog and registrations."""

from potluck.ui.admin.categories_dialog import CategoriesDialog
from potluck.ui.admin.potluck_categories_dialog import PotluckCategoriesDialog
from potluck.ui.admin.potluck_dialog import PotluckDialog
from potluck.ui.admin.registrations_dialog import RegistrationsDialog

__all__ = ["CategoriesDialog", "PotluckCategoriesDialog", "PotluckDialog", "RegistrationsDialog"]

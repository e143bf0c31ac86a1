"""
AdditionalSection widget - the unbounded "additional items" category.

Same layout as CategorySection, but cards follow the item list and a blank
"add" card always comes last.
"""

from typing import List

from potluck.ui.components.category_section import CategorySection
from potluck.ui.projection import Card, project_additional


class AdditionalSection(CategorySection):
    """Board section for an unbounded category."""

    def project(self) -> List[Card]:
        return project_additional(self.entry.category, self.entry.section.items, self.language)

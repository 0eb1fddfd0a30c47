"""Option sources for selectable prompt answers.

Option lists only populate prompt text and selection buttons; answers are
never validated against them.
"""

from typing import List, Optional, Protocol


class OptionSource(Protocol):
    """Supplies ordered option lists for the classification questions."""

    def matters(self) -> List[str]: ...

    def cost_centres(self) -> List[str]: ...

    def business_areas(self) -> List[str]: ...

    def subcategories(self) -> List[str]: ...


class StaticOptionSource:
    """Option source backed by in-memory lists."""

    def __init__(
        self,
        matters: Optional[List[str]] = None,
        cost_centres: Optional[List[str]] = None,
        business_areas: Optional[List[str]] = None,
        subcategories: Optional[List[str]] = None,
    ):
        self._matters = list(matters or [])
        self._cost_centres = list(cost_centres or [])
        self._business_areas = list(business_areas or [])
        self._subcategories = list(subcategories or [])

    def matters(self) -> List[str]:
        return list(self._matters)

    def cost_centres(self) -> List[str]:
        return list(self._cost_centres)

    def business_areas(self) -> List[str]:
        return list(self._business_areas)

    def subcategories(self) -> List[str]:
        return list(self._subcategories)


class ConfigOptionSource(StaticOptionSource):
    """Option source reading the lists configured in TimeLogConfig."""

    def __init__(self, config):
        """
        Initialize from configuration.

        Args:
            config: TimeLogConfig (or any object with the four list attributes)
        """
        super().__init__(
            matters=config.matters,
            cost_centres=config.cost_centres,
            business_areas=config.business_areas,
            subcategories=config.subcategories,
        )

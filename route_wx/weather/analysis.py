"""Weather analysis: flight categories, ceilings, category comparison."""

from typing import Optional, Iterable

from route_wx.models.observation import CloudLayer, FlightCategory


class WeatherAnalyzer:
    """
    Aviation weather analysis functions.

    All methods are static - pure functions with no state.
    """

    @staticmethod
    def flight_category(
        ceiling_ft: Optional[float],
        visibility_sm: Optional[float],
    ) -> Optional[FlightCategory]:
        """
        Determine flight category from ceiling and visibility.

        Uses FAA thresholds:
            LIFR:  visibility < 1 SM  or  ceiling < 500 ft
            IFR:   1 <= vis < 3 SM    or  500 <= ceiling < 1000 ft
            MVFR:  3 <= vis <= 5 SM   or  1000 <= ceiling <= 3000 ft
            VFR:   visibility > 5 SM  and ceiling > 3000 ft

        The worst condition (ceiling or visibility) determines the category.
        A missing ceiling means no ceiling (sky clear or only scattered).

        Args:
            ceiling_ft: Ceiling in feet, None when there is no ceiling
            visibility_sm: Visibility in statute miles

        Returns:
            FlightCategory or None if visibility is unknown and there is no ceiling
        """
        if visibility_sm is None and ceiling_ft is None:
            return None

        vis_cat = None
        if visibility_sm is not None:
            if visibility_sm < 1:
                vis_cat = FlightCategory.LIFR
            elif visibility_sm < 3:
                vis_cat = FlightCategory.IFR
            elif visibility_sm <= 5:
                vis_cat = FlightCategory.MVFR
            else:
                vis_cat = FlightCategory.VFR

        ceil_cat = None
        if ceiling_ft is not None:
            if ceiling_ft < 500:
                ceil_cat = FlightCategory.LIFR
            elif ceiling_ft < 1000:
                ceil_cat = FlightCategory.IFR
            elif ceiling_ft <= 3000:
                ceil_cat = FlightCategory.MVFR
            else:
                ceil_cat = FlightCategory.VFR

        if vis_cat is not None and ceil_cat is not None:
            return min(vis_cat, ceil_cat)
        return vis_cat if vis_cat is not None else ceil_cat

    @staticmethod
    def ceiling_from_layers(layers: Iterable[CloudLayer]) -> Optional[int]:
        """
        Ceiling is the lowest broken, overcast or obscured layer.

        Returns:
            Ceiling in feet, or None if no layer forms a ceiling
        """
        ceiling = None
        for layer in layers:
            if layer.is_ceiling and layer.base_ft is not None and layer.base_ft >= 0:
                if ceiling is None or layer.base_ft < ceiling:
                    ceiling = layer.base_ft
        return ceiling

    @staticmethod
    def worst_category(categories: Iterable[Optional[FlightCategory]]) -> Optional[FlightCategory]:
        """
        Worst category of the given ones, ignoring missing values.

        Returns:
            The worst FlightCategory, or None if none was given
        """
        present = [c for c in categories if c is not None]
        if not present:
            return None
        return min(present)

    @staticmethod
    def compare_categories(
        previous: FlightCategory,
        current: FlightCategory,
    ) -> str:
        """
        Compare two flight categories.

        Returns:
            "same", "worse" if current is worse, "better" if current is better
        """
        if previous == current:
            return "same"
        elif current.severity > previous.severity:
            return "worse"
        else:
            return "better"

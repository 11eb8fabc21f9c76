"""Display formatting for grams and ratios."""

from dataclasses import dataclass

from pe_calculator.domain.ratios import Ratio, RatioKind

UNNAMED_ENTRY = "Unnamed ingredient"
UNNAMED_RECIPE = "Recipe breakdown"


@dataclass(frozen=True)
class Formatter:
    """Formats values with a fixed number of decimals."""

    decimals: int = 2
    undefined_text: str = "—"
    infinite_text: str = "∞"

    def grams(self, value: float) -> str:
        # Tiny values would otherwise render as "-0.00".
        if abs(value) < 0.5 * 10**-self.decimals:
            value = 0.0
        return f"{value:.{self.decimals}f}"

    def ratio(self, ratio: Ratio) -> str:
        if ratio.kind is RatioKind.UNDEFINED:
            return self.undefined_text
        if ratio.kind is RatioKind.INFINITE:
            return self.infinite_text
        return self.grams(ratio.value or 0.0)

    def label(self, label: str) -> str:
        return label.strip() or UNNAMED_ENTRY

    def title(self, recipe_name: str) -> str:
        return recipe_name.strip() or UNNAMED_RECIPE

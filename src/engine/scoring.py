"""Word scoring."""

from typing import Dict


# Points for a word of each length; longer words add LONG_WORD_STEP per letter
BASE_SCORES: Dict[int, int] = {
    3: 10,
    4: 20,
    5: 35,
    6: 55,
    7: 80,
    8: 110,
}
LONG_WORD_STEP = 40
DOUBLE_POINTS_MULTIPLIER = 2


def base_score(length: int) -> int:
    """Monotonic length-to-points table."""
    if length < 3:
        return 0
    if length in BASE_SCORES:
        return BASE_SCORES[length]
    longest = max(BASE_SCORES)
    return BASE_SCORES[longest] + (length - longest) * LONG_WORD_STEP


class ScoringEngine:
    """Computes word scores from length, combo and power-up multipliers."""

    def __init__(self, double_points_multiplier: int = DOUBLE_POINTS_MULTIPLIER):
        self.double_points_multiplier = double_points_multiplier

    def power_up_multiplier(self, double_points: bool) -> int:
        return self.double_points_multiplier if double_points else 1

    def score(self, word: str, combo_multiplier: float = 1.0, double_points: bool = False) -> int:
        """
        Final score for a word, rounded to whole points.

        Args:
            word: The accepted word
            combo_multiplier: Current combo multiplier
            double_points: Whether a double-points effect is active
        """
        points = base_score(len(word)) * combo_multiplier * self.power_up_multiplier(double_points)
        return int(round(points))

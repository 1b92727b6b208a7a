"""Goal-relative health scoring for recipe nutrition totals."""

from dataclasses import dataclass, field
from typing import Protocol

from recipe_nutrition.domain.errors import ValidationError
from recipe_nutrition.domain.nutrition import HealthScore, MacroProfile
from recipe_nutrition.services.rounding import round_half_up

SCORE_MIN = 0
SCORE_MAX = 100

KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9


class ScoringStrategy(Protocol):
    """Scores recipe totals for one dietary goal."""

    def score(self, totals: MacroProfile) -> HealthScore:
        """Return a score in [0, 100] for the totals."""


@dataclass(frozen=True)
class MacroTargets:
    """Target share of macro calories, in percent."""

    protein_pct: float
    carbs_pct: float
    fat_pct: float


@dataclass(frozen=True)
class ScoreWeights:
    """Blend weights of the score components."""

    protein: float = 0.35
    balance: float = 0.35
    fiber: float = 0.15
    sugar: float = 0.15


GOAL_TARGETS: dict[str, MacroTargets] = {
    "general": MacroTargets(protein_pct=25, carbs_pct=45, fat_pct=30),
    "weight_loss": MacroTargets(protein_pct=35, carbs_pct=35, fat_pct=30),
    "muscle_gain": MacroTargets(protein_pct=30, carbs_pct=45, fat_pct=25),
    "maintenance": MacroTargets(protein_pct=25, carbs_pct=50, fat_pct=25),
}


@dataclass(frozen=True)
class BalancedGoalStrategy:
    """Protein density, macro balance, fiber bonus and sugar penalty.

    - protein density: grams per 100 kcal, full credit at
      ``protein_full_credit`` g;
    - macro balance: L1 distance between the calorie mix and the goal
      targets, zero credit at ``balance_zero_distance`` points;
    - fiber: grams per 1000 kcal, full credit at ``fiber_full_credit`` g;
    - sugar: grams per 100 kcal above ``sugar_free_allowance`` are penalized,
      fully at ``sugar_free_allowance + sugar_penalty_span``.

    The blend is non-decreasing in fiber and non-increasing in sugar.
    """

    targets: MacroTargets
    weights: ScoreWeights = ScoreWeights()
    protein_full_credit: float = 12.0
    balance_zero_distance: float = 120.0
    fiber_full_credit: float = 20.0
    sugar_free_allowance: float = 6.0
    sugar_penalty_span: float = 10.0

    def score(self, totals: MacroProfile) -> HealthScore:
        calories = max(0.0, totals.calories)
        protein = max(0.0, totals.protein_g)
        carbs = max(0.0, totals.carbs_g)
        fat = max(0.0, totals.fat_g)
        fiber = max(0.0, totals.fiber_g)
        sugar = max(0.0, totals.sugar_g)

        protein_per_100 = protein / (calories / 100) if calories > 0 else 0.0
        protein_score = _clamp01(protein_per_100 / self.protein_full_credit)

        protein_kcal = protein * KCAL_PER_G_PROTEIN
        carbs_kcal = carbs * KCAL_PER_G_CARBS
        fat_kcal = fat * KCAL_PER_G_FAT
        macro_kcal = max(1.0, protein_kcal + carbs_kcal + fat_kcal)
        distance = (
            abs(protein_kcal / macro_kcal * 100 - self.targets.protein_pct)
            + abs(carbs_kcal / macro_kcal * 100 - self.targets.carbs_pct)
            + abs(fat_kcal / macro_kcal * 100 - self.targets.fat_pct)
        )
        balance_score = _clamp01(1 - distance / self.balance_zero_distance)

        fiber_per_1000 = fiber / (calories / 1000) if calories > 0 else 0.0
        fiber_score = _clamp01(fiber_per_1000 / self.fiber_full_credit)

        sugar_per_100 = sugar / (calories / 100) if calories > 0 else 0.0
        sugar_penalty = _clamp01(
            (sugar_per_100 - self.sugar_free_allowance) / self.sugar_penalty_span
        )

        raw = (
            self.weights.protein * protein_score
            + self.weights.balance * balance_score
            + self.weights.fiber * fiber_score
            + self.weights.sugar * (1 - sugar_penalty)
        )
        value = _to_score(raw)
        return HealthScore(
            value=value,
            label=score_label(value),
            breakdown={
                "protein_density": _to_score(protein_score),
                "macro_balance": _to_score(balance_score),
                "fiber": _to_score(fiber_score),
                "sugar": _to_score(1 - sugar_penalty),
            },
        )


def _default_strategies() -> dict[str, ScoringStrategy]:
    return {
        goal: BalancedGoalStrategy(targets) for goal, targets in GOAL_TARGETS.items()
    }


@dataclass
class HealthScorer:
    """Selects a scoring strategy by goal name."""

    strategies: dict[str, ScoringStrategy] = field(default_factory=_default_strategies)

    def register_goal(self, goal: str, strategy: ScoringStrategy) -> None:
        """Add or replace the strategy for a goal."""
        self.strategies[goal] = strategy

    def goals(self) -> list[str]:
        """Return the known goal names."""
        return sorted(self.strategies)

    def score(self, totals: MacroProfile, goal: str = "general") -> HealthScore:
        """Score totals for a goal; unknown goals are rejected."""
        strategy = self.strategies.get(goal)
        if strategy is None:
            raise ValidationError(
                f"unknown goal {goal!r}", details=[f"expected one of {self.goals()}"]
            )
        return strategy.score(totals)


def score_label(value: int) -> str:
    """Map a numeric score to a coarse label."""
    if value >= 80:
        return "great"
    if value >= 60:
        return "good"
    if value >= 40:
        return "ok"
    return "poor"


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _to_score(fraction: float) -> int:
    value = int(round_half_up(SCORE_MAX * _clamp01(fraction)))
    return max(SCORE_MIN, min(SCORE_MAX, value))

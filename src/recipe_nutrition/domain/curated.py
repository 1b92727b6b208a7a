"""Models for curated food packs and their lint findings."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from recipe_nutrition.domain.foods import FoodRecord, FoodUnit

Number = Annotated[float, Field(strict=True)]
PositiveNumber = Annotated[float, Field(strict=True, gt=0)]
NonNegativeNumber = Annotated[float, Field(strict=True, ge=0)]


class CuratedUnit(BaseModel):
    """Serving unit declared for a curated item."""

    label: str = Field(min_length=1)
    grams: PositiveNumber


class CuratedItem(BaseModel):
    """Single food entry of a curated pack."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    brand: str | None = None
    category_id: str | None = Field(default=None, alias="categoryId")
    density_gml: PositiveNumber | None = Field(default=None, alias="densityGml")
    kcal100: Number
    protein100: NonNegativeNumber
    carbs100: NonNegativeNumber
    fat100: NonNegativeNumber
    fiber100: NonNegativeNumber | None = None
    sugar100: NonNegativeNumber | None = None
    units: list[CuratedUnit] = Field(default_factory=list)
    aliases: list[str] = Field(default_factory=list)
    verification: Literal["verified", "unverified", "suspect"] = "verified"
    popularity: int = Field(default=1, ge=0)

    def to_food_record(self, source: str = "template") -> FoodRecord:
        """Convert the pack entry into a catalog record."""
        return FoodRecord(
            id=self.id,
            name=self.name.strip(),
            brand=self.brand,
            category_id=self.category_id,
            source=source,
            verification=self.verification,
            kcal_100g=self.kcal100,
            protein_100g=self.protein100,
            carbs_100g=self.carbs100,
            fat_100g=self.fat100,
            fiber_100g=self.fiber100 or 0.0,
            sugar_100g=self.sugar100 or 0.0,
            density_gml=self.density_gml,
            popularity=self.popularity,
            units=tuple(FoodUnit(label=u.label, grams=u.grams) for u in self.units),
        )


class PackMeta(BaseModel):
    """Pack header."""

    name: str
    version: int = Field(ge=1)


class CuratedPack(BaseModel):
    """A batch of curated food entries intended for catalog seeding."""

    meta: PackMeta
    items: list[CuratedItem]


class LintIssueKind(StrEnum):
    """Classification of curated pack findings."""

    ZERO_MACROS = "ZERO MACROS"
    NO_UNITS = "NO UNITS"
    IMPLAUSIBLE_KCAL = "IMPLAUSIBLE KCAL"
    POSSIBLE_DUPLICATE = "POSSIBLE DUPE"


@dataclass(frozen=True)
class LintIssue:
    """Advisory finding about one or more pack entries."""

    kind: LintIssueKind
    food_ids: tuple[str, ...]
    message: str

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


@dataclass(frozen=True)
class LintReport:
    """All findings for a pack."""

    issues: list[LintIssue]

    @property
    def ok(self) -> bool:
        return not self.issues

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def by_kind(self, kind: LintIssueKind) -> list[LintIssue]:
        """Return the issues of a single kind."""
        return [issue for issue in self.issues if issue.kind == kind]

"""Alias generation for food records and the alias backfill job."""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from recipe_nutrition.domain.foods import FoodRecord
from recipe_nutrition.services.catalog import FoodRepository
from recipe_nutrition.services.text import normalize

_logger = logging.getLogger(__name__)

# Fat-modifier families after normalization ("fat free" and "skim" are "nonfat").
FAT_MODIFIER_GROUPS: dict[str, tuple[str, ...]] = {
    "nonfat": ("nonfat",),
    "part skim": ("part skim",),
    "reduced fat": ("reduced fat", "low fat", "lite", "light", "2%", "1%"),
}

_FAT_GROUP_PATTERNS: dict[str, re.Pattern[str]] = {
    "nonfat": re.compile(r"\bnonfat\b"),
    "part skim": re.compile(r"\bpart skim\b"),
    "reduced fat": re.compile(r"\b(reduced fat|low fat|lite|light)\b|\b[12]%"),
}


@dataclass(frozen=True)
class AliasRule:
    """Category-driven alias rule.

    A rule applies when the food's category is one of ``category_ids`` or its
    normalized name matches ``name_pattern``, unless ``exclude_pattern``
    matches. ``fat_modifiers`` is "present" to permute only the modifier
    families found in the name, "all" to permute every family, or None.
    """

    name: str
    name_pattern: re.Pattern[str]
    category_ids: frozenset[str] = frozenset()
    exclude_pattern: re.Pattern[str] | None = None
    aliases: tuple[str, ...] = ()
    when_contains: tuple[tuple[str, tuple[str, ...]], ...] = ()
    substitutions: tuple[tuple[str, str], ...] = ()
    generic_heads: tuple[str, ...] = ()
    named_heads: tuple[str, ...] = ()
    fat_modifiers: str | None = None

    def applies(self, name: str, category_id: str | None) -> bool:
        if self.exclude_pattern is not None and self.exclude_pattern.search(name):
            return False
        if category_id is not None and category_id in self.category_ids:
            return True
        return bool(self.name_pattern.search(name))

    def expand(self, name: str) -> list[str]:
        out = list(self.aliases)
        for needle, extra in self.when_contains:
            if needle in name:
                out.extend(extra)
        for word, replacement in self.substitutions:
            out.append(re.sub(rf"\b{re.escape(word)}\b", replacement, name))
        if self.fat_modifiers is None:
            return out
        heads = list(self.generic_heads)
        heads.extend(head for head in self.named_heads if head in name)
        for group, terms in FAT_MODIFIER_GROUPS.items():
            present = _FAT_GROUP_PATTERNS[group].search(name)
            if self.fat_modifiers == "present" and not present:
                continue
            for head in heads:
                for term in terms:
                    out.append(f"{term} {head}")
                    out.append(f"{head} {term}")
        return out


ALIAS_RULES: tuple[AliasRule, ...] = (
    AliasRule(
        name="cheese",
        category_ids=frozenset({"cheese"}),
        name_pattern=re.compile(
            r"\b(cheese|mozzarella|cheddar|parmesan|jack|swiss"
            r"|colby|gouda|feta|ricotta)\b"
        ),
        aliases=("cheese",),
        when_contains=(
            ("mozzarella", ("mozz", "mozzarella cheese")),
            ("cheddar", ("cheddar cheese",)),
            ("parmesan", ("parm", "parmesan cheese")),
        ),
        generic_heads=("cheese",),
        named_heads=("mozzarella", "cheddar"),
        fat_modifiers="present",
    ),
    AliasRule(
        name="milk",
        name_pattern=re.compile(r"\bmilk\b"),
        exclude_pattern=re.compile(
            r"\b(goat|sheep|almond|soy|oat|coconut|rice|cashew|buttermilk)\b"
        ),
        generic_heads=("milk",),
        fat_modifiers="all",
    ),
    AliasRule(
        name="yogurt",
        name_pattern=re.compile(r"\byogurt\b"),
        aliases=("yogurt", "greek yogurt"),
        generic_heads=("yogurt",),
        fat_modifiers="all",
    ),
    AliasRule(
        name="whey",
        category_ids=frozenset({"whey"}),
        name_pattern=re.compile(r"\b(whey|protein powder)\b"),
        aliases=(
            "whey",
            "whey protein",
            "protein powder",
            "whey powder",
            "whey protein powder",
        ),
        when_contains=(
            ("isolate", ("whey isolate", "protein isolate", "whey protein isolate")),
            (
                "concentrate",
                ("whey concentrate", "protein concentrate", "whey protein concentrate"),
            ),
        ),
    ),
    AliasRule(
        name="flour",
        category_ids=frozenset({"flour", "starch"}),
        name_pattern=re.compile(r"\b(flour|starch|cornstarch)\b"),
        aliases=("powder",),
        when_contains=(
            ("oat", ("oat flour",)),
            ("almond", ("almond flour",)),
            ("cornstarch", ("cornstarch", "corn starch")),
        ),
        substitutions=(("flour", "powder"),),
    ),
    AliasRule(
        name="oil",
        category_ids=frozenset({"oil"}),
        name_pattern=re.compile(r"\boil\b"),
        aliases=("cooking oil",),
        substitutions=(("oil", ""),),
    ),
    AliasRule(
        name="egg",
        name_pattern=re.compile(r"\beggs?\b"),
        exclude_pattern=re.compile(r"\b(eggplant|noodles?)\b"),
        aliases=("egg", "eggs"),
        when_contains=(("white", ("egg white", "egg whites", "carton egg whites")),),
    ),
    AliasRule(
        name="rice",
        category_ids=frozenset({"rice_uncooked"}),
        name_pattern=re.compile(r"\brice\b"),
        exclude_pattern=re.compile(r"\b(milk|flour|vinegar|noodles?)\b"),
        aliases=("rice",),
        when_contains=(
            ("white", ("white rice",)),
            ("brown", ("brown rice",)),
        ),
    ),
    AliasRule(
        name="oats",
        category_ids=frozenset({"oats"}),
        name_pattern=re.compile(r"\boats\b"),
        exclude_pattern=re.compile(r"\bmilk\b"),
        aliases=("oats", "rolled oats", "old fashioned oats", "oatmeal"),
    ),
)


def canonical_alias(food_name: str) -> str:
    """Return the normalized form of a food's display name."""
    return normalize(food_name)


def generate_aliases_for_food(
    food_name: str, category_id: str | None, rules: tuple[AliasRule, ...] = ALIAS_RULES
) -> list[str]:
    """Return extra aliases derived from the category rule table.

    Pure and deterministic: every alias is normalized, the canonical alias is
    left out, and duplicates are removed while keeping first-seen order.
    """
    name = canonical_alias(food_name)
    if not name:
        return []
    generated: list[str] = []
    for rule in rules:
        if rule.applies(name, category_id):
            generated.extend(rule.expand(name))
    return _dedupe(generated, exclude={name})


def alias_set_for_food(
    food_name: str, category_id: str | None, declared: Iterable[str] = ()
) -> list[str]:
    """Return the canonical alias, then declared aliases, then generated ones."""
    canonical = canonical_alias(food_name)
    generated = generate_aliases_for_food(food_name, category_id)
    return _dedupe([canonical, *declared, *generated], exclude=set())


def _dedupe(values: list[str], exclude: set[str]) -> list[str]:
    seen = set(exclude)
    out: list[str] = []
    for value in values:
        alias = normalize(value)
        if not alias or alias in seen:
            continue
        seen.add(alias)
        out.append(alias)
    return out


@dataclass
class BackfillSummary:
    """Counters reported by an alias backfill run."""

    foods: int = 0
    created: int = 0
    skipped: int = 0
    pages: int = 0


@dataclass
class AliasBackfillService:
    """Writes the alias set of every catalog food, page by page."""

    repository: FoodRepository
    page_size: int = 500

    def backfill(self, page_size: int | None = None) -> BackfillSummary:
        """Create missing aliases for all foods; safe to re-run."""
        size = page_size or self.page_size
        summary = BackfillSummary()
        cursor: str | None = None
        while True:
            page = self.repository.list_foods_paged(size, cursor)
            summary.pages += 1
            for food in page.items:
                self._backfill_food(food, summary)
            _logger.info(
                "Alias backfill page %s: foods=%s created=%s skipped=%s",
                summary.pages,
                summary.foods,
                summary.created,
                summary.skipped,
            )
            if page.next_cursor is None:
                break
            cursor = page.next_cursor
        return summary

    def _backfill_food(self, food: FoodRecord, summary: BackfillSummary) -> None:
        summary.foods += 1
        for alias in alias_set_for_food(food.name, food.category_id):
            if self.repository.create_alias(food.id, alias):
                summary.created += 1
            else:
                summary.skipped += 1

"""Data-quality checks for curated food packs."""

from collections.abc import Iterable

from recipe_nutrition.domain.curated import (
    CuratedItem,
    LintIssue,
    LintIssueKind,
    LintReport,
)
from recipe_nutrition.services.text import normalize

MAX_PLAUSIBLE_KCAL_100G = 1200


def lint_pack(items: Iterable[CuratedItem]) -> LintReport:
    """Run every check over the pack and collect the findings.

    Item findings come first, in pack order, followed by duplicate-name
    groups in first-seen order. Nothing is mutated.
    """
    issues: list[LintIssue] = []
    groups: dict[str, list[str]] = {}
    for item in items:
        ids = groups.setdefault(normalize(item.name), [])
        if item.id not in ids:
            ids.append(item.id)
        issues.extend(_item_issues(item))

    for key, ids in groups.items():
        if len(ids) > 1:
            issues.append(
                LintIssue(
                    kind=LintIssueKind.POSSIBLE_DUPLICATE,
                    food_ids=tuple(ids),
                    message=f'name="{key}" ids={",".join(ids)}',
                )
            )
    return LintReport(issues=issues)


def _item_issues(item: CuratedItem) -> list[LintIssue]:
    label = f'{item.id} "{item.name}"'
    found: list[LintIssue] = []
    macros = (item.kcal100, item.protein100, item.carbs100, item.fat100)
    if all(value == 0 for value in macros):
        found.append(_issue(LintIssueKind.ZERO_MACROS, item, label))
    if not item.units:
        found.append(_issue(LintIssueKind.NO_UNITS, item, label))
    if item.kcal100 > MAX_PLAUSIBLE_KCAL_100G or item.kcal100 < 0:
        message = f"{label} → {item.kcal100:g}"
        found.append(_issue(LintIssueKind.IMPLAUSIBLE_KCAL, item, message))
    return found


def _issue(kind: LintIssueKind, item: CuratedItem, message: str) -> LintIssue:
    return LintIssue(kind=kind, food_ids=(item.id,), message=message)

"""Tests for the curated pack linter."""

from recipe_nutrition.domain.curated import CuratedItem, CuratedUnit, LintIssueKind
from recipe_nutrition.services.linting import lint_pack


def _item(item_id: str, name: str, **values: object) -> CuratedItem:
    payload: dict[str, object] = {
        "kcal100": 100,
        "protein100": 5,
        "carbs100": 10,
        "fat100": 2,
        "units": [CuratedUnit(label="1 cup", grams=100)],
    }
    payload.update(values)
    return CuratedItem(id=item_id, name=name, **payload)


def test_olive_oil_pack_findings() -> None:
    items = [
        _item(
            "a",
            "Olive Oil",
            kcal100=884,
            protein100=0,
            carbs100=0,
            fat100=100,
            units=[CuratedUnit(label="1 tbsp", grams=13.6)],
        ),
        _item(
            "b", "OLIVE OIL", kcal100=0, protein100=0, carbs100=0, fat100=0, units=[]
        ),
    ]

    report = lint_pack(items)

    assert [(issue.kind, issue.food_ids) for issue in report.issues] == [
        (LintIssueKind.ZERO_MACROS, ("b",)),
        (LintIssueKind.NO_UNITS, ("b",)),
        (LintIssueKind.POSSIBLE_DUPLICATE, ("a", "b")),
    ]
    assert str(report.issues[0]) == 'ZERO MACROS: b "OLIVE OIL"'
    assert str(report.issues[2]) == 'POSSIBLE DUPE: name="olive oil" ids=a,b'
    assert report.exit_code == 1


def test_implausible_kcal_bounds() -> None:
    report = lint_pack(
        [
            _item("high", "Mystery Fat", kcal100=1500),
            _item("oil", "Olive Oil", kcal100=884),
            _item("neg", "Broken", kcal100=-5),
        ]
    )

    flagged = report.by_kind(LintIssueKind.IMPLAUSIBLE_KCAL)
    assert [issue.food_ids for issue in flagged] == [("high",), ("neg",)]
    assert str(flagged[0]) == 'IMPLAUSIBLE KCAL: high "Mystery Fat" → 1500'


def test_checks_do_not_short_circuit() -> None:
    empty = _item(
        "x", "Empty", kcal100=0, protein100=0, carbs100=0, fat100=0, units=[]
    )
    report = lint_pack([empty])
    assert {issue.kind for issue in report.issues} == {
        LintIssueKind.ZERO_MACROS,
        LintIssueKind.NO_UNITS,
    }


def test_repeated_id_is_not_a_duplicate() -> None:
    report = lint_pack([_item("a", "Rice"), _item("a", "rice")])
    assert report.by_kind(LintIssueKind.POSSIBLE_DUPLICATE) == []


def test_clean_pack() -> None:
    report = lint_pack([_item("a", "Rice"), _item("b", "Brown Rice")])
    assert report.ok
    assert report.exit_code == 0

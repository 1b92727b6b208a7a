"""Command line entry point for catalog maintenance and recipe nutrition."""

import argparse
import sys
from collections.abc import Callable
from pathlib import Path

import pydantic

from recipe_nutrition.app_logging import configure_logging
from recipe_nutrition.containers import AppContainer, build_container
from recipe_nutrition.domain.errors import NotFoundError, ValidationError
from recipe_nutrition.services.curated import load_pack
from recipe_nutrition.services.linting import lint_pack

DEFAULT_PACK_PATH = "data/curated/pack-basic.json"

EXIT_OK = 0
EXIT_NOT_CLEAN = 1
EXIT_ERROR = 2

ContainerFactory = Callable[[], AppContainer]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recipe-nutrition",
        description="Food catalog maintenance and recipe nutrition tools",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    lint = commands.add_parser("lint", help="Check a curated pack for data issues")
    lint.add_argument("path", nargs="?", default=DEFAULT_PACK_PATH, type=Path)

    seed = commands.add_parser("seed", help="Seed a curated pack into the catalog")
    seed.add_argument("path", nargs="?", default=DEFAULT_PACK_PATH, type=Path)
    seed.add_argument(
        "--dry-run", action="store_true", help="Report the writes without doing them"
    )
    seed.add_argument(
        "--force", action="store_true", help="Seed even when lint issues exist"
    )

    backfill = commands.add_parser(
        "backfill-aliases", help="Write the alias set of every catalog food"
    )
    backfill.add_argument("--page-size", type=int, default=None)

    match = commands.add_parser("match", help="Resolve ingredient text to a food")
    match.add_argument("text")

    compute = commands.add_parser(
        "compute", help="Recompute and store the nutrition of a recipe"
    )
    compute.add_argument("recipe_id")
    compute.add_argument("--goal", default=None)

    auto_map = commands.add_parser(
        "auto-map", help="Map the unmapped ingredients of a recipe to foods"
    )
    auto_map.add_argument("recipe_id")

    servings = commands.add_parser("servings", help="List the servings of a food")
    servings.add_argument("food_id")
    return parser


def main(
    argv: list[str] | None = None,
    container_factory: ContainerFactory = build_container,
) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(debug=args.debug)
    try:
        if args.command == "lint":
            return _lint(args.path)
        container = container_factory()
        if args.command == "seed":
            return _seed(container, args.path, args.dry_run, args.force)
        if args.command == "backfill-aliases":
            return _backfill(container, args.page_size)
        if args.command == "match":
            return _match(container, args.text)
        if args.command == "auto-map":
            return _auto_map(container, args.recipe_id)
        if args.command == "servings":
            return _servings(container, args.food_id)
        return _compute(container, args.recipe_id, args.goal)
    except pydantic.ValidationError as exc:
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        return EXIT_ERROR
    except (ValidationError, NotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        for detail in getattr(exc, "details", []):
            print(f" - {detail}", file=sys.stderr)
        return EXIT_ERROR


def _lint(path: Path) -> int:
    pack = load_pack(path)
    report = lint_pack(pack.items)
    if report.ok:
        print("No lint issues.")
    else:
        print("Lint issues:")
        for issue in report.issues:
            print(f" - {issue}")
    return report.exit_code


def _seed(container: AppContainer, path: Path, dry_run: bool, force: bool) -> int:
    pack = load_pack(path)
    summary = container.seed_service.seed(pack, dry_run=dry_run, force=force)
    prefix = "Would seed" if summary.dry_run else "Seeded"
    print(
        f"{prefix} {pack.meta.name} v{pack.meta.version}: "
        f"{summary.created} created, {summary.updated} updated, "
        f"{summary.units_created} units, {summary.aliases_created} aliases"
    )
    return EXIT_OK


def _backfill(container: AppContainer, page_size: int | None) -> int:
    if page_size is not None and page_size <= 0:
        raise ValidationError(f"page size must be positive, got {page_size}")
    summary = container.backfill_service.backfill(page_size)
    print(
        f"Backfilled {summary.foods} foods over {summary.pages} page(s): "
        f"{summary.created} aliases created, {summary.skipped} already present"
    )
    return EXIT_OK


def _match(container: AppContainer, text: str) -> int:
    match = container.food_matcher.match(text)
    if match is None:
        print(f"No match for {text!r}")
        return EXIT_NOT_CLEAN
    print(
        f"{match.food_id} confidence={match.confidence:.2f} "
        f"alias={match.alias!r} strategy={match.strategy}"
    )
    return EXIT_OK


def _compute(container: AppContainer, recipe_id: str, goal: str | None) -> int:
    result = container.nutrition_service.compute_recipe_nutrition(recipe_id, goal)
    totals = result.totals
    print(
        f"{result.recipe_id}: {totals.calories:g} kcal, "
        f"protein {totals.protein_g:g} g, carbs {totals.carbs_g:g} g, "
        f"fat {totals.fat_g:g} g; score {result.score.value} ({result.score.label})"
    )
    if result.provisional:
        print(f"Provisional: {'; '.join(result.provisional_reasons)}")
    return EXIT_OK


def _auto_map(container: AppContainer, recipe_id: str) -> int:
    summary = container.mapping_service.auto_map(recipe_id)
    print(
        f"{recipe_id}: {summary.mapped} mapped, {summary.skipped} already mapped, "
        f"{len(summary.unmatched_ingredient_ids)} unmatched"
    )
    if summary.unmatched_ingredient_ids:
        print(f"Unmatched: {', '.join(summary.unmatched_ingredient_ids)}")
        return EXIT_NOT_CLEAN
    return EXIT_OK


def _servings(container: AppContainer, food_id: str) -> int:
    for option in container.catalog_service.serving_options(food_id):
        print(f"{option.label}: {option.grams:g} g")
    return EXIT_OK


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()

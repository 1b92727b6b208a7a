"""Loading and seeding of curated food packs."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

import pydantic

from recipe_nutrition.domain.curated import CuratedItem, CuratedPack
from recipe_nutrition.domain.errors import ValidationError
from recipe_nutrition.services.aliases import alias_set_for_food
from recipe_nutrition.services.catalog import FoodRepository
from recipe_nutrition.services.linting import lint_pack

CURATED_SOURCE = "template"

_logger = logging.getLogger(__name__)


def load_pack(path: str | Path) -> CuratedPack:
    """Read and validate a pack file.

    Unreadable files, invalid JSON and schema violations all surface as
    ``ValidationError``; schema details are kept on ``error.details``.
    """
    pack_path = Path(path)
    try:
        raw = json.loads(pack_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ValidationError(f"cannot read pack {pack_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValidationError(f"pack {pack_path} is not valid JSON: {exc}") from exc
    try:
        return CuratedPack.model_validate(raw)
    except pydantic.ValidationError as exc:
        details = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        raise ValidationError(
            f"pack {pack_path} does not match the curated schema", details=details
        ) from exc


@dataclass
class SeedSummary:
    """Write counters of a seeding run; on a dry run, the writes it would do."""

    created: int = 0
    updated: int = 0
    units_created: int = 0
    aliases_created: int = 0
    dry_run: bool = False


@dataclass
class CuratedSeedService:
    """Upserts a linted curated pack into the food catalog."""

    repository: FoodRepository

    def seed(
        self, pack: CuratedPack, dry_run: bool = False, force: bool = False
    ) -> SeedSummary:
        """Seed every pack item with its units and aliases.

        A pack with lint findings is refused unless ``force`` is set.
        """
        report = lint_pack(pack.items)
        if not report.ok:
            if not force:
                raise ValidationError(
                    f"pack {pack.meta.name} has {len(report.issues)} lint issue(s)",
                    details=[str(issue) for issue in report.issues],
                )
            _logger.warning(
                "Seeding despite lint issues: pack=%s issues=%s",
                pack.meta.name,
                len(report.issues),
            )

        summary = SeedSummary(dry_run=dry_run)
        for item in pack.items:
            self._seed_item(item, summary)
        _logger.info(
            "Seed done: pack=%s version=%s dry_run=%s created=%s updated=%s "
            "units=%s aliases=%s",
            pack.meta.name,
            pack.meta.version,
            dry_run,
            summary.created,
            summary.updated,
            summary.units_created,
            summary.aliases_created,
        )
        return summary

    def _seed_item(self, item: CuratedItem, summary: SeedSummary) -> None:
        existing = self.repository.get_food(item.id)
        known_labels = {unit.label for unit in existing.units} if existing else set()
        record = item.to_food_record(source=CURATED_SOURCE)
        aliases = alias_set_for_food(record.name, record.category_id, item.aliases)
        new_units = [unit for unit in record.units if unit.label not in known_labels]

        if summary.dry_run:
            if existing is None:
                summary.created += 1
            else:
                summary.updated += 1
            summary.units_created += len(new_units)
            summary.aliases_created += len(aliases)
            return

        if self.repository.upsert_food(record):
            summary.created += 1
        else:
            summary.updated += 1
        for unit in new_units:
            self.repository.create_unit(record.id, unit.label, unit.grams)
            summary.units_created += 1
        for alias in aliases:
            if self.repository.create_alias(record.id, alias):
                summary.aliases_created += 1

# supplement_catalog.py

import json
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

from nutri_app.data_model import DosageCalculation, DosageInfo, SupplementCatalogEntry

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "supplement_catalog.json"


class CatalogError(Exception):
    pass


def _entry_from_dict(raw: dict) -> SupplementCatalogEntry:
    try:
        info = raw.get("dosageInfo") or {}
        calc = raw.get("dosageCalculation")

        calculation = None
        if calc:
            calculation = DosageCalculation(
                base_amount=calc.get("baseAmount"),
                weight_factor=calc.get("weightFactor"),
                gender_factor=dict(calc.get("genderFactor") or {}),
                age_factor=dict(calc.get("ageFactor") or {}),
                max_dosage=calc.get("maxDosage"),
            )

        return SupplementCatalogEntry(
            id=str(raw["id"]),
            name=str(raw["name"]).strip(),
            category=raw.get("category", ""),
            description=raw.get("description", ""),
            price_per_unit=float(raw.get("pricePerUnit", 0)),
            benefits=list(raw.get("benefits") or []),
            precautions=list(raw.get("precautions") or []),
            side_effects=list(raw.get("sideEffects") or []),
            interactions=list(raw.get("interactions") or []),
            food_sources=list(raw.get("foodSources") or []),
            tags=list(raw.get("tags") or []),
            dosage_info=DosageInfo(
                tablet_size=info.get("tabletSize"),
                tablet_unit=info.get("tabletUnit"),
                recommended_daily_tablets=info.get("recommendedDailyTablets"),
            ),
            dosage_calculation=calculation,
        )
    except KeyError as e:
        raise CatalogError(f"Catalog entry missing required field {e}: {raw!r}")
    except (TypeError, ValueError, AttributeError) as e:
        raise CatalogError(f"Malformed catalog entry ({e}): {raw!r}")


class SupplementCatalog:
    """
    Read-only supplement reference data.

    `id` is the identity of an entry. `name` is kept as a unique secondary
    index because subscriptions and advisor replies refer to supplements by
    their display name. Both are checked for uniqueness on construction.
    """

    def __init__(self, entries: Iterable[SupplementCatalogEntry]):
        self._entries: List[SupplementCatalogEntry] = list(entries)
        self._by_id: Dict[str, SupplementCatalogEntry] = {}
        self._by_name: Dict[str, SupplementCatalogEntry] = {}

        for entry in self._entries:
            if entry.id in self._by_id:
                raise CatalogError(f"Duplicate supplement id '{entry.id}'")
            if entry.name in self._by_name:
                raise CatalogError(f"Duplicate supplement name '{entry.name}'")
            self._by_id[entry.id] = entry
            self._by_name[entry.name] = entry

    def __iter__(self) -> Iterator[SupplementCatalogEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, supplement_id: str) -> bool:
        return supplement_id in self._by_id

    def get(self, supplement_id: str) -> Optional[SupplementCatalogEntry]:
        return self._by_id.get(supplement_id)

    def find_by_name(self, name: str) -> Optional[SupplementCatalogEntry]:
        if not isinstance(name, str):
            return None
        return self._by_name.get(name.strip())

    def names(self) -> List[str]:
        return [entry.name for entry in self._entries]

    @classmethod
    def from_dicts(cls, raw_entries: List[dict]) -> "SupplementCatalog":
        return cls(_entry_from_dict(raw) for raw in raw_entries)


def load_catalog(path: Optional[str] = None) -> SupplementCatalog:
    catalog_path = Path(path or os.getenv("SUPPLEMENT_CATALOG_PATH") or DEFAULT_CATALOG_PATH)
    try:
        with open(catalog_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        raise CatalogError(f"Supplement catalog not found: {catalog_path}")
    except json.JSONDecodeError as e:
        raise CatalogError(f"Supplement catalog is not valid JSON ({catalog_path}): {e}")

    if not isinstance(raw, list):
        raise CatalogError(f"Supplement catalog must be a JSON array: {catalog_path}")

    catalog = SupplementCatalog.from_dicts(raw)
    logger.info("Loaded %d supplements from %s", len(catalog), catalog_path)
    return catalog


_shared_catalog: Optional[SupplementCatalog] = None


def get_catalog(force_reload: bool = False) -> SupplementCatalog:
    """Process-wide catalog, loaded once and shared by reference."""
    global _shared_catalog
    if _shared_catalog is None or force_reload:
        _shared_catalog = load_catalog()
    return _shared_catalog

import logging
from typing import List, Sequence

from core.units import DEFAULT_CATALOG, UnitCatalog, normalize
from records.models import COST_UNIT, MATERIAL_FORM, ORDER_UNIT, MaterialRecord, ValidationOutcome

logger = logging.getLogger(__name__)

UNIT_COLUMNS = (ORDER_UNIT, COST_UNIT)


def validate(record: MaterialRecord, catalog: UnitCatalog = DEFAULT_CATALOG) -> ValidationOutcome:
    """
    Checks one record against the material schema without touching the UI.

    Every rule is evaluated; all violations are reported, not just the first.
    """
    violations: List[str] = []

    raw_form = record.get(MATERIAL_FORM)
    form = normalize(raw_form)
    if form not in catalog.categories:
        violations.append(
            f'{MATERIAL_FORM} "{"" if raw_form is None else raw_form}" is invalid. '
            f"Use: {' | '.join(catalog.categories)}"
        )

    allowed = catalog.allowed_names(form)
    for column in UNIT_COLUMNS:
        raw_unit = record.get(column)
        unit = normalize(raw_unit)
        if unit and unit not in allowed:
            violations.append(
                f'{column} "{raw_unit}" is invalid for form "{form}". Use: {" | ".join(allowed)}'
            )

    return ValidationOutcome(index=record.index, name=record.name_en, violations=tuple(violations))


def validate_batch(records: Sequence[MaterialRecord], catalog: UnitCatalog = DEFAULT_CATALOG) -> List[ValidationOutcome]:
    """
    Validates every record up front and logs the violations once.

    Nothing is removed from the batch: records with violations are still
    submitted with best-effort defaults.
    """
    logger.info("Validating all rows before starting...")
    outcomes = [validate(record, catalog) for record in records]

    dirty = [outcome for outcome in outcomes if not outcome.is_clean]
    for outcome in dirty:
        logger.warning(f'Row {outcome.index + 1} validation errors for "{outcome.name}":')
        for violation in outcome.violations:
            logger.warning(f"  - {violation}")

    if dirty:
        logger.warning(
            f"{len(dirty)} of {len(outcomes)} rows have validation errors. "
            "They will use defaults where possible."
        )
    else:
        logger.info("All rows passed validation.")
    return outcomes

import logging
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

SOLID = "solid"
LIQUID = "liquid"

# Codes of the material-form selector itself.
FORM_CODES: Mapping[str, str] = MappingProxyType({SOLID: "1", LIQUID: "2"})


def normalize(value: object) -> str:
    """Lower-cases and trims a raw cell value; None becomes an empty string."""
    if value is None:
        return ""
    return str(value).strip().lower()


class UnitCatalog:
    """
    Static unit names and option codes per material form.

    Lookups are case-insensitive and whitespace-trimmed. A name that is not
    known for the category resolves to the category's default code with a
    warning; resolution never fails.
    """

    def __init__(
        self,
        units: Mapping[str, Mapping[str, str]],
        default_units: Mapping[str, str],
        fallback_category: str,
    ):
        for category, mapping in units.items():
            codes = list(mapping.values())
            if len(codes) != len(set(codes)):
                raise ValueError(f"Duplicate unit codes in category '{category}'")
            if default_units[category] not in mapping:
                raise ValueError(f"Default unit for '{category}' is not one of its units")

        self._units: Dict[str, Mapping[str, str]] = {
            category: MappingProxyType({normalize(name): code for name, code in mapping.items()})
            for category, mapping in units.items()
        }
        self._default_units = dict(default_units)
        self._fallback_category = fallback_category

    @property
    def categories(self) -> Tuple[str, ...]:
        return tuple(self._units)

    def category_for(self, form: object) -> str:
        """Maps a raw form value onto a known category, falling back for unknown forms."""
        key = normalize(form)
        return key if key in self._units else self._fallback_category

    def units_for(self, form: object) -> Mapping[str, str]:
        return self._units[self.category_for(form)]

    def allowed_names(self, form: object) -> Tuple[str, ...]:
        return tuple(self.units_for(form))

    def default_unit(self, form: object) -> str:
        return self._default_units[self.category_for(form)]

    def default_code(self, form: object) -> str:
        category = self.category_for(form)
        return self._units[category][self._default_units[category]]

    def first_code(self, form: object) -> str:
        """Code of the first option rendered for the category once it loaded."""
        return next(iter(self.units_for(form).values()))

    def unit_or_default(self, form: object, unit_name: Optional[object]) -> str:
        """An empty unit cell means the form's default unit."""
        name = normalize(unit_name)
        return name or self.default_unit(form)

    def resolve(self, form: object, unit_name: object) -> str:
        """Returns the option code for ``unit_name`` within the form's category."""
        category = self.category_for(form)
        mapping = self._units[category]
        code = mapping.get(normalize(unit_name))
        if code is None:
            default = self.default_code(category)
            logger.warning(
                f"Unknown unit '{unit_name}' for form '{category}'. "
                f"Allowed values: {' | '.join(mapping)}. Defaulting to {default}."
            )
            return default
        return code


DEFAULT_CATALOG = UnitCatalog(
    units={
        SOLID: {"gram": "1", "kilogram": "2", "tonne": "3"},
        LIQUID: {"milliliter": "4", "liter": "5", "gallon": "6"},
    },
    default_units={SOLID: "gram", LIQUID: "liter"},
    fallback_category=SOLID,
)

"""Immutable lookup table of required element specifications."""

from __future__ import annotations

from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from notes_validator.catalog.elements import ELEMENT_SPECS, ElementSpec, SoapTag
from notes_validator.common.exceptions import CatalogError


class PatternCatalog:
    """Read-only mapping from element name to `ElementSpec`.

    A miss is a normal outcome: `lookup` returns None and callers degrade.
    """

    def __init__(self, specs: Iterable[ElementSpec]) -> None:
        table: dict[str, ElementSpec] = {}
        for spec in specs:
            if spec.name in table:
                raise CatalogError(f"Duplicate element in catalog: {spec.name!r}")
            table[spec.name] = spec
        self._specs: Mapping[str, ElementSpec] = MappingProxyType(table)

    def lookup(self, element_name: str) -> ElementSpec | None:
        return self._specs.get(element_name)

    def __contains__(self, element_name: object) -> bool:
        return element_name in self._specs

    def __iter__(self) -> Iterator[ElementSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._specs)

    def by_section(self, tag: SoapTag) -> tuple[ElementSpec, ...]:
        return tuple(spec for spec in self._specs.values() if spec.soap_section == tag)

    def section_for(self, element_name: str) -> SoapTag | None:
        spec = self._specs.get(element_name)
        return spec.soap_section if spec else None


@lru_cache(maxsize=1)
def get_catalog() -> PatternCatalog:
    """Return the process-wide catalog built from the bundled element specs."""
    return PatternCatalog(ELEMENT_SPECS)


__all__ = ["PatternCatalog", "get_catalog"]

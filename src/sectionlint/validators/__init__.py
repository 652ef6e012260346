"""Validators run against each discovered test.

- NamingValidator: Declaration prefixes and name shapes
- StructureValidator: Section presence, uniqueness and ordering
- CrossReferenceValidator: Relationships between sections (literal
  assertions, SUT purity, expectations independence, mock verification)

Every validator takes the analysis configuration and the resolved RuleSet,
and exposes ``validate(test_case, table) -> list[Violation]``.

Example:
    >>> from sectionlint.validators import NamingValidator, StructureValidator
    >>> validator = StructureValidator(config, rules)
    >>> violations = validator.validate(test_case, table)
"""

from __future__ import annotations

from sectionlint.validators.cross_reference import CrossReferenceValidator
from sectionlint.validators.naming import EXPECTED_PREFIXES, NamingValidator
from sectionlint.validators.structure import StructureValidator

__all__: list[str] = [
    "EXPECTED_PREFIXES",
    "CrossReferenceValidator",
    "NamingValidator",
    "StructureValidator",
]

"""Analysis configuration.

AnalysisConfig is the immutable value the checker is constructed with. It is
passed explicitly (never read from global state), so analyses with different
settings can run side by side in one process. Loading it from a YAML file is
the CLI's job (see sectionlint.cli.config_loader).
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sectionlint.dialects import available_dialects, get_dialect
from sectionlint.errors import UnsupportedDialectError
from sectionlint.model import SectionKind
from sectionlint.result import Severity
from sectionlint.rules import RULES

DEFAULT_NAMING_DENY_LIST: Final[frozenset[str]] = frozenset(
    {
        "works",
        "it_works",
        "itworks",
        "success",
        "succeeds",
        "passes",
        "ok",
        "test",
        "test1",
        "test2",
        "test3",
        "mytest",
        "basic",
        "simple",
        "foo",
        "bar",
        "temp",
        "todo",
    }
)
"""Test names that say nothing about the behaviour under test."""

DEFAULT_IGNORED_IDENTIFIERS: Final[frozenset[str]] = frozenset({"_", "err", "self", "this", "t"})
"""Names exempt from naming rules (discards, Go errors, receivers, test handles)."""

DEFAULT_REQUIRED_SECTIONS: Final[tuple[SectionKind, ...]] = (SectionKind.WHEN, SectionKind.THEN)


def _unknown_rules(rule_ids: Any) -> list[str]:
    return sorted(rule_id for rule_id in rule_ids if rule_id not in RULES)


class AnalysisConfig(BaseModel):
    """Options consumed by the checker.

    Attributes:
        rules: Rule IDs to enable. None enables the catalog defaults.
        severity_overrides: Rule ID to severity replacing the default.
        naming_deny_list: Vague test names (compared case-insensitively).
        dialect: Dialect forced for every file. None infers it per file
            from the extension.
        allow_mocking_after_setup: Let MOCKING and SETUP appear in either order.
        allow_trivial_sut_literals: Allow literal arguments when constructing
            the SUT.
        required_sections: Sections every sectioned test must contain.
        ignored_identifiers: Names never checked by the naming rules.
        max_workers: Size of the file analysis worker pool.

    Example:
        >>> config = AnalysisConfig(
        ...     severity_overrides={"vague-test-name": "error"},
        ...     allow_mocking_after_setup=True,
        ... )
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        json_schema_extra={
            "examples": [
                {"dialect": "csharp", "severity_overrides": {"naming-prefix": "warning"}},
                {"rules": ["section-ordering", "no-literal-assertion"], "max_workers": 8},
            ]
        },
    )

    rules: frozenset[str] | None = Field(
        default=None,
        description="Rule IDs to enable (None enables the catalog defaults)",
    )
    severity_overrides: dict[str, Severity] = Field(
        default_factory=dict,
        description="Per-rule severity overrides",
    )
    naming_deny_list: frozenset[str] = Field(
        default=DEFAULT_NAMING_DENY_LIST,
        description="Vague test names that are reported",
    )
    dialect: str | None = Field(
        default=None,
        description="Dialect forced for every file (None infers it from the extension)",
    )
    allow_mocking_after_setup: bool = Field(
        default=False,
        description="Give MOCKING and SETUP the same rank in the canonical order",
    )
    allow_trivial_sut_literals: bool = Field(
        default=True,
        description="Allow literal arguments in the SUT construction call",
    )
    required_sections: tuple[SectionKind, ...] = Field(
        default=DEFAULT_REQUIRED_SECTIONS,
        description="Sections every sectioned test must contain",
    )
    ignored_identifiers: frozenset[str] = Field(
        default=DEFAULT_IGNORED_IDENTIFIERS,
        description="Identifiers exempt from naming rules",
    )
    max_workers: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Number of files analysed concurrently",
    )

    @field_validator("rules")
    @classmethod
    def validate_rules(cls, value: frozenset[str] | None) -> frozenset[str] | None:
        """Reject rule IDs that are not in the catalog."""
        if value is None:
            return value
        unknown = _unknown_rules(value)
        if unknown:
            msg = f"Unknown rule IDs: {', '.join(unknown)}. Known rules: {', '.join(sorted(RULES))}"
            raise ValueError(msg)
        return value

    @field_validator("severity_overrides")
    @classmethod
    def validate_severity_overrides(cls, value: dict[str, Severity]) -> dict[str, Severity]:
        """Reject severity overrides for rules that are not in the catalog."""
        unknown = _unknown_rules(value)
        if unknown:
            msg = f"Severity override for unknown rule IDs: {', '.join(unknown)}"
            raise ValueError(msg)
        return value

    @field_validator("naming_deny_list")
    @classmethod
    def normalize_deny_list(cls, value: frozenset[str]) -> frozenset[str]:
        return frozenset(name.strip().lower() for name in value if name.strip())

    @field_validator("dialect")
    @classmethod
    def validate_dialect(cls, value: str | None) -> str | None:
        """Resolve aliases ("c#", "ts") to the canonical dialect name."""
        if value is None:
            return value
        try:
            return get_dialect(value).name
        except UnsupportedDialectError as e:
            msg = f"Unknown dialect '{value}'. Available: {', '.join(available_dialects())}"
            raise ValueError(msg) from e

    @field_validator("required_sections", mode="before")
    @classmethod
    def parse_required_sections(cls, value: Any) -> Any:
        """Accept labels in any case, with spaces or underscores."""
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple, set, frozenset)):
            return value
        kinds: list[Any] = []
        for item in value:
            if isinstance(item, str):
                label = " ".join(item.replace("_", " ").replace("-", " ").upper().split())
                if label == "BEHAVIOUR":
                    label = "BEHAVIOR"
                if label == SectionKind.UNLABELED.value:
                    msg = "UNLABELED cannot be a required section"
                    raise ValueError(msg)
                kinds.append(label)
            else:
                kinds.append(item)
        return tuple(kinds)

    def with_overrides(self, **changes: Any) -> AnalysisConfig:
        """Return a validated copy with some options replaced.

        None values are ignored, so CLI options that were not given leave the
        loaded configuration untouched.
        """
        updates = {key: value for key, value in changes.items() if value is not None}
        if not updates:
            return self
        return AnalysisConfig.model_validate({**self.model_dump(), **updates})


__all__ = [
    "DEFAULT_IGNORED_IDENTIFIERS",
    "DEFAULT_NAMING_DENY_LIST",
    "DEFAULT_REQUIRED_SECTIONS",
    "AnalysisConfig",
]

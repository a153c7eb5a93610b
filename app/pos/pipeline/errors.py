"""
Error taxonomy for receipt composition.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldProblem:
    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class ReceiptError(Exception):
    """Base class for everything the pipeline raises on purpose."""


class ValidationError(ReceiptError):
    """One or more request fields are missing or malformed.

    All problems of one request are collected before raising, so the caller
    sees a single aggregated error and no document is produced.
    """

    def __init__(self, problems: list[FieldProblem]):
        self.problems = list(problems)
        super().__init__("; ".join(f"{p.field}: {p.message}" for p in self.problems))

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([FieldProblem(field, message)])


class UnresolvedRuleError(ReceiptError):
    """No rule covers a combination, or two equally specific rules disagree."""

    def __init__(self, merchant: str, jurisdiction: str, tender: str, reason: str,
                 rules: tuple[str, ...] = ()):
        self.merchant = merchant
        self.jurisdiction = jurisdiction
        self.tender = tender
        self.rules = rules
        detail = f" ({', '.join(rules)})" if rules else ""
        super().__init__(f"{merchant}/{jurisdiction}/{tender}: {reason}{detail}")


class ClassificationAmbiguity(ReceiptError):
    """An item matched several special kinds and no precedence entry settles it."""

    def __init__(self, item_name: str, kinds: list[str]):
        self.item_name = item_name
        self.kinds = kinds
        super().__init__(f"{item_name!r} matches {', '.join(kinds)}")


class MissingContext(ReceiptError):
    """A block builder lacks optional store context; the renderer substitutes a placeholder."""

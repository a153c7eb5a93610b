"""
Rule profile resolver.

Maps (merchant, jurisdiction, tender) to a FieldRequirementProfile and a
TemplateKey. RULES is an ordered table; each row constrains any of the three
dimensions and carries a delta. Matching rows are applied from least to most
specific, so brand defaults compose with tender overrides and the most
specific row that names a template picks it. Two matching rows of equal
specificity that disagree on any attribute are a conflict, never a silent
tie-break.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from app.config import settings
from app.pos.pipeline.errors import UnresolvedRuleError
from app.pos.pipeline.merchants import get_merchant
from app.pos.pipeline.units import unit_profile
from app.pos.schemas import (
    FieldRequirementProfile,
    FieldState,
    Jurisdiction,
    TaxConvention,
    TemplateKey,
    TenderType,
)

logger = logging.getLogger(__name__)

REQ = FieldState.REQUIRED
OPT = FieldState.OPTIONAL_VISIBLE
HIDE = FieldState.HIDDEN_DISABLED

FIELDS: tuple[str, ...] = (
    "vehicleId",
    "dlNumber",
    "companyName",
    "driverFirstName",
    "driverLastName",
    "checkNumber",
    "checkNumberConfirm",
    "cardLast4",
    "cardEntryMethod",
    "copyType",
    "signature",
    "qty",
)

BASE_STATES: dict[str, FieldState] = {
    "vehicleId": REQ,
    "dlNumber": REQ,
    "companyName": REQ,
    "driverFirstName": OPT,
    "driverLastName": OPT,
    "checkNumber": HIDE,
    "checkNumberConfirm": HIDE,
    "cardLast4": OPT,
    "cardEntryMethod": OPT,
    "copyType": OPT,
    "signature": HIDE,
    "qty": OPT,
}

# a required field is unusable when the field it depends on is hidden
DEPENDENCIES: dict[str, str] = {
    "checkNumberConfirm": "checkNumber",
    "cardEntryMethod": "cardLast4",
}

DEFAULT_LAYOUT = "generic"

CARD_TENDERS = frozenset(t for t in TenderType if t.is_card)


# ---------------------------------------------------------------------------
# Rule rows
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rule:
    name: str
    merchants: Optional[frozenset[str]] = None
    jurisdictions: Optional[frozenset[Jurisdiction]] = None
    tenders: Optional[frozenset[TenderType]] = None
    fields: Mapping[str, FieldState] = field(default_factory=dict)
    labels: Mapping[str, str] = field(default_factory=dict)
    extended: Optional[frozenset[str]] = None
    template: Optional[str] = None
    tax: Optional[TaxConvention] = None
    volume_only: Optional[bool] = None

    @property
    def specificity(self) -> int:
        return sum(p is not None for p in (self.merchants, self.jurisdictions, self.tenders))

    def matches(self, merchant: str, jurisdiction: Jurisdiction, tender: TenderType) -> bool:
        return (
            (self.merchants is None or merchant in self.merchants)
            and (self.jurisdictions is None or jurisdiction in self.jurisdictions)
            and (self.tenders is None or tender in self.tenders)
        )

    def deltas(self) -> dict[str, Any]:
        """Flatten this row into ``attribute -> value`` pairs."""
        out: dict[str, Any] = {f"field:{k}": v for k, v in self.fields.items()}
        out.update({f"label:{k}": v for k, v in self.labels.items()})
        for attr in ("extended", "template", "tax", "volume_only"):
            value = getattr(self, attr)
            if value is not None:
                out[attr] = value
        return out


def _m(*keys: str) -> frozenset[str]:
    return frozenset(keys)


def _t(*tenders: TenderType) -> frozenset[TenderType]:
    return frozenset(tenders)


CANADA = frozenset({Jurisdiction.CANADA})

RULES: list[Rule] = [
    # -- everyone ----------------------------------------------------------
    Rule("default-template", template=DEFAULT_LAYOUT, tax=TaxConvention.ZERO),

    # -- single dimension --------------------------------------------------
    Rule("cash-hides-card", tenders=_t(TenderType.CASH),
         fields={"cardLast4": HIDE, "cardEntryMethod": HIDE}),
    Rule("efs-check-and-driver", tenders=_t(TenderType.EFS),
         fields={"driverFirstName": REQ, "driverLastName": REQ,
                 "checkNumber": REQ, "checkNumberConfirm": REQ,
                 "cardLast4": HIDE, "cardEntryMethod": HIDE}),
    # Canadian terminals do not report entry method
    Rule("canada-no-entry-method", jurisdictions=CANADA,
         fields={"cardEntryMethod": HIDE}),

    Rule("one9", merchants=_m("one9"), template="one9"),
    Rule("pilot", merchants=_m("pilot"), template="pilot"),
    Rule("flyingj", merchants=_m("flyingj"), template="flyingj"),
    Rule("loves", merchants=_m("loves"), template="loves", volume_only=True,
         fields={"qty": HIDE}),
    Rule("ta", merchants=_m("ta"), template="ta"),
    Rule("husky", merchants=_m("husky"), template="husky", tax=TaxConvention.INCLUDED),
    Rule("petrocanada", merchants=_m("petrocanada"), template="petrocanada",
         tax=TaxConvention.INCLUDED,
         fields={"vehicleId": HIDE, "dlNumber": HIDE, "companyName": HIDE}),
    Rule("pearson", merchants=_m("pearson"), tax=TaxConvention.INCLUDED),
    Rule("bvd", merchants=_m("bvd"), template="bvd", tax=TaxConvention.INCLUDED,
         volume_only=True,
         fields={"qty": HIDE, "vehicleId": HIDE, "dlNumber": HIDE, "companyName": HIDE},
         labels={"volume": "Volume", "price": "Unit Price"}),
    Rule("classic", merchants=_m("classic"), template="classic", tax=TaxConvention.ITEMIZED,
         fields={"vehicleId": OPT, "dlNumber": OPT, "companyName": OPT}),

    # -- two dimensions ----------------------------------------------------
    Rule("flyingj-canada", merchants=_m("flyingj"), jurisdictions=CANADA,
         template="flyingj_ca", tax=TaxConvention.ZERO),
    Rule("husky-card-no-fleet-fields", merchants=_m("husky"), tenders=CARD_TENDERS,
         fields={"vehicleId": HIDE, "dlNumber": HIDE, "companyName": HIDE}),
    Rule("one9-mastercard-extended", merchants=_m("one9"), tenders=_t(TenderType.MASTERCARD),
         extended=_m("vehicleId", "companyName"),
         fields={"dlNumber": HIDE, "checkNumber": HIDE, "checkNumberConfirm": HIDE,
                 "driverFirstName": HIDE, "driverLastName": HIDE, "signature": OPT}),
    Rule("one9-no-dl", merchants=_m("one9"), tenders=_t(TenderType.TCH, TenderType.CASH),
         fields={"dlNumber": HIDE}),
    Rule("truck-stop-cash-vehicle", merchants=_m("loves", "flyingj", "ta"),
         tenders=_t(TenderType.CASH),
         fields={"vehicleId": REQ, "dlNumber": HIDE}),
    Rule("ta-efs", merchants=_m("ta"), tenders=_t(TenderType.EFS),
         fields={"vehicleId": HIDE, "dlNumber": HIDE}),
    # driver identity replaces vehicle identity, check numbers are not asked
    Rule("loves-efs", merchants=_m("loves"), tenders=_t(TenderType.EFS),
         fields={"vehicleId": HIDE, "dlNumber": HIDE, "companyName": REQ,
                 "driverFirstName": REQ, "driverLastName": REQ, "signature": REQ,
                 "checkNumber": HIDE, "checkNumberConfirm": HIDE}),
    Rule("loves-visa-copy", merchants=_m("loves"), tenders=_t(TenderType.VISA),
         fields={"copyType": OPT, "signature": OPT}),
    Rule("pilot-efs", merchants=_m("pilot"), tenders=_t(TenderType.EFS),
         fields={"checkNumber": HIDE, "checkNumberConfirm": HIDE,
                 "driverFirstName": HIDE, "driverLastName": HIDE}),
    Rule("pilot-mastercard-extended", merchants=_m("pilot"), tenders=_t(TenderType.MASTERCARD),
         extended=_m("vehicleId", "companyName"),
         fields={"dlNumber": HIDE, "signature": OPT}),

    # -- three dimensions --------------------------------------------------
    Rule("flyingj-canada-bank-card", merchants=_m("flyingj"), jurisdictions=CANADA,
         tenders=_t(TenderType.VISA, TenderType.MASTERCARD),
         fields={"vehicleId": OPT, "companyName": OPT, "dlNumber": HIDE}),
]


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def _base_labels(jurisdiction: Jurisdiction) -> dict[str, str]:
    units = unit_profile(jurisdiction)
    return {
        "volume": units.volume_label,
        "price": units.price_label,
        "qty": "Quantity",
        "cashAdvanceQty": "Price",
    }


def default_profile(
    merchant_key: str, jurisdiction: Jurisdiction, tender: TenderType
) -> tuple[FieldRequirementProfile, TemplateKey]:
    """The documented fallback: base states on the generic layout."""
    profile = FieldRequirementProfile(
        states=dict(BASE_STATES),
        labels=_base_labels(jurisdiction),
        tax_convention=TaxConvention.ZERO,
    )
    return profile, TemplateKey(layout=DEFAULT_LAYOUT, tender=tender)


def check_consistency(profile: FieldRequirementProfile) -> list[str]:
    """Return human-readable violations; empty when the profile is sound."""
    problems: list[str] = []
    for name in profile.states:
        if name not in FIELDS:
            problems.append(f"unknown field {name}")
    for dependent, parent in DEPENDENCIES.items():
        if profile.is_required(dependent) and profile.is_hidden(parent):
            problems.append(f"{dependent} required while {parent} hidden")
    for name in sorted(profile.extended):
        if profile.is_hidden(name):
            problems.append(f"{name} routed to the extended block while hidden")
    return problems


def _evaluate(
    merchant_key: str,
    jurisdiction: Jurisdiction,
    tender: TenderType,
    rules: Iterable[Rule],
) -> tuple[FieldRequirementProfile, TemplateKey]:
    ident = (merchant_key, jurisdiction.value, tender.value)
    matched = [r for r in rules if r.matches(merchant_key, jurisdiction, tender)]

    resolved: dict[str, Any] = {}
    sources: dict[str, str] = {}
    for level in range(4):
        level_values: dict[str, tuple[Any, str]] = {}
        for rule in (r for r in matched if r.specificity == level):
            for attr, value in rule.deltas().items():
                seen = level_values.get(attr)
                if seen is not None and seen[0] != value:
                    raise UnresolvedRuleError(
                        *ident,
                        reason=f"equal-specificity rules disagree on {attr}",
                        rules=(seen[1], rule.name),
                    )
                level_values[attr] = (value, rule.name)
        for attr, (value, name) in level_values.items():
            resolved[attr] = value
            sources[attr] = name

    if "template" not in resolved:
        raise UnresolvedRuleError(*ident, reason="no rule selects a template")

    states = dict(BASE_STATES)
    labels = _base_labels(jurisdiction)
    for attr, value in resolved.items():
        kind, _, key = attr.partition(":")
        if kind == "field":
            states[key] = value
        elif kind == "label":
            labels[key] = value

    profile = FieldRequirementProfile(
        states=states,
        labels=labels,
        extended=resolved.get("extended", frozenset()),
        tax_convention=resolved.get("tax", TaxConvention.ZERO),
        volume_only=bool(resolved.get("volume_only", False)),
    )
    problems = check_consistency(profile)
    if problems:
        raise UnresolvedRuleError(
            *ident,
            reason="inconsistent profile: " + "; ".join(problems),
            rules=tuple(sorted(set(sources.values()))),
        )
    return profile, TemplateKey(layout=resolved["template"], tender=tender)


def resolve(
    merchant_key: str,
    jurisdiction: Jurisdiction,
    tender: TenderType,
    *,
    rules: Optional[Iterable[Rule]] = None,
    strict: Optional[bool] = None,
) -> tuple[FieldRequirementProfile, TemplateKey]:
    """Resolve one combination.

    In strict mode (everything but production) an UnresolvedRuleError
    propagates. In production it is logged and the default profile is used.
    """
    strict = settings.strict_rules if strict is None else strict
    merchant = get_merchant(merchant_key)
    try:
        if jurisdiction not in merchant.jurisdictions or tender not in merchant.tenders:
            raise UnresolvedRuleError(
                merchant_key, jurisdiction.value, tender.value,
                reason="outside the merchant's declared domain",
            )
        return _evaluate(merchant_key, jurisdiction, tender, RULES if rules is None else rules)
    except UnresolvedRuleError as exc:
        if strict:
            raise
        logger.warning("Rule resolution failed, using default profile: %s", exc)
        return default_profile(merchant_key, jurisdiction, tender)

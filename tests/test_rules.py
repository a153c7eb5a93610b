"""
Unit tests for the rule profile resolver.
"""
import logging

import pytest

from app.config import settings
from app.pos.pipeline.errors import UnresolvedRuleError
from app.pos.pipeline.merchants import MERCHANTS, supported_triples
from app.pos.pipeline.rules import (
    DEFAULT_LAYOUT,
    FIELDS,
    HIDE,
    REQ,
    RULES,
    Rule,
    check_consistency,
    default_profile,
    resolve,
)
from app.pos.schemas import (
    FieldRequirementProfile,
    FieldState,
    Jurisdiction,
    TaxConvention,
    TenderType,
)

TRIPLES = [(m.key, j, t) for m, j, t in supported_triples()]


# =====================================================================
# Totality and consistency
# =====================================================================
class TestTotality:
    @pytest.mark.parametrize("merchant,jurisdiction,tender", TRIPLES)
    def test_every_declared_triple_resolves(self, merchant, jurisdiction, tender):
        profile, key = resolve(merchant, jurisdiction, tender, strict=True)
        assert key.tender is tender
        assert key.layout

    @pytest.mark.parametrize("merchant,jurisdiction,tender", TRIPLES)
    def test_no_field_required_and_hidden(self, merchant, jurisdiction, tender):
        profile, _ = resolve(merchant, jurisdiction, tender, strict=True)
        assert not set(profile.required) & set(profile.hidden)
        assert check_consistency(profile) == []

    @pytest.mark.parametrize("merchant,jurisdiction,tender", TRIPLES)
    def test_profiles_only_name_known_fields(self, merchant, jurisdiction, tender):
        profile, _ = resolve(merchant, jurisdiction, tender, strict=True)
        assert set(profile.states) <= set(FIELDS)

    def test_rule_names_are_unique(self):
        names = [r.name for r in RULES]
        assert len(names) == len(set(names))

    def test_every_merchant_is_reachable(self):
        assert {m for m, _, _ in TRIPLES} == set(MERCHANTS)


# =====================================================================
# Representative combinations
# =====================================================================
class TestScenarios:
    def test_generic_usa_cash(self):
        profile, key = resolve("generic", Jurisdiction.USA, TenderType.CASH)
        assert key.layout == "generic"
        assert profile.is_required("vehicleId")
        assert profile.is_required("dlNumber")
        assert profile.is_hidden("signature")
        assert profile.tax_convention is TaxConvention.ZERO

    def test_loves_efs_swaps_vehicle_for_driver_identity(self):
        profile, key = resolve("loves", Jurisdiction.USA, TenderType.EFS)
        assert key.layout == "loves"
        assert profile.is_hidden("vehicleId")
        assert profile.is_hidden("dlNumber")
        for name in ("companyName", "driverFirstName", "driverLastName", "signature"):
            assert profile.is_required(name), name
        assert profile.is_hidden("checkNumber")
        assert profile.is_hidden("checkNumberConfirm")

    def test_bvd_canada_mastercard(self):
        profile, key = resolve("bvd", Jurisdiction.CANADA, TenderType.MASTERCARD)
        assert key.layout == "bvd"
        assert profile.is_hidden("qty")
        assert profile.label("volume") == "Volume"
        assert profile.label("price") == "Unit Price"
        assert profile.is_hidden("cardEntryMethod")
        assert profile.tax_convention is TaxConvention.INCLUDED

    @pytest.mark.parametrize("tender", [TenderType.CASH, TenderType.VISA, TenderType.EFS])
    def test_bvd_hides_quantity_for_every_tender(self, tender):
        profile, _ = resolve("bvd", Jurisdiction.CANADA, tender)
        assert profile.is_hidden("qty")
        assert profile.volume_only

    @pytest.mark.parametrize("tender", [TenderType.VISA, TenderType.MASTERCARD, TenderType.INTERAC,
                                        TenderType.EFS, TenderType.TCH])
    def test_husky_card_tenders_hide_fleet_fields(self, tender):
        profile, _ = resolve("husky", Jurisdiction.CANADA, tender)
        for name in ("vehicleId", "dlNumber", "companyName"):
            assert profile.is_hidden(name), name

    def test_husky_cash_keeps_fleet_fields(self):
        profile, _ = resolve("husky", Jurisdiction.CANADA, TenderType.CASH)
        assert profile.is_required("vehicleId")

    @pytest.mark.parametrize("merchant", ["husky", "petrocanada", "pearson", "bvd", "flyingj", "generic"])
    def test_canada_hides_entry_method(self, merchant):
        profile, _ = resolve(merchant, Jurisdiction.CANADA, TenderType.VISA)
        assert profile.is_hidden("cardEntryMethod")

    def test_usa_card_shows_entry_method(self):
        profile, _ = resolve("pilot", Jurisdiction.USA, TenderType.VISA)
        assert not profile.is_hidden("cardEntryMethod")

    def test_one9_mastercard_extended_block(self):
        profile, _ = resolve("one9", Jurisdiction.USA, TenderType.MASTERCARD)
        assert profile.extended == frozenset({"vehicleId", "companyName"})
        assert profile.is_hidden("checkNumber")
        assert profile.is_hidden("driverFirstName")
        assert not profile.is_hidden("signature")

    def test_efs_requires_checks_and_driver(self):
        profile, _ = resolve("one9", Jurisdiction.USA, TenderType.EFS)
        for name in ("driverFirstName", "driverLastName", "checkNumber", "checkNumberConfirm"):
            assert profile.is_required(name), name
        assert profile.is_hidden("cardLast4")

    def test_flyingj_template_splits_by_jurisdiction(self):
        _, usa = resolve("flyingj", Jurisdiction.USA, TenderType.CASH)
        _, canada = resolve("flyingj", Jurisdiction.CANADA, TenderType.CASH)
        assert usa.layout == "flyingj"
        assert canada.layout == "flyingj_ca"

    def test_labels_follow_units(self):
        usa, _ = resolve("pilot", Jurisdiction.USA, TenderType.CASH)
        canada, _ = resolve("husky", Jurisdiction.CANADA, TenderType.CASH)
        assert usa.label("volume") == "Gallons"
        assert canada.label("volume") == "Liters"

    @pytest.mark.parametrize("merchant,convention", [
        ("pilot", TaxConvention.ZERO),
        ("husky", TaxConvention.INCLUDED),
        ("petrocanada", TaxConvention.INCLUDED),
        ("pearson", TaxConvention.INCLUDED),
        ("classic", TaxConvention.ITEMIZED),
    ])
    def test_tax_convention(self, merchant, convention):
        jurisdiction = Jurisdiction.USA if merchant in ("pilot", "classic") else Jurisdiction.CANADA
        profile, _ = resolve(merchant, jurisdiction, TenderType.CASH)
        assert profile.tax_convention is convention


# =====================================================================
# Conflict detection and fallback
# =====================================================================
CONFLICTING = [
    Rule("base", template="generic"),
    Rule("brand-hides", merchants=frozenset({"pilot"}), fields={"vehicleId": HIDE}),
    Rule("cash-requires", tenders=frozenset({TenderType.CASH}), fields={"vehicleId": REQ}),
]


class TestConflicts:
    def test_equal_specificity_disagreement_raises(self):
        with pytest.raises(UnresolvedRuleError) as exc:
            resolve("pilot", Jurisdiction.USA, TenderType.CASH, rules=CONFLICTING, strict=True)
        assert set(exc.value.rules) == {"brand-hides", "cash-requires"}

    def test_tie_reported_despite_more_specific_rule(self):
        rules = CONFLICTING + [
            Rule("pilot-cash", merchants=frozenset({"pilot"}), tenders=frozenset({TenderType.CASH}),
                 fields={"vehicleId": FieldState.OPTIONAL_VISIBLE}),
        ]
        # the tie at level one is still reported; specificity does not hide it
        with pytest.raises(UnresolvedRuleError):
            resolve("pilot", Jurisdiction.USA, TenderType.CASH, rules=rules, strict=True)

    def test_agreeing_rules_do_not_conflict(self):
        rules = [
            Rule("base", template="generic"),
            Rule("a", merchants=frozenset({"pilot"}), fields={"dlNumber": HIDE}),
            Rule("b", tenders=frozenset({TenderType.CASH}), fields={"dlNumber": HIDE}),
        ]
        profile, _ = resolve("pilot", Jurisdiction.USA, TenderType.CASH, rules=rules, strict=True)
        assert profile.is_hidden("dlNumber")

    def test_missing_template_raises(self):
        with pytest.raises(UnresolvedRuleError):
            resolve("pilot", Jurisdiction.USA, TenderType.CASH, rules=[], strict=True)

    def test_dependency_violation_raises(self):
        rules = [
            Rule("base", template="generic"),
            Rule("confirm-only", tenders=frozenset({TenderType.CASH}),
                 fields={"checkNumberConfirm": REQ, "checkNumber": HIDE}),
        ]
        with pytest.raises(UnresolvedRuleError):
            resolve("generic", Jurisdiction.USA, TenderType.CASH, rules=rules, strict=True)

    def test_outside_declared_domain_raises(self):
        with pytest.raises(UnresolvedRuleError):
            resolve("husky", Jurisdiction.USA, TenderType.CASH, strict=True)

    def test_production_falls_back_to_default(self, caplog):
        with caplog.at_level(logging.WARNING):
            profile, key = resolve("pilot", Jurisdiction.USA, TenderType.CASH, rules=CONFLICTING, strict=False)
        assert key.layout == DEFAULT_LAYOUT
        assert profile.is_required("vehicleId")
        assert "default profile" in caplog.text

    def test_fallback_ignores_brand_layout_and_tax(self):
        profile, key = default_profile("husky", Jurisdiction.CANADA, TenderType.INTERAC)
        own_profile, own_key = resolve("husky", Jurisdiction.CANADA, TenderType.INTERAC)
        assert own_key.layout == "husky"
        assert own_profile.tax_convention is TaxConvention.INCLUDED
        assert key.layout == DEFAULT_LAYOUT == "generic"
        assert profile.tax_convention is TaxConvention.ZERO

    def test_strict_follows_environment(self, monkeypatch):
        monkeypatch.setattr(settings, "ENVIRONMENT", "production")
        _, key = resolve("pilot", Jurisdiction.USA, TenderType.CASH, rules=CONFLICTING)
        assert key.layout == DEFAULT_LAYOUT
        monkeypatch.setattr(settings, "ENVIRONMENT", "development")
        with pytest.raises(UnresolvedRuleError):
            resolve("pilot", Jurisdiction.USA, TenderType.CASH, rules=CONFLICTING)


class TestConsistencyCheck:
    def test_unknown_field(self):
        profile = FieldRequirementProfile(states={"favouriteColour": REQ})
        assert check_consistency(profile) == ["unknown field favouriteColour"]

    def test_extended_field_hidden(self):
        profile = FieldRequirementProfile(states={"vehicleId": HIDE}, extended=frozenset({"vehicleId"}))
        assert check_consistency(profile)

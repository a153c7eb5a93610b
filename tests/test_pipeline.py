"""
Unit tests for the receipt pipeline — units, classifier, settlement,
authorization, templates, renderer, composer and document output.
"""
import random
import re
from datetime import datetime
from decimal import Decimal

import pytest

from app.pos.pipeline import compose_receipt, gate_fields, receipt_number_for, tax_rate
from app.pos.pipeline.authorization import (
    AUTH_FORMATS,
    conformance_errors,
    last4,
    mask_card,
    synthesize,
)
from app.pos.pipeline.classifier import classify, contribution, printed_qty
from app.pos.pipeline.document import page_size, write_document
from app.pos.pipeline.errors import ValidationError
from app.pos.pipeline.merchants import get_merchant, merchant_for
from app.pos.pipeline.renderer import render
from app.pos.pipeline.rules import RULES, resolve
from app.pos.pipeline.settlement import fmt, settle, settle_lines, tax_for
from app.pos.pipeline.templates import TEMPLATES
from app.pos.pipeline.units import parse_jurisdiction, parse_tender, unit_profile, wire_label
from app.pos.schemas import (
    BlockKind,
    GenerateReceiptRequest,
    Jurisdiction,
    LineItem,
    LineItemKind,
    SettledLine,
    StoreContext,
    TaxConvention,
    TenderType,
)

STORE = StoreContext(
    company_name="Pilot Travel Centers",
    store_number="Store 4649",
    address="713 Oakland Circle",
    city_state="Raphine, VA 24472",
    phone="(540) 377-923",
)


def _request(**overrides):
    data = {
        "companyName": "Pilot Travel Centers",
        "country": "USA",
        "paymentMethod": "Cash",
        "items": [{"name": "Diesel", "quantity": "10", "price": "3.50", "pump": 4}],
        "vehicleId": "TRK-88",
        "dlNumber": "D1234567",
        "driverCompanyName": "Acme Hauling",
        "storeData": {
            "storeCode": "Store 4649",
            "address": "713 Oakland Circle",
            "cityState": "Raphine, VA 24472",
            "phone": "(540) 377-923",
        },
    }
    data.update(overrides)
    return GenerateReceiptRequest.model_validate(data)


def _document(merchant, jurisdiction, tender, items, *, store=STORE, seed=7, card="4111111111111111", now=None,
              values=None):
    profile, key = resolve(merchant, jurisdiction, tender)
    request = _request(
        paymentMethod=tender.value,
        cardLast4=card,
        driverFirstName="Sam",
        driverLastName="Ortiz",
        checkNumber="1001",
        checkNumberConfirm="1001",
        **(values or {}),
    )
    fields, problems = gate_fields(request, profile, tender)
    assert problems == []
    rate = tax_rate(profile.tax_convention)
    settlement = settle(items, get_merchant(merchant), jurisdiction, profile, rate)
    auth = synthesize(tender, random.Random(seed), fields.value("cardLast4"))
    return render(
        key, settlement, fields, auth, store,
        jurisdiction=jurisdiction,
        receipt_number="REC-12345678",
        issued_at=now or datetime(2025, 3, 14, 9, 26, 53),
    ), auth


DIESEL = [LineItem(name="Diesel", declared_quantity=Decimal("10"), unit_price=Decimal("3.50"), pump_number=4)]


# =====================================================================
# Units
# =====================================================================
class TestUnits:
    def test_usa_profile(self):
        p = unit_profile(Jurisdiction.USA)
        assert p.volume_unit == "gal"
        assert p.currency == "USD"
        assert not p.tax_included_in_price

    def test_canada_profile(self):
        p = unit_profile(Jurisdiction.CANADA)
        assert p.volume_unit == "L"
        assert p.tax_included_in_price

    @pytest.mark.parametrize("label", ["USA", "United States of America", "us"])
    def test_country_labels(self, label):
        assert parse_jurisdiction(label) is Jurisdiction.USA

    def test_unknown_country(self):
        with pytest.raises(ValidationError) as exc:
            parse_jurisdiction("Mexico")
        assert exc.value.problems[0].field == "country"

    @pytest.mark.parametrize("label,tender", [
        ("Master", TenderType.MASTERCARD),
        ("american express", TenderType.AMERICAN_EXPRESS),
        ("EFS", TenderType.EFS),
        ("", TenderType.CASH),
        (None, TenderType.CASH),
    ])
    def test_tender_labels(self, label, tender):
        assert parse_tender(label) is tender

    def test_unknown_tender(self):
        with pytest.raises(ValidationError) as exc:
            parse_tender("Bitcoin")
        assert exc.value.problems[0].field == "paymentMethod"

    def test_wire_label(self):
        assert wire_label(TenderType.MASTERCARD) == "Master"
        assert wire_label(TenderType.VISA) == "Visa"


# =====================================================================
# Merchants
# =====================================================================
class TestMerchants:
    @pytest.mark.parametrize("name,key", [
        ("Love's Travel Stops", "loves"),
        ("TravelCenters of America", "ta"),
        ("BVD Petroleum Vancouver", "bvd"),
        ("Petro-Canada", "petrocanada"),
        ("Pearson Mart Esso", "pearson"),
        ("ONE 9 Fuel Network", "one9"),
    ])
    def test_brand_names(self, name, key):
        assert merchant_for(name).key == key

    def test_unknown_name_is_generic(self):
        assert merchant_for("Corner Gas").key == "generic"

    def test_unknown_name_with_design_is_classic(self):
        assert merchant_for("Corner Gas", design_id=3).key == "classic"

    def test_brand_wins_over_design(self):
        assert merchant_for("Husky", design_id=2).key == "husky"


# =====================================================================
# Classifier
# =====================================================================
class TestClassifier:
    def _profile(self, merchant, jurisdiction=Jurisdiction.USA):
        return resolve(merchant, jurisdiction, TenderType.CASH)[0]

    def test_plain_fuel(self):
        item = LineItem(name="Diesel")
        assert classify(item, get_merchant("pilot"), Jurisdiction.USA, self._profile("pilot")) is LineItemKind.FUEL

    def test_cash_advance_by_name(self):
        item = LineItem(name="Cash Advance Item")
        kind = classify(item, get_merchant("pilot"), Jurisdiction.USA, self._profile("pilot"))
        assert kind is LineItemKind.CASH_ADVANCE

    def test_cash_advance_outranks_volume_only(self):
        item = LineItem(name="CASH ADVANCE")
        kind = classify(item, get_merchant("loves"), Jurisdiction.USA, self._profile("loves"))
        assert kind is LineItemKind.CASH_ADVANCE

    def test_volume_only_brand(self):
        item = LineItem(name="DIESEL")
        kind = classify(item, get_merchant("loves"), Jurisdiction.USA, self._profile("loves"))
        assert kind is LineItemKind.VOLUME_ONLY

    def test_catalog_tag_beats_name(self):
        merchant = get_merchant("flyingj")
        profile = self._profile("flyingj", Jurisdiction.CANADA)
        assert classify(LineItem(name="Truck Diesel"), merchant, Jurisdiction.CANADA, profile) is LineItemKind.FUEL

    def test_contribution(self):
        fuel = LineItem(name="Diesel", declared_quantity=Decimal("10"), unit_price=Decimal("3.50"), multiplier_qty=3)
        assert contribution(fuel, LineItemKind.FUEL) == Decimal("35.00")
        cash = LineItem(name="Cash Advance", unit_price=Decimal("99"), multiplier_qty=20)
        assert contribution(cash, LineItemKind.CASH_ADVANCE) == Decimal("20")

    def test_printed_qty(self):
        item = LineItem(name="Diesel", multiplier_qty=2)
        assert printed_qty(item, LineItemKind.FUEL) == "2"
        assert printed_qty(item, LineItemKind.VOLUME_ONLY) == ""


# =====================================================================
# Settlement
# =====================================================================
class TestSettlement:
    def test_diesel_subtotal(self):
        profile, _ = resolve("generic", Jurisdiction.USA, TenderType.CASH)
        items = [LineItem(name="Diesel", declared_quantity=Decimal("10"), unit_price=Decimal("3.50"),
                          multiplier_qty=1)]
        s = settle(items, get_merchant("generic"), Jurisdiction.USA, profile)
        assert s.subtotal == Decimal("35.00")
        assert s.tax_amount == Decimal("0.00")
        assert s.total == Decimal("35.00")
        assert s.tax_convention is TaxConvention.ZERO

    def test_cash_advance_ignores_price(self):
        profile, _ = resolve("pilot", Jurisdiction.USA, TenderType.CASH)
        items = [LineItem(name="Cash Advance", unit_price=Decimal("500"), multiplier_qty=20)]
        s = settle(items, get_merchant("pilot"), Jurisdiction.USA, profile)
        assert s.subtotal == Decimal("20.00")

    def test_included_tax_backs_out(self):
        line = SettledLine(item=LineItem(name="Diesel"), kind=LineItemKind.FUEL, amount=Decimal("113.00"))
        s = settle_lines([line], TaxConvention.INCLUDED, Decimal("0.13"))
        assert s.tax_amount == Decimal("13.00")
        assert s.total == Decimal("113.00")

    def test_itemized_tax_added(self):
        tax, total = tax_for(Decimal("100"), TaxConvention.ITEMIZED, Decimal("0.08"))
        assert tax == Decimal("8.00")
        assert total == Decimal("108.00")

    def test_zero_tax_reports_zero_rate(self):
        line = SettledLine(item=LineItem(name="Diesel"), kind=LineItemKind.FUEL, amount=Decimal("10"))
        s = settle_lines([line], TaxConvention.ZERO, Decimal("0.13"))
        assert s.tax_rate == Decimal(0)

    def test_rounds_once(self):
        lines = [
            SettledLine(item=LineItem(name=f"L{n}"), kind=LineItemKind.FUEL, amount=Decimal("0.333"))
            for n in range(3)
        ]
        s = settle_lines(lines, TaxConvention.ZERO)
        assert s.subtotal == Decimal("1.00")

    def test_half_up(self):
        assert fmt(Decimal("2.345")) == "2.35"
        assert fmt(Decimal("3")) == "3.00"


# =====================================================================
# Synthetic authorization
# =====================================================================
class TestAuthorization:
    @pytest.mark.parametrize("tender", list(TenderType))
    def test_formats_conform(self, tender):
        for seed in range(20):
            auth = synthesize(tender, random.Random(seed), "4111111111111111")
            assert conformance_errors(auth) == [], (tender, seed)

    @pytest.mark.parametrize("tender", list(TenderType))
    def test_seeded_is_deterministic(self, tender):
        a = synthesize(tender, random.Random(99), "1234")
        b = synthesize(tender, random.Random(99), "1234")
        assert a == b

    def test_formats_cover_every_tender(self):
        assert set(AUTH_FORMATS) == set(TenderType)

    def test_masking(self):
        assert mask_card("4111 1111 1111 9876") == "XXXXXXXXXXXX9876"
        assert last4("12") == ""
        assert mask_card(None) == ""

    def test_tch_uses_wide_mask(self):
        auth = synthesize(TenderType.TCH, random.Random(1), "5555")
        assert auth.masked_card == "X" * 15 + "5555"

    def test_cash_has_no_card_data(self):
        auth = synthesize(TenderType.CASH, random.Random(1), "5555")
        assert auth.masked_card == ""
        assert auth.auth_code == ""


# =====================================================================
# Templates and renderer
# =====================================================================
RENDER_CASES = [
    ("generic", Jurisdiction.USA, TenderType.CASH),
    ("generic", Jurisdiction.CANADA, TenderType.INTERAC),
    ("classic", Jurisdiction.USA, TenderType.VISA),
    ("one9", Jurisdiction.USA, TenderType.MASTERCARD),
    ("one9", Jurisdiction.USA, TenderType.EFS),
    ("pilot", Jurisdiction.USA, TenderType.TCH),
    ("flyingj", Jurisdiction.USA, TenderType.VISA),
    ("loves", Jurisdiction.USA, TenderType.VISA),
    ("ta", Jurisdiction.USA, TenderType.MASTERCARD),
    ("ta", Jurisdiction.USA, TenderType.EFS),
    ("husky", Jurisdiction.CANADA, TenderType.MASTERCARD),
    ("husky", Jurisdiction.CANADA, TenderType.TCH),
    ("flyingj", Jurisdiction.CANADA, TenderType.MASTERCARD),
    ("petrocanada", Jurisdiction.CANADA, TenderType.INTERAC),
    ("petrocanada", Jurisdiction.CANADA, TenderType.VISA),
    ("bvd", Jurisdiction.CANADA, TenderType.MASTERCARD),
    ("pearson", Jurisdiction.CANADA, TenderType.CASH),
]


class TestRenderer:
    def test_every_layout_registered(self):
        layouts = {r.template for r in RULES if r.template}
        assert layouts <= set(TEMPLATES)

    @pytest.mark.parametrize("merchant,jurisdiction,tender", RENDER_CASES)
    def test_idempotent(self, merchant, jurisdiction, tender):
        a, _ = _document(merchant, jurisdiction, tender, DIESEL)
        b, _ = _document(merchant, jurisdiction, tender, DIESEL)
        assert a.model_dump() == b.model_dump()

    @pytest.mark.parametrize("merchant,jurisdiction,tender", RENDER_CASES)
    def test_card_number_never_unmasked(self, merchant, jurisdiction, tender):
        doc, _ = _document(merchant, jurisdiction, tender, DIESEL, card="4111111111119876")
        text = "\n".join(doc.text_lines())
        assert "4111111111119876" not in text
        assert not re.search(r"\d{5,}9876", text)

    @pytest.mark.parametrize("merchant,jurisdiction,tender", RENDER_CASES)
    def test_blocks_in_order(self, merchant, jurisdiction, tender):
        doc, _ = _document(merchant, jurisdiction, tender, DIESEL)
        kinds = [b.kind for b in doc.blocks]
        assert kinds[0] is BlockKind.HEADER
        assert kinds[-1] is BlockKind.FOOTER
        assert BlockKind.TENDER in kinds
        assert all(b.lines for b in doc.blocks)

    @pytest.mark.parametrize("merchant,jurisdiction,tender", RENDER_CASES)
    def test_auth_code_printed_verbatim(self, merchant, jurisdiction, tender):
        doc, auth = _document(merchant, jurisdiction, tender, DIESEL)
        if auth.auth_code:
            assert any(auth.auth_code in line for line in doc.text_lines())

    def test_husky_auth_code_in_tender_and_footer(self):
        doc, auth = _document("husky", Jurisdiction.CANADA, TenderType.MASTERCARD, DIESEL)
        by_kind = {b.kind: "\n".join(line.text for line in b.lines) for b in doc.blocks}
        assert auth.auth_code in by_kind[BlockKind.TENDER]
        assert auth.auth_code in by_kind[BlockKind.FOOTER]

    def test_zero_tax_line(self):
        doc, _ = _document("pilot", Jurisdiction.USA, TenderType.CASH, DIESEL)
        totals = next(b for b in doc.blocks if b.kind is BlockKind.TOTALS)
        assert any(line.right == "0.00" for line in totals.lines)
        assert any(line.right == "35.00" for line in totals.lines)

    def test_bvd_labels_and_included_tax(self):
        items = [LineItem(name="Diesel", declared_quantity=Decimal("100"), unit_price=Decimal("1.13"), pump_number=2)]
        doc, _ = _document("bvd", Jurisdiction.CANADA, TenderType.MASTERCARD, items)
        lines = doc.text_lines()
        assert any(line.startswith("Volume") and "100.000L" in line for line in lines)
        assert any(line.startswith("UnitPrice") for line in lines)
        assert any("HST(13%)" in line and "$13.00" in line for line in lines)

    def test_hidden_field_never_printed(self):
        doc, _ = _document("petrocanada", Jurisdiction.CANADA, TenderType.VISA, DIESEL,
                           values={"vehicleId": "SECRET-TRUCK"})
        assert "SECRET-TRUCK" not in "\n".join(doc.text_lines())

    def test_missing_store_context_uses_placeholder(self, caplog):
        doc, _ = _document("generic", Jurisdiction.USA, TenderType.CASH, DIESEL,
                           store=StoreContext(company_name="Corner Gas"))
        header = doc.blocks[0]
        assert header.kind is BlockKind.HEADER
        assert [line.text for line in header.lines] == [""]
        assert any(b.kind is BlockKind.TOTALS and len(b.lines) > 1 for b in doc.blocks)
        assert "placeholder" in caplog.text

    def test_design_names(self):
        assert _document("husky", Jurisdiction.CANADA, TenderType.CASH, DIESEL)[0].design == "Husky Receipt"
        assert _document("pilot", Jurisdiction.USA, TenderType.CASH, DIESEL)[0].design == "Pilot Travel Centers Receipt"
        assert _document("generic", Jurisdiction.USA, TenderType.CASH, DIESEL)[0].design == "Generic Fuel Receipt"

    def test_loves_volume_only_prints_no_qty(self):
        items = [LineItem(name="DIESEL", declared_quantity=Decimal("50"), unit_price=Decimal("4.00"),
                          multiplier_qty=None)]
        doc, _ = _document("loves", Jurisdiction.USA, TenderType.CASH, items)
        item_block = next(b for b in doc.blocks if b.kind is BlockKind.ITEMS)
        assert item_block.lines[1].text.startswith(" ")
        assert item_block.lines[1].right == "200.00"


# =====================================================================
# Composer
# =====================================================================
class TestComposer:
    def test_generic_cash_scenario(self, rng, now):
        req = _request(companyName="Corner Gas", dlNumber="D42",
                       items=[{"name": "Regular", "quantity": "10.0", "price": "3.00"}])
        doc = compose_receipt(req, rng=rng, now=now)
        assert doc.template.layout == "generic"
        assert doc.design == "Generic Fuel Receipt"
        lines = doc.text_lines()
        assert any(line.startswith("Total") and line.endswith("30.00") for line in lines)
        assert any(line.startswith("Sales Tax") and line.endswith("0.00") for line in lines)

    def test_missing_required_fields_aggregate(self, rng, now):
        req = _request(companyName="Corner Gas", vehicleId=None, dlNumber=None, items=[])
        with pytest.raises(ValidationError) as exc:
            compose_receipt(req, rng=rng, now=now)
        fields = {p.field for p in exc.value.problems}
        assert {"vehicleId", "dlNumber", "items"} <= fields

    def test_missing_country_and_company(self, rng, now):
        req = _request(companyName=None, country=None)
        with pytest.raises(ValidationError) as exc:
            compose_receipt(req, rng=rng, now=now)
        fields = {p.field for p in exc.value.problems}
        assert {"country", "companyName"} <= fields

    def test_check_numbers_must_match(self, rng, now):
        req = _request(paymentMethod="EFS", driverFirstName="Sam", driverLastName="Ortiz",
                       checkNumber="1001", checkNumberConfirm="1002", companyName="ONE 9 Fuel Network")
        with pytest.raises(ValidationError) as exc:
            compose_receipt(req, rng=rng, now=now)
        assert [p.field for p in exc.value.problems] == ["checkNumberConfirm"]

    def test_tender_outside_merchant(self, rng, now):
        req = _request(paymentMethod="Interac")
        with pytest.raises(ValidationError) as exc:
            compose_receipt(req, rng=rng, now=now)
        assert exc.value.problems[0].field == "paymentMethod"

    def test_jurisdiction_outside_merchant(self, rng, now):
        req = _request(companyName="Husky", country="USA")
        with pytest.raises(ValidationError) as exc:
            compose_receipt(req, rng=rng, now=now)
        assert exc.value.problems[0].field == "country"

    def test_card_defaults_and_masking(self, rng, now):
        req = _request(paymentMethod="Visa")
        doc = compose_receipt(req, rng=rng, now=now)
        assert any("XXXXXXXXXXXX3948" in line for line in doc.text_lines())

    def test_card_input_keeps_last_four(self, rng, now):
        req = _request(paymentMethod="Visa", cardLast4="4111-1111-1111-2468")
        doc = compose_receipt(req, rng=rng, now=now)
        text = "\n".join(doc.text_lines())
        assert "XXXXXXXXXXXX2468" in text
        assert "411111111111" not in text
        assert "4111-1111" not in text

    def test_same_seed_same_document(self, now, monkeypatch):
        monkeypatch.setattr("app.pos.pipeline.receipt_number_for", lambda clock: "REC-00000042")
        req = _request(paymentMethod="Mastercard")
        a = compose_receipt(req, rng=random.Random(5), now=now)
        b = compose_receipt(req, rng=random.Random(5), now=now)
        assert a == b

    def test_receipt_number(self, now):
        number = receipt_number_for(now)
        assert re.match(r"^REC-\d{8}$", number)

    def test_receipt_numbers_never_repeat(self, now):
        numbers = [receipt_number_for(now) for _ in range(3)]
        assert len(set(numbers)) == 3
        assert all(re.match(r"^REC-\d{8}$", n) for n in numbers)

    def test_missing_country_still_checks_items(self, rng, now):
        req = _request(country=None, items=[])
        with pytest.raises(ValidationError) as exc:
            compose_receipt(req, rng=rng, now=now)
        fields = {p.field for p in exc.value.problems}
        assert {"country", "items"} <= fields

    def test_jurisdiction_mismatch_still_checks_items(self, rng, now):
        req = _request(companyName="Husky", country="USA",
                       items=[{"name": "Diesel", "quantity": "-5", "price": "3.50"}])
        with pytest.raises(ValidationError) as exc:
            compose_receipt(req, rng=rng, now=now)
        fields = {p.field for p in exc.value.problems}
        assert {"country", "items[0]"} <= fields

    def test_negative_cash_advance_rejected(self, rng, now):
        req = _request(companyName="Love's Travel Stops",
                       items=[{"name": "CASH ADVANCE", "qty": -20, "price": "0"}])
        with pytest.raises(ValidationError) as exc:
            compose_receipt(req, rng=rng, now=now)
        assert [p.field for p in exc.value.problems] == ["items[0]"]

    def test_item_outside_fixed_catalog(self, rng, now):
        req = _request(companyName="Love's Travel Stops",
                       items=[{"name": "Regular", "quantity": "10", "price": "3.50"}])
        with pytest.raises(ValidationError) as exc:
            compose_receipt(req, rng=rng, now=now)
        assert [p.field for p in exc.value.problems] == ["items[0].name"]

    def test_fixed_catalog_match_ignores_case(self, rng, now):
        req = _request(companyName="Flying J", country="Canada", paymentMethod="Interac",
                       items=[{"name": "truck diesel", "quantity": "100", "price": "1.60"}])
        doc = compose_receipt(req, rng=rng, now=now)
        assert doc.template.layout == "flyingj_ca"

    def test_loves_cash_advance(self, rng, now):
        req = _request(companyName="Love's Travel Stops",
                       items=[{"name": "CASH ADVANCE", "qty": 20, "price": "0"}])
        doc = compose_receipt(req, rng=rng, now=now)
        assert any(line.startswith("Total") and line.endswith("20.00") for line in doc.text_lines())

    def test_classic_itemized_tax(self, rng, now):
        req = _request(companyName="Corner Bakery", designId=0, vehicleId=None,
                       items=[{"name": "Bagel", "quantity": "2", "price": "5.00"}])
        doc = compose_receipt(req, rng=rng, now=now)
        assert doc.template.layout == "classic"
        assert doc.design == "Grocery Store"
        assert any(line.startswith("TOTAL:") and line.endswith("$10.80") for line in doc.text_lines())


# =====================================================================
# Document output
# =====================================================================
class TestDocument:
    def test_page_fits_lines(self):
        doc, _ = _document("pilot", Jurisdiction.USA, TenderType.CASH, DIESEL)
        width, height = page_size(doc)
        assert width == 280
        assert height > sum(len(b.lines) for b in doc.blocks) * 10

    def test_write_pdf(self, tmp_path):
        doc, _ = _document("husky", Jurisdiction.CANADA, TenderType.INTERAC, DIESEL)
        path = write_document(doc, tmp_path / "out")
        assert path.name == "receipt-REC-12345678.pdf"
        assert path.read_bytes().startswith(b"%PDF")

    def test_write_never_overwrites(self, tmp_path):
        doc, _ = _document("husky", Jurisdiction.CANADA, TenderType.INTERAC, DIESEL)
        path = write_document(doc, tmp_path)
        before = path.read_bytes()
        with pytest.raises(FileExistsError):
            write_document(doc, tmp_path)
        assert path.read_bytes() == before

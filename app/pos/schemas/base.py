"""
Core domain types for receipt composition.

Every pipeline stage produces and consumes these models. Per-transaction
objects are frozen: once a stage returns them nothing downstream mutates them.
"""
from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Jurisdiction(str, Enum):
    USA = "USA"
    CANADA = "Canada"


class TenderType(str, Enum):
    CASH = "Cash"
    VISA = "Visa"
    MASTERCARD = "Mastercard"
    INTERAC = "Interac"
    AMERICAN_EXPRESS = "AmericanExpress"
    EFS = "EFS"
    TCH = "TCH"

    @property
    def is_card(self) -> bool:
        return self is not TenderType.CASH

    @property
    def is_fleet(self) -> bool:
        return self in (TenderType.EFS, TenderType.TCH)

    @property
    def is_bank_card(self) -> bool:
        return self in (
            TenderType.VISA,
            TenderType.MASTERCARD,
            TenderType.INTERAC,
            TenderType.AMERICAN_EXPRESS,
        )


class FieldState(str, Enum):
    REQUIRED = "required"
    OPTIONAL_VISIBLE = "optional"
    HIDDEN_DISABLED = "hidden"


class LineItemKind(str, Enum):
    FUEL = "fuel"
    CASH_ADVANCE = "cash_advance"
    VOLUME_ONLY = "volume_only"


class TaxConvention(str, Enum):
    ITEMIZED = "itemized"    # tax added on top of the subtotal
    INCLUDED = "included"    # tax backed out of a tax-inclusive total
    ZERO = "zero"            # literal 0.00 tax line


class BlockKind(str, Enum):
    HEADER = "header"
    ITEMS = "items"
    TOTALS = "totals"
    TENDER = "tender"
    VEHICLE = "vehicle"
    FOOTER = "footer"


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------

class CatalogItem(BaseModel):
    """A selectable item name, optionally tagged with its settlement kind."""
    model_config = ConfigDict(frozen=True)

    name: str
    kind: Optional[LineItemKind] = None


class Merchant(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="normalized brand key, e.g. 'loves'")
    display_name: str
    brand_family: str = Field(..., description="truck_stop | canadian_fuel | generic | retail")
    aliases: tuple[str, ...] = ()
    jurisdictions: frozenset[Jurisdiction]
    tenders: frozenset[TenderType]
    fixed_catalog: dict[Jurisdiction, tuple[CatalogItem, ...]] = Field(default_factory=dict)

    def catalog_for(self, jurisdiction: Jurisdiction) -> tuple[CatalogItem, ...] | None:
        return self.fixed_catalog.get(jurisdiction)


class UnitProfile(BaseModel):
    """Jurisdiction → units, labels and tax-inclusion convention."""
    model_config = ConfigDict(frozen=True)

    jurisdiction: Jurisdiction
    volume_unit: str
    volume_label: str
    price_label: str
    currency: str
    tax_included_in_price: bool


class StoreContext(BaseModel):
    """Header data for one store. Never used for decisions."""
    model_config = ConfigDict(frozen=True)

    company_name: str = ""
    store_number: str = ""
    address: str = ""
    city_state: str = ""
    phone: str = ""


# ---------------------------------------------------------------------------
# Rule resolution
# ---------------------------------------------------------------------------

class FieldRequirementProfile(BaseModel):
    """Resolved field states plus the presentation choices that travel with them."""
    model_config = ConfigDict(frozen=True)

    states: dict[str, FieldState]
    labels: dict[str, str] = Field(default_factory=dict)
    extended: frozenset[str] = frozenset()
    tax_convention: TaxConvention = TaxConvention.ZERO
    volume_only: bool = False

    def state(self, name: str) -> FieldState:
        return self.states.get(name, FieldState.OPTIONAL_VISIBLE)

    def is_required(self, name: str) -> bool:
        return self.state(name) is FieldState.REQUIRED

    def is_hidden(self, name: str) -> bool:
        return self.state(name) is FieldState.HIDDEN_DISABLED

    @property
    def required(self) -> list[str]:
        return [f for f, s in self.states.items() if s is FieldState.REQUIRED]

    @property
    def hidden(self) -> list[str]:
        return [f for f, s in self.states.items() if s is FieldState.HIDDEN_DISABLED]

    def label(self, name: str, default: str = "") -> str:
        return self.labels.get(name, default)


class ResolvedFields(BaseModel):
    """Request values filtered through a profile. Hidden fields read as empty."""
    model_config = ConfigDict(frozen=True)

    profile: FieldRequirementProfile
    values: dict[str, str] = Field(default_factory=dict)
    include_signature: bool = False
    design_id: int = 0

    def value(self, name: str) -> str:
        if self.profile.is_hidden(name):
            return ""
        return self.values.get(name, "")

    @property
    def wants_signature(self) -> bool:
        if self.profile.is_hidden("signature"):
            return False
        return self.include_signature or self.profile.is_required("signature")


class TemplateKey(BaseModel):
    """Receipt layout plus the tender whose block it prints."""
    model_config = ConfigDict(frozen=True)

    layout: str
    tender: TenderType

    @property
    def name(self) -> str:
        return f"{self.layout}.{self.tender.name.lower()}"


# ---------------------------------------------------------------------------
# Items and settlement
# ---------------------------------------------------------------------------

class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    declared_quantity: Decimal = Decimal("1")
    unit_price: Decimal = Decimal("0")
    pump_number: Optional[int] = None
    multiplier_qty: Optional[int] = None


class SettledLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    item: LineItem
    kind: LineItemKind
    amount: Decimal


class Settlement(BaseModel):
    model_config = ConfigDict(frozen=True)

    lines: tuple[SettledLine, ...] = ()
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal
    tax_convention: TaxConvention
    tax_rate: Decimal = Decimal("0")
    fuel_volume: Decimal = Decimal("0")


# ---------------------------------------------------------------------------
# Synthetic authorization
# ---------------------------------------------------------------------------

class CryptogramFields(BaseModel):
    """EMV-shaped tokens. Format only, no meaning."""
    model_config = ConfigDict(frozen=True)

    aid: str = ""
    tvr: str = ""
    iad: str = ""
    tsi: str = ""
    arc: str = ""


class SyntheticAuthorization(BaseModel):
    model_config = ConfigDict(frozen=True)

    tender: TenderType
    auth_code: str = ""
    terminal_id: str = ""
    reference_number: str = ""
    invoice_number: str = ""
    transaction_number: str = ""
    sequence_number: str = ""
    clerk_id: str = ""
    masked_card: str = ""
    cryptogram: CryptogramFields = Field(default_factory=CryptogramFields)


# ---------------------------------------------------------------------------
# Rendered document
# ---------------------------------------------------------------------------

class Line(BaseModel):
    """One printed row. ``right`` is flushed to the right margin when set."""
    model_config = ConfigDict(frozen=True)

    text: str = ""
    right: str = ""
    align: str = Field("left", description="left | center | right")
    bold: bool = False


class Block(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: BlockKind
    lines: tuple[Line, ...] = ()


class ReceiptDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    receipt_number: str
    template: TemplateKey
    design: str
    blocks: tuple[Block, ...] = ()

    @property
    def file_name(self) -> str:
        return f"receipt-{self.receipt_number}.pdf"

    def text_lines(self) -> list[str]:
        out: list[str] = []
        for block in self.blocks:
            for line in block.lines:
                out.append(f"{line.text} {line.right}".rstrip() if line.right else line.text)
        return out

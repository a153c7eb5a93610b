"""
Synthetic authorization generator.

Produces format-valid, meaningless payment-network metadata. All randomness
comes from one injectable ``random.Random`` so a seeded source reproduces a
document exactly. Each tender's formats are listed in AUTH_FORMATS, which the
template tests check rendered values against.
"""
from __future__ import annotations

import random
import re
import string
from typing import Optional

from app.pos.schemas import CryptogramFields, SyntheticAuthorization, TenderType

HEX = "0123456789ABCDEF"
ALNUM = string.ascii_uppercase + string.digits

MASK_WIDTH = 12
FLEET_MASK_WIDTH = 15

APPLICATION_IDS: dict[TenderType, str] = {
    TenderType.VISA: "A0000000031010",
    TenderType.MASTERCARD: "A0000000041010",
    TenderType.INTERAC: "A0000002771010",
    TenderType.AMERICAN_EXPRESS: "A000000025010801",
}

MASTERCARD_ARCS = ["23", "00", "01", "02", "03", "04", "05"]

# field -> regex, per tender; a field absent from a tender's map must be empty
AUTH_FORMATS: dict[TenderType, dict[str, str]] = {
    TenderType.CASH: {
        "transaction_number": r"^\d{6}$",
        "invoice_number": r"^\d{6}$",
        "terminal_id": r"^\d{8}$",
        "clerk_id": r"^\d{4}$",
    },
    TenderType.VISA: {
        "auth_code": r"^\d{6}$",
        "aid": r"^A0000000031010$",
        "tvr": r"^[0-9A-F]{10}$",
        "iad": r"^[0-9A-F]{32}$",
        "tsi": r"^[0-9A-F]{4}$",
        "arc": r"^00$",
        "masked_card": r"^X{12}\d{4}$",
    },
    TenderType.MASTERCARD: {
        "auth_code": r"^\d{6}$",
        "aid": r"^A0000000041010$",
        "tvr": r"^[0-9A-F]{10}$",
        "iad": r"^[0-9A-F]{30}FF$",
        "tsi": r"^[0-9A-F]{4}$",
        "arc": r"^(23|0[0-5])$",
        "masked_card": r"^X{12}\d{4}$",
    },
    TenderType.INTERAC: {
        "auth_code": r"^[A-Z0-9]{6}$",
        "aid": r"^A0000002771010$",
        "tvr": r"^[0-9A-F]{10}$",
        "tsi": r"^E800$",
        "arc": r"^00$",
        "reference_number": r"^\d{10}$",
        "masked_card": r"^X{12}\d{4}$",
    },
    TenderType.AMERICAN_EXPRESS: {
        "auth_code": r"^\d{6}$",
        "aid": r"^A000000025010801$",
        "tvr": r"^[0-9A-F]{10}$",
        "tsi": r"^[0-9A-F]{4}$",
        "arc": r"^00$",
        "masked_card": r"^X{12}\d{4}$",
    },
    TenderType.EFS: {
        "auth_code": r"^\d{6}$",
        "reference_number": r"^\d{12}$",
    },
    TenderType.TCH: {
        "auth_code": r"^\d{6}$",
        "invoice_number": r"^\d{10}$",
        "masked_card": r"^X{15}\d{4}$",
    },
}

# formats every tender shares unless overridden above
COMMON_FORMATS: dict[str, str] = {
    "transaction_number": r"^\d{6}$",
    "invoice_number": r"^\d{6}$",
    "terminal_id": r"^\d{8}$",
    "sequence_number": r"^\d{12}$",
    "reference_number": r"^\d{12}$",
    "clerk_id": r"^\d{4}$",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _digits(rng: random.Random, n: int) -> str:
    return "".join(rng.choice(string.digits) for _ in range(n))


def _hex(rng: random.Random, n: int) -> str:
    return "".join(rng.choice(HEX) for _ in range(n))


def _alnum(rng: random.Random, n: int) -> str:
    return "".join(rng.choice(ALNUM) for _ in range(n))


def last4(card_input: Optional[str]) -> str:
    """Last four digits of whatever card input was given, or ''."""
    digits = re.sub(r"\D", "", card_input or "")
    return digits[-4:] if len(digits) >= 4 else ""


def mask_card(card_input: Optional[str], width: int = MASK_WIDTH) -> str:
    tail = last4(card_input)
    return "X" * width + tail if tail else ""


def _cryptogram(tender: TenderType, rng: random.Random) -> CryptogramFields:
    if tender is TenderType.VISA:
        return CryptogramFields(
            aid=APPLICATION_IDS[tender], tvr=_hex(rng, 10), iad=_hex(rng, 32),
            tsi=_hex(rng, 4), arc="00",
        )
    if tender is TenderType.MASTERCARD:
        return CryptogramFields(
            aid=APPLICATION_IDS[tender], tvr=_hex(rng, 10), iad=_hex(rng, 30) + "FF",
            tsi=_hex(rng, 4), arc=rng.choice(MASTERCARD_ARCS),
        )
    if tender is TenderType.INTERAC:
        return CryptogramFields(
            aid=APPLICATION_IDS[tender], tvr=_hex(rng, 10), tsi="E800", arc="00",
        )
    if tender is TenderType.AMERICAN_EXPRESS:
        return CryptogramFields(
            aid=APPLICATION_IDS[tender], tvr=_hex(rng, 10), tsi=_hex(rng, 4), arc="00",
        )
    return CryptogramFields()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def synthesize(
    tender: TenderType,
    rng: Optional[random.Random] = None,
    card_last4: Optional[str] = None,
) -> SyntheticAuthorization:
    """Generate one transaction's metadata.

    Generated once per transaction; every block that prints an auth code or a
    reference reads it from the returned object.
    """
    rng = rng if rng is not None else random.Random()

    fields = {
        "transaction_number": _digits(rng, 6),
        "invoice_number": _digits(rng, 6),
        "terminal_id": _digits(rng, 8),
        "sequence_number": _digits(rng, 12),
        "reference_number": _digits(rng, 12),
        "clerk_id": _digits(rng, 4),
    }
    if tender is TenderType.CASH:
        return SyntheticAuthorization(tender=tender, **fields)

    if tender is TenderType.INTERAC:
        fields["auth_code"] = _alnum(rng, 6)
        fields["reference_number"] = _digits(rng, 10)
    else:
        fields["auth_code"] = _digits(rng, 6)
    if tender is TenderType.TCH:
        fields["invoice_number"] = _digits(rng, 10)
        fields["masked_card"] = mask_card(card_last4, FLEET_MASK_WIDTH)
    elif tender.is_bank_card:
        fields["masked_card"] = mask_card(card_last4)

    return SyntheticAuthorization(tender=tender, cryptogram=_cryptogram(tender, rng), **fields)


def conformance_errors(auth: SyntheticAuthorization) -> list[str]:
    """Compare an authorization against AUTH_FORMATS; empty means conformant."""
    formats = {**COMMON_FORMATS, **AUTH_FORMATS[auth.tender]}
    values = {**auth.model_dump(exclude={"cryptogram", "tender"}), **auth.cryptogram.model_dump()}
    errors: list[str] = []
    for name, value in values.items():
        pattern = formats.get(name)
        if pattern is None:
            if value:
                errors.append(f"{name} should be empty for {auth.tender.value}")
        elif not re.match(pattern, value):
            errors.append(f"{name}={value!r} does not match {pattern}")
    return errors

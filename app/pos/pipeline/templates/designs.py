"""
Classic design catalog used by the ``classic`` layout.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Design:
    name: str
    business_type: str
    header_style: str      # centered | left | logo-top | split
    item_layout: str       # compact | spacious | table | description
    separator_style: str   # dashed | solid | double | stars | equals
    barcode: bool = True
    store_number: bool = True
    cashier: bool = True
    payment_details: bool = True


DESIGNS: list[Design] = [
    Design("Grocery Store", "Supermarket", "centered", "compact", "dashed"),
    Design("Coffee Shop", "Cafe", "logo-top", "spacious", "solid",
           barcode=False, store_number=False, payment_details=False),
    Design("Gas Station", "Fuel", "centered", "compact", "stars", cashier=False),
    Design("Pharmacy", "Medical", "centered", "description", "double"),
    Design("Electronics Store", "Retail", "split", "table", "solid"),
    Design("Fast Food", "Restaurant", "logo-top", "spacious", "equals", barcode=False),
    Design("Clothing Store", "Fashion", "centered", "table", "dashed"),
    Design("Hardware Store", "Home Improvement", "left", "compact", "solid"),
    Design("Bookstore", "Books & Media", "centered", "description", "dashed"),
    Design("Convenience Store", "24/7 Shop", "centered", "compact", "stars"),
]

SEPARATORS: dict[str, str] = {
    "dashed": "-",
    "solid": "_",
    "double": "=",
    "stars": "*",
    "equals": "=",
}

FOOTERS: dict[str, list[str]] = {
    "Supermarket": [
        "THANK YOU FOR SHOPPING WITH US!",
        "SAVE YOUR RECEIPT FOR RETURNS",
        "Return Policy: 30 Days with Receipt",
    ],
    "Cafe": ["Thank you for visiting!", "Have a great day!"],
    "Fuel": ["DRIVE SAFELY!", "Thank you for your business"],
    "Medical": ["Take care of your health"],
    "Restaurant": ["Come back soon!", "Rate us on Google!"],
}
DEFAULT_FOOTER = ["Thank you for your purchase!", "Please come again"]


def design_for(design_id: int | None) -> Design:
    return DESIGNS[(design_id or 0) % len(DESIGNS)]

"""
Starter catalog: the fuel brands the form offers and a few of their stores.
"""
import logging

from sqlalchemy.orm import Session

from app.pos.models import CompanyModel, StoreModel

logger = logging.getLogger(__name__)

USA = "United States of America"
CANADA = "Canada"

COMPANIES: list[dict] = [
    {"name": "ONE 9 Fuel Network", "address": "4455 King Street, Cocoa, FL 32926",
     "email": "support@one9fuel.com", "phone": "(321) 639-0346", "country": USA, "design_id": 0},
    {"name": "Pilot Travel Centers", "address": "5508 Lonas Drive, Knoxville, TN 37909",
     "email": "contact@pilotflyingj.com", "phone": "(865) 555-0222", "country": USA, "design_id": 1},
    {"name": "Flying J", "address": "1637 Pettit Road, Ft.Erie, ON",
     "email": "info@flyingj.com", "phone": "905-991-1800", "country": USA, "design_id": 2},
    {"name": "Love's Travel Stops", "address": "10601 N Pennsylvania Avenue, Oklahoma City, OK 73120",
     "email": "service@loves.com", "phone": "(405) 555-0444", "country": USA, "design_id": 3},
    {"name": "TravelCenters of America", "address": "24601 Center Ridge Road, Westlake, OH 44145",
     "email": "info@ta-petro.com", "phone": "(440) 555-0555", "country": USA, "design_id": 4},
    {"name": "Flying J", "address": "1637 Pettit Road, Ft.Erie, ON L2A 1A1",
     "email": "info@flyingj.ca", "phone": "(905) 991-1800", "country": CANADA, "design_id": 2},
    {"name": "Husky", "address": "456 Trans-Canada Hwy, Calgary, AB T2P 0A1",
     "email": "service@husky.ca", "phone": "(403) 555-0803", "country": CANADA, "design_id": 2},
    {"name": "Petro-Canada", "address": "789 Trans-Canada Hwy, Calgary, AB T2P 0A1",
     "email": "service@petro-canada.ca", "phone": "(403) 555-0803", "country": CANADA, "design_id": 2},
    {"name": "BVD Petroleum", "address": "495 York Road, Niagara, ON L0S 1J0",
     "email": "service@bvdpetroleum.ca", "phone": "(905) 684-1079", "country": CANADA, "design_id": 2},
]

# (company name, country) -> rows of (store code, address, city/state, phone, items)
STORES: dict[tuple[str, str], list[tuple[str, str, str, str, str]]] = {
    ("Love's Travel Stops", USA): [
        ("Store 833", "6201 Shortman Road", "Ripley, NY 14775", "(716) 736-2023", "DIESEL"),
        ("Store 772", "7748 Route 53", "Bath, NY 14810", "(607) 622-1150", "CASH ADVANCE"),
        ("Store 820", "1262 Route 414", "Waterloo, NY 13165", "(315) 835-7244", "DEF"),
        ("Store 403", "2 Industrial Park Dr", "Binghamton, NY 13904", "(607) 651-9153", "REEFER"),
        ("Store 731", "1011 New Castle Road", "Slippery Rock, PA 16057", "(724) 530-2965", ""),
    ],
    ("Flying J", USA): [
        ("Store 693", "8484 Alleghany Road", "Corfu, NY 14036", "(585) 599-4430", "Truck Diesel"),
        ("Store 380", "107 Seventh North Street", "Liverpool, NY 13088", "(315) 424-0124", "DEF Fuel Item"),
        ("Store 1317", "164 Riverside Drive", "Fultonville, NY 12072", "(518) 414-0591", "Reefer Fuel"),
        ("Store 494", "1128 Duanesburg Road", "Schenectady, NY 12306", "(518) 356-5616", "Cash Advance Item"),
    ],
    ("Pilot Travel Centers", USA): [
        ("Store 4649", "713 Oakland Circle", "Raphine, VA 24472", "(540) 377-923", "Truck Diesel"),
        ("Store 396", "3541 Lee Jackson Highway", "Staunton, VA 24401", "(540) 324-0714", "DEF Fuel Item"),
        ("Store 256", "110 River Point Dr", "Danville, VA 24540", "(434) 792-1180", "Reefer Fuel"),
        ("Store 491", "3634 North Valley Pike", "Harrisonburg, VA 22802", "(540) 434-2529", "Cash Advance Item"),
    ],
    ("ONE 9 Fuel Network", USA): [
        ("Store 1414", "5151 N Fork Road", "Elliston, VA 24087", "(540) 268-9500",
         "Cash Advance Items, Truck Diesel, Reefer Fuel, DEF Fuel Item"),
        ("Store 245", "7961 Linglestown Road", "Harrisburg, PA 17112", "(717) 545-5507",
         "Cash Advance Items, Truck Diesel, Reefer Fuel, DEF Fuel Item"),
    ],
    ("TravelCenters of America", USA): [
        ("TA Ashland #1", "100 North Carter Rd", "Ashland Virginia 23005", "804-798-6011", "Fuel, Diesel"),
        ("TA Whitsett #2", "1101 NC Highway 61", "Whitsett North Carolina 27377", "336-449-6060", "Fuel, Diesel"),
        ("TA Brookville #3", "245 Allegheny Blvd.", "Brookville Pennsylvania 15825", "814-849-3051", "Fuel, Diesel"),
    ],
    ("Flying J", CANADA): [
        ("Store 693", "8484 Alleghany Road", "Corfu, NY 14036", "(585) 599-4430", "Truck Diesel, DEF Fuel Item"),
        ("Store 380", "107 Seventh North Street", "Liverpool, NY 13088", "(315) 424-0124", "Truck Diesel, DEF Fuel Item"),
    ],
    ("Husky", CANADA): [
        ("DIXIE MART (MISSISSAUGA)", "7280 DIXIE RD", "MISSISSAUGA, ON L5S 1E1", "(905) 565-1476", "Truck Diesel"),
        ("ST. CATHARINES HUSKY TC/ESSO", "615 York Rd", "St. Catharines, ON L0S 1J0", "(905) 684-1128", "DEF Fuel Item"),
        ("KENNEDY RD HUSKY TC/ESSO", "6625 Kennedy Road", "Mississauga, ON L5T 2W1", "(905) 565-9548", "Reefer Fuel"),
    ],
    ("Petro-Canada", CANADA): [
        ("PETRO-CANADA", "495 YORD RD", "NIAGARA, ONTARIO L0S 1J0", "(905) 684-1079", "Fuel"),
        ("PETRO-CANADA", "6070 DIXIE RD", "MISSISSAUGA, ONTARIO L5T 1A6", "(605) 564-2295", "Diesel"),
        ("PETRO-CANADA", "130 DELTA PARK BLV", "BRAMPTON, ONTARIO L6T 5E7", "(905) 792-8828", "Fuel, Pump"),
    ],
    ("BVD Petroleum", CANADA): [
        ("BVD PETROLEUM", "130 Delta Park Blvd", "Brampton, ON L6T 5M8", "(905) 792-8828", "Diesel"),
        ("BVD PETROLEUM", "495 York Road", "Niagara, ON L0S 1J0", "(905) 684-1079", "Diesel"),
    ],
}


def seed_catalog(db: Session) -> int:
    """Insert the starter companies and stores into an empty catalog.

    Returns the number of companies created; 0 when the catalog already has data.
    """
    if db.query(CompanyModel).count():
        return 0

    for data in COMPANIES:
        company = CompanyModel(**data)
        for code, address, city_state, phone, items in STORES.get((data["name"], data["country"]), []):
            company.stores.append(StoreModel(
                store_code=code,
                address=address,
                city_state=city_state,
                phone=phone,
                items=items,
            ))
        db.add(company)
    db.commit()
    logger.info("Seeded %d companies", len(COMPANIES))
    return len(COMPANIES)

"""
Receipt layouts, keyed by the layout name the rule table selects.
"""
from app.pos.pipeline.templates.canada import BVD, FLYINGJ_CA, HUSKY, PETROCANADA
from app.pos.pipeline.templates.common import RenderContext, Template
from app.pos.pipeline.templates.generic import CLASSIC, GENERIC
from app.pos.pipeline.templates.usa import FLYINGJ, LOVES, ONE9, PILOT, TA

TEMPLATES: dict[str, Template] = {
    "generic": GENERIC,
    "classic": CLASSIC,
    "one9": ONE9,
    "pilot": PILOT,
    "flyingj": FLYINGJ,
    "loves": LOVES,
    "ta": TA,
    "husky": HUSKY,
    "flyingj_ca": FLYINGJ_CA,
    "petrocanada": PETROCANADA,
    "bvd": BVD,
}

__all__ = ["TEMPLATES", "RenderContext", "Template"]

# homescore/flood.py
"""Flood-zone text classification.

Flood-zone descriptions arrive as free text that mixes FEMA zone codes
("Zone AE", "Zone X (shaded)") with narrative labels ("Minimal risk",
"Major flood factor"). ``classify`` maps any such text onto a fixed set of
risk levels. A recognised zone code always wins over contradicting narrative
text in the same string.
"""
import re
from enum import Enum
from typing import Optional


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    COASTAL_HIGH = "coastal-high"
    UNDETERMINED = "undetermined"


ZONE_RE = re.compile(r"Zone\s*([A-Z]+\d*)", re.I)

COASTAL_ZONES = {"V", "VE"}
HIGH_RISK_ZONES = {"A", "AE", "AH", "AO", "AR", "A99"}
MODERATE_ZONES = {"B"}
LOW_RISK_ZONES = {"X", "C", "D"}

# checked in order against the upper-cased text
KEYWORD_RULES = (
    (("MINIMAL", "LOW RISK"), RiskLevel.LOW),
    (("MINOR", "MODERATE"), RiskLevel.MODERATE),
    (("MAJOR", "SEVERE", "EXTREME", "HIGH RISK"), RiskLevel.HIGH),
    (("COASTAL",), RiskLevel.COASTAL_HIGH),
)

# score contribution, higher is safer
RISK_SCORES = {
    RiskLevel.COASTAL_HIGH: 0.0,
    RiskLevel.HIGH: 0.2,
    RiskLevel.MODERATE: 0.6,
    RiskLevel.LOW: 1.0,
    RiskLevel.UNDETERMINED: 0.5,
}

# sort ordinal, higher is riskier
RISK_ORDER = {
    RiskLevel.UNDETERMINED: 0,
    RiskLevel.LOW: 1,
    RiskLevel.MODERATE: 2,
    RiskLevel.HIGH: 3,
    RiskLevel.COASTAL_HIGH: 4,
}


def _classify_zone_code(code: str, upper_text: str) -> Optional[RiskLevel]:
    if code in COASTAL_ZONES:
        return RiskLevel.COASTAL_HIGH
    if code in HIGH_RISK_ZONES:
        return RiskLevel.HIGH
    if code in MODERATE_ZONES:
        return RiskLevel.MODERATE
    if code in LOW_RISK_ZONES:
        # shaded X is the 0.2% annual chance floodplain
        if "SHADED" in upper_text and "UNSHADED" not in upper_text:
            return RiskLevel.MODERATE
        return RiskLevel.LOW
    return None


def classify(zone_text: Optional[str]) -> RiskLevel:
    """Map a flood-zone description to a ``RiskLevel``. Never raises."""
    if zone_text is None or not isinstance(zone_text, str):
        return RiskLevel.UNDETERMINED
    text = zone_text.strip()
    if not text or text.upper() == "N/A":
        return RiskLevel.UNDETERMINED

    upper = text.upper()
    m = ZONE_RE.search(text)
    if m:
        level = _classify_zone_code(m.group(1).upper(), upper)
        if level is not None:
            return level

    for keywords, level in KEYWORD_RULES:
        if any(k in upper for k in keywords):
            return level
    return RiskLevel.UNDETERMINED


def flood_risk_score(zone_text: Optional[str]) -> float:
    return RISK_SCORES[classify(zone_text)]


def parse_risk_level(value: str) -> RiskLevel:
    try:
        return RiskLevel(value.strip().lower())
    except ValueError:
        raise ValueError(f"unknown flood risk level: {value!r}") from None

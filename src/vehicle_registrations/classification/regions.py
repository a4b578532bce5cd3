"""
Region Classification

Approximates Census of India urban / rural status for an RTO from the
place names in its office, city and district text. Official boundaries are
not part of the extract, so classification is a substring test against two
fixed name tables:

- Metro  (Million Plus Urban Agglomerations)   -> Tier-1
- Urban  (Class I / II cities)                 -> Tier-2
- anything else                                 -> Rural, Tier-3/Rural

Metro is checked before Urban. Within one table the longest matching name
wins; equal lengths fall back to table order.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple


class RegionClass(str, Enum):
    METRO = "Metro"
    URBAN = "Urban"
    RURAL = "Rural"


AUTHORITY = "Census of India 2011"

METRO_NAMES: Tuple[str, ...] = (
    "MUMBAI", "DELHI", "BANGALORE", "BENGALURU", "HYDERABAD", "AHMEDABAD",
    "CHENNAI", "KOLKATA", "PUNE", "SURAT", "JAIPUR", "LUCKNOW",
    "KANPUR", "NAGPUR", "INDORE", "THANE", "BHOPAL", "VISAKHAPATNAM",
    "PIMPRI-CHINCHWAD", "PATNA", "VADODARA", "GHAZIABAD", "LUDHIANA",
    "AGRA", "NASHIK", "FARIDABAD", "MEERUT", "RAJKOT", "KALYAN-DOMBIVALI",
    "VASAI-VIRAR", "VARANASI", "SRINAGAR", "AURANGABAD", "DHANBAD",
    "AMRITSAR", "NAVI MUMBAI", "ALLAHABAD", "PRAYAGRAJ", "HOWRAH",
    "RANCHI", "GWALIOR", "JABALPUR", "COIMBATORE", "VIJAYAWADA",
    "JODHPUR", "MADURAI", "RAIPUR", "KOTA", "CHANDIGARH",
)

URBAN_NAMES: Tuple[str, ...] = (
    "GUWAHATI", "CHANDIGARH", "THIRUVANANTHAPURAM", "SOLAPUR", "HUBLI-DHARWAD",
    "BAREILLY", "MORADABAD", "MYSORE", "GURGAON", "GURUGRAM", "ALIGARH",
    "JALANDHAR", "TIRUCHIRAPPALLI", "BHUBANESWAR", "SALEM", "WARANGAL",
    "MIRA-BHAYANDAR", "BHIWANDI", "SAHARANPUR",
    "GORAKHPUR", "BIKANER", "AMRAVATI", "NOIDA", "JAMSHEDPUR", "BHILAI",
    "CUTTACK", "FIROZABAD", "KOCHI", "ERNAKULAM", "BHAVNAGAR", "DEHRADUN",
    "DURGAPUR", "ASANSOL", "NANDED", "KOLHAPUR", "AJMER", "GULBARGA",
    "JAMNAGAR", "UJJAIN", "LONI", "SILIGURI", "JHANSI", "ULHASNAGAR",
    "JAMMU", "SANGLI-MIRAJ-KUPWAD", "MANGALORE", "ERODE", "BELGAUM",
    "AMBATTUR", "TIRUNELVELI", "MALEGAON", "GAYA", "JALGAON", "UDAIPUR",
)

STATE_TIERS: Dict[str, Tuple[str, ...]] = {
    "Tier-1 States": (
        "MAHARASHTRA", "TAMIL NADU", "KARNATAKA", "GUJARAT", "HARYANA",
        "PUNJAB", "KERALA", "DELHI", "GOA",
    ),
    "Tier-2 States": (
        "UTTAR PRADESH", "WEST BENGAL", "RAJASTHAN", "MADHYA PRADESH",
        "ANDHRA PRADESH", "TELANGANA", "ODISHA", "JHARKHAND",
    ),
    "Tier-3 States": (
        "BIHAR", "ASSAM", "CHHATTISGARH", "HIMACHAL PRADESH",
        "UTTARAKHAND", "TRIPURA", "MEGHALAYA", "MANIPUR",
        "NAGALAND", "MIZORAM", "ARUNACHAL PRADESH", "SIKKIM",
    ),
}

# Census 2011 thresholds for census towns
CENSUS_MIN_POPULATION = 5000
CENSUS_MIN_DENSITY_PER_SQ_KM = 400
CENSUS_MIN_NON_AGRI_WORKERS_PCT = 75


@dataclass(frozen=True)
class RegionClassification:
    classification: RegionClass
    tier: str
    definition: str
    authority: str = AUTHORITY
    # Rule citation; None when the Rural default applied
    matched_name: Optional[str] = None
    matched_field: Optional[str] = None


@dataclass(frozen=True)
class OfficeInfo:
    office_code: str
    office_name: str
    city: str
    district: str
    state: str
    classification: RegionClass
    tier: str
    definition_source: str


_RULES = (
    (RegionClass.METRO, METRO_NAMES, "Tier-1", "Million Plus Urban Agglomeration"),
    (RegionClass.URBAN, URBAN_NAMES, "Tier-2", "Class I/II City or Urban Agglomeration"),
)

_RURAL = RegionClassification(
    classification=RegionClass.RURAL,
    tier="Tier-3/Rural",
    definition="Areas not classified as Urban by Census",
)


def _normalize(value: Optional[str]) -> str:
    return (value or "").strip().upper()


def _best_match(
    names: Sequence[str], fields: List[Tuple[str, str]]
) -> Optional[Tuple[str, str]]:
    best: Optional[Tuple[str, str]] = None
    for name in names:
        if best is not None and len(name) <= len(best[0]):
            continue
        for field_name, text in fields:
            if name in text:
                best = (name, field_name)
                break
    return best


def classify_region(
    office_name: Optional[str],
    city: Optional[str],
    district: Optional[str],
    state: Optional[str] = None,
) -> RegionClassification:
    """
    Classify an RTO as Metro / Urban / Rural.

    Never raises: blank or unknown input yields the Rural default. `state`
    is accepted for interface symmetry but does not affect the result.
    """
    fields = [
        ("city", _normalize(city)),
        ("district", _normalize(district)),
        ("office", _normalize(office_name)),
    ]
    fields = [(n, t) for n, t in fields if t]

    for region, names, tier, definition in _RULES:
        match = _best_match(names, fields)
        if match is not None:
            return RegionClassification(
                classification=region,
                tier=tier,
                definition=definition,
                matched_name=match[0],
                matched_field=match[1],
            )

    return _RURAL


def classify_office(
    office_code: str,
    office_name: str,
    city: str,
    district: str,
    state: str,
) -> OfficeInfo:
    result = classify_region(office_name, city, district, state)
    return OfficeInfo(
        office_code=office_code,
        office_name=office_name,
        city=city,
        district=district,
        state=state,
        classification=result.classification,
        tier=result.tier,
        definition_source=result.authority,
    )


def state_tier(state: Optional[str]) -> Optional[str]:
    """Economic development tier of a state, or None if not tabled."""
    key = _normalize(state)
    for tier, states in STATE_TIERS.items():
        if key in states:
            return tier
    return None


def classify_by_census_definition(
    population: int,
    density_per_sq_km: float,
    non_agri_workers_pct: float,
    has_municipality: bool = False,
) -> str:
    if has_municipality:
        return "Urban (Statutory)"

    if (
        population >= CENSUS_MIN_POPULATION
        and density_per_sq_km >= CENSUS_MIN_DENSITY_PER_SQ_KM
        and non_agri_workers_pct >= CENSUS_MIN_NON_AGRI_WORKERS_PCT
    ):
        return "Urban (Census)"

    return "Rural"


def available_classifications() -> List[str]:
    return [r.value for r in RegionClass]

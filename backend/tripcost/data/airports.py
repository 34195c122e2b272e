"""Static city → IATA airport mapping used for flight offer lookups."""

import re

CITY_AIRPORTS: dict[str, str] = {
    # India
    "delhi": "DEL", "new delhi": "DEL", "mumbai": "BOM", "bangalore": "BLR",
    "bengaluru": "BLR", "chennai": "MAA", "kolkata": "CCU", "hyderabad": "HYD",
    "pune": "PNQ", "ahmedabad": "AMD", "jaipur": "JAI", "goa": "GOI",
    "kochi": "COK", "lucknow": "LKO", "varanasi": "VNS", "amritsar": "ATQ",
    "srinagar": "SXR", "leh": "IXL", "udaipur": "UDR", "bhubaneswar": "BBI",
    "guwahati": "GAU", "chandigarh": "IXC", "manali": "KUU", "shimla": "SLV",
    "thiruvananthapuram": "TRV", "indore": "IDR", "nagpur": "NAG",
    "coimbatore": "CJB", "patna": "PAT", "port blair": "IXZ",
    # South & South-East Asia
    "kathmandu": "KTM", "colombo": "CMB", "dhaka": "DAC", "male": "MLE",
    "bangkok": "BKK", "phuket": "HKT", "singapore": "SIN",
    "kuala lumpur": "KUL", "bali": "DPS", "denpasar": "DPS", "jakarta": "CGK",
    "hanoi": "HAN", "ho chi minh city": "SGN", "manila": "MNL",
    # East Asia
    "tokyo": "NRT", "osaka": "KIX", "seoul": "ICN", "hong kong": "HKG",
    "beijing": "PEK", "shanghai": "PVG", "taipei": "TPE",
    # Middle East
    "dubai": "DXB", "abu dhabi": "AUH", "doha": "DOH", "istanbul": "IST",
    # Europe
    "london": "LHR", "paris": "CDG", "frankfurt": "FRA", "amsterdam": "AMS",
    "rome": "FCO", "madrid": "MAD", "barcelona": "BCN", "zurich": "ZRH",
    "geneva": "GVA", "vienna": "VIE", "berlin": "BER", "munich": "MUC",
    "prague": "PRG", "lisbon": "LIS", "athens": "ATH", "reykjavik": "KEF",
    "oslo": "OSL",
    # Americas
    "new york": "JFK", "los angeles": "LAX", "san francisco": "SFO",
    "chicago": "ORD", "toronto": "YYZ", "vancouver": "YVR",
    # Oceania
    "sydney": "SYD", "melbourne": "MEL", "auckland": "AKL",
}


def resolve_airport_code(city: str) -> str:
    """Map a city name to an IATA code: exact match, then substring, then first three letters."""
    key = city.strip().lower()
    if not key:
        return ""
    if key in CITY_AIRPORTS:
        return CITY_AIRPORTS[key]

    for name, code in CITY_AIRPORTS.items():
        if name in key or key in name:
            return code

    letters = re.sub(r"[^a-z]", "", key)
    return letters[:3].upper()

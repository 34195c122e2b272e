"""Currency utilities: static conversion into the INR base currency."""

# Static exchange rates to INR (refresh manually when they drift)
EXCHANGE_RATES_TO_INR: dict[str, float] = {
    "INR": 1.0,
    "USD": 83.0,
    "EUR": 90.0,
    "GBP": 105.0,
    "AED": 22.6,
    "SGD": 61.5,
    "THB": 2.3,
    "JPY": 0.56,
    "AUD": 55.0,
    "CAD": 61.0,
    "CHF": 94.0,
    "HKD": 10.6,
    "LKR": 0.27,
    "NPR": 0.62,
    "MYR": 17.7,
    "IDR": 0.0053,
    "VND": 0.0034,
    "QAR": 22.8,
    "TRY": 2.6,
}

INR_SYMBOL = "₹"


def is_supported(currency: str) -> bool:
    return currency.upper() in EXCHANGE_RATES_TO_INR


def convert_to_inr(amount: float, from_currency: str) -> float:
    """Convert an amount to INR. Raises KeyError for currencies without a rate."""
    rate = EXCHANGE_RATES_TO_INR[from_currency.upper()]
    return round(amount * rate, 2)


def usd_to_base(amount: float, usd_to_inr: float) -> float:
    """Convert a USD amount to the base currency at a fixed rate."""
    return amount * usd_to_inr


def format_inr(amount: float) -> str:
    """Format an INR amount with Indian digit grouping, e.g. ₹1,23,456."""
    rounded = int(round(amount))
    sign = "-" if rounded < 0 else ""
    digits = str(abs(rounded))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups) + "," + tail
    return f"{sign}{INR_SYMBOL}{digits}"

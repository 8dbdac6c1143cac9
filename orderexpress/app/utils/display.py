"""Small derived values shown next to form fields and table rows."""
from __future__ import annotations

import json
import re
from decimal import Decimal, InvalidOperation

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

UNIT_PLURALS = {
    "bottle": "bottles",
    "can": "cans",
    "can(food)": "cans",
    "keg": "kegs",
    "bag": "bags",
    "box": "boxes",
    "carton": "cartons",
    "container": "containers",
    "package": "packages",
    "other": "units",
}

UNIT_SINGULARS = {
    "can(food)": "can",
    "other": "unit",
}


def parse_delivery_days(raw: "str | list | None") -> list[str]:
    """Normalize stored delivery days to weekday names in calendar order.

    Accepts a JSON list, a comma/space separated string or a list. Each entry
    is matched on its first three letters ('mon', 'Tues.', 'THURSDAY').
    Unknown entries are dropped.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return []
        try:
            parsed = json.loads(text)
        except ValueError:
            parsed = None
        parts = [str(p) for p in parsed] if isinstance(parsed, list) else re.split(r"[,\s]+", text)
    else:
        parts = [str(p) for p in raw]
    prefixes = {part.strip().lower()[:3] for part in parts}
    return [day for day in WEEKDAYS if day.lower()[:3] in prefixes]


def serialize_delivery_days(days: "str | list | None") -> "str | None":
    normalized = parse_delivery_days(days)
    return json.dumps(normalized) if normalized else None


def _parse_price(value) -> "Decimal | None":
    if value is None:
        return None
    if isinstance(value, (int, float, Decimal)):
        return Decimal(str(value))
    cleaned = re.sub(r"[^0-9.]", "", str(value))
    if not cleaned:
        return None
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


def unit_price_label(price, units_per_case, unit_type: "str | None") -> "str | None":
    """'$4.00 per bottle' for a case price split over its units, None when it does not apply."""
    parsed = _parse_price(price)
    try:
        units = int(units_per_case)
    except (TypeError, ValueError):
        return None
    if parsed is None or units <= 1:
        return None
    per = (parsed / units).quantize(Decimal("0.01"))
    unit = (unit_type or "").strip()
    label = UNIT_SINGULARS.get(unit, unit) or "unit"
    return f"${per} per {label}"


def packaging_label(vendor_name: "str | None", units_per_case, unit_volume, measure_type, unit_type) -> str:
    vendor = vendor_name or "No vendor"
    size = str(units_per_case or "").strip()
    unit_size = str(unit_volume or "").strip()
    measure = (measure_type or "").strip()
    unit = (unit_type or "").strip()
    if size and unit_size and measure and unit:
        plural = UNIT_PLURALS.get(unit, f"{unit}s")
        return f"{vendor} / {size} x {unit_size}{measure} ({plural})"
    if unit_size and measure and unit:
        return f"{vendor} / {unit_size}{measure}({unit})"
    if measure:
        return f"{vendor} / {measure}"
    return vendor


def password_strength(password: "str | None") -> int:
    """Percentage (0-100) of satisfied criteria: length >= 8, upper, lower, digit, symbol."""
    if not password:
        return 0
    checks = (
        len(password) >= 8,
        re.search(r"[A-Z]", password) is not None,
        re.search(r"[a-z]", password) is not None,
        re.search(r"[0-9]", password) is not None,
        re.search(r"[^A-Za-z0-9]", password) is not None,
    )
    return sum(checks) * 100 // len(checks)

import re
from datetime import date, datetime, timezone
from typing import Optional

MONTHS_ES = (
    "ENERO", "FEBRERO", "MARZO", "ABRIL", "MAYO", "JUNIO",
    "JULIO", "AGOSTO", "SEPTIEMBRE", "OCTUBRE", "NOVIEMBRE", "DICIEMBRE",
)

_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MS_PER_DAY = 24 * 60 * 60 * 1000


def utcnow() -> datetime:
    """UTC naive; así se guardan todas las fechas en la base."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def format_date_es(value) -> str:
    """date(2025, 1, 15) -> '15 ENERO 2025'."""
    if not value:
        return ""
    if isinstance(value, str):
        if " " in value:
            return value
        parsed = parse_expiry(value)
        return format_date_es(parsed) if parsed else value
    d = as_date(value)
    return f"{d.day} {MONTHS_ES[d.month - 1]} {d.year}"


def parse_expiry(value) -> Optional[date]:
    """
    Acepta 'YYYY-MM-DD' o '<día> <MES> <año>' ('15 ENERO 2025').
    Devuelve None si no se puede interpretar; nunca lanza excepción.
    """
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return as_date(value)

    text = str(value).strip()
    if not text:
        return None

    try:
        if " " in text:
            parts = text.split()
            if len(parts) != 3:
                return None
            day, month_name, year = parts
            month_name = month_name.upper()
            if month_name not in MONTHS_ES:
                return None
            return date(int(year), MONTHS_ES.index(month_name) + 1, int(day))

        if _ISO_RE.match(text):
            return date.fromisoformat(text)
    except ValueError:
        return None

    return None


def parse_timestamp(value) -> Optional[datetime]:
    """ISO 8601 -> datetime UTC naive. None si viene vacío."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def is_past_date(value, today: Optional[date] = None) -> bool:
    d = parse_expiry(value)
    if d is None:
        return False
    today = as_date(today) if today else utcnow().date()
    return d < today


def whole_days_between(start: datetime, end: datetime) -> int:
    """floor((end - start) / 1 día), en milisegundos como el portal."""
    delta_ms = int((end - start).total_seconds() * 1000)
    return delta_ms // MS_PER_DAY

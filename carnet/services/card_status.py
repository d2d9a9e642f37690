"""
Estado de un carnet a partir de (fecha de expiración, activo, referencia).

Funciones puras: no tocan la base ni el reloj. Quien calcula conteos y
badges en la misma pasada debe usar el mismo ``now`` para ambos.
"""
import math
from datetime import datetime, time
from enum import Enum
from typing import Iterable, Optional

from carnet.utils.dates import as_date, parse_expiry

EXPIRING_SOON_DAYS = 30


class CardStatus(str, Enum):
    ACTIVE = "active"
    EXPIRING_SOON = "expiring"
    EXPIRED = "expired"
    INACTIVE = "inactive"
    UNKNOWN = "unknown"  # fecha ilegible

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    CardStatus.ACTIVE: "ACTIVO",
    CardStatus.EXPIRING_SOON: "POR VENCER",
    CardStatus.EXPIRED: "EXPIRADO",
    CardStatus.INACTIVE: "INACTIVO",
    CardStatus.UNKNOWN: "SIN FECHA",
}


def _as_datetime(reference) -> datetime:
    if isinstance(reference, datetime):
        return reference
    return datetime.combine(reference, time.min)


def days_until_expiry(expiry, now) -> Optional[int]:
    """ceil((expiry - now) / 1 día). None si la fecha no se puede leer."""
    expiry_date = parse_expiry(expiry)
    if expiry_date is None:
        return None
    delta = datetime.combine(expiry_date, time.min) - _as_datetime(now)
    return math.ceil(delta.total_seconds() / 86400)


def is_expired(expiry, today) -> bool:
    expiry_date = parse_expiry(expiry)
    if expiry_date is None:
        return False
    return expiry_date < as_date(today)


def is_expiring_soon(expiry, now, window_days: int = EXPIRING_SOON_DAYS) -> bool:
    days = days_until_expiry(expiry, now)
    if days is None:
        return False
    return 0 <= days <= window_days


def classify(expiry, active, now, window_days: int = EXPIRING_SOON_DAYS) -> CardStatus:
    """Prioridad: INACTIVE > EXPIRED > EXPIRING_SOON > ACTIVE."""
    if active is False:
        return CardStatus.INACTIVE
    if parse_expiry(expiry) is None:
        return CardStatus.UNKNOWN
    if is_expired(expiry, now):
        return CardStatus.EXPIRED
    if is_expiring_soon(expiry, now, window_days):
        return CardStatus.EXPIRING_SOON
    return CardStatus.ACTIVE


def classify_student(student, now, window_days: int = EXPIRING_SOON_DAYS) -> CardStatus:
    return classify(student.expiry_date, student.active, now, window_days)


def count_by_status(students: Iterable, now, window_days: int = EXPIRING_SOON_DAYS) -> dict:
    counts = {status.value: 0 for status in CardStatus}
    for s in students:
        counts[classify_student(s, now, window_days).value] += 1
    return counts

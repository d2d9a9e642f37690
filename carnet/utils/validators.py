import re

_STUDENT_CODE_RE = re.compile(r"^\d{6,12}$")
_NATIONAL_ID_RE = re.compile(r"^\d{8,10}$")


def sanitize(text) -> str:
    if text is None:
        return ""
    return re.sub(r"[<>]", "", str(text))


def clean(value) -> str:
    return sanitize(value).strip()


def validate_student_code(code) -> bool:
    return bool(_STUDENT_CODE_RE.match(str(code or "").strip()))


def validate_national_id(national_id) -> bool:
    return bool(_NATIONAL_ID_RE.match(str(national_id or "").strip()))


def is_institutional_email(email, domains) -> bool:
    email = str(email or "").strip().lower()
    if "@" not in email:
        return False
    domain = email.rsplit("@", 1)[1]
    return domain in domains


def as_text(value) -> str:
    """Valor JSON (str, número o null) como texto sin espacios."""
    if value is None:
        return ""
    return str(value).strip()

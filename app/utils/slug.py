import re
import secrets

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(*parts) -> str:
    text = "-".join(str(p) for p in parts if p not in (None, ""))
    return _NON_SLUG.sub("-", text.lower()).strip("-")


def vehicle_slug(year: int, make: str, model: str) -> str:
    return f"{slugify(year, make, model)}-{secrets.token_hex(3)}"

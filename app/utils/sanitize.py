import re

_TAGS = re.compile(r"<[^>]*>")
_SPECIAL = re.compile(r"[<>'\"&]")
_PHONE_JUNK = re.compile(r"[^\d+\-()\s]")


def sanitize_text(value: str) -> str:
    """Strip HTML tags and markup characters."""
    return _SPECIAL.sub("", _TAGS.sub("", value)).strip()


def sanitize_email(value: str) -> str:
    return value.strip().lower()


def sanitize_phone(value: str) -> str:
    return _PHONE_JUNK.sub("", value).strip()

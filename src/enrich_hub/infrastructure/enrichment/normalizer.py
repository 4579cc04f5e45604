"""
Domain normalization for the enrichment join key.

Uploaded tables carry the join key in whatever shape the user had at hand:
an e-mail address, a bare host, or a full URL with scheme, ``www.`` prefix,
path, query string or port. All of them reduce to one canonical domain so
that "Jane@Acme.com", "https://www.acme.com/about" and "acme.com" join to
the same company.

CRITICAL: The reference index and the row enricher MUST use this same
function, otherwise keys built on one side never match the other.
"""

import re
from typing import Any, Optional

_SCHEME_RE = re.compile(r"^https?://")
_WWW_RE = re.compile(r"^www\.")
_HOST_END_RE = re.compile(r"[/?:]")


def normalize_domain(raw: Any) -> Optional[str]:
    """
    Turn a raw cell value into a canonical, lower-cased domain.

    Operations (in order):
    1. Non-string or blank input -> None
    2. E-mail (exactly one ``@``): the part after ``@``, lower-cased
    3. Otherwise URL-like: lower-case, strip ``http://``/``https://``,
       strip ``www.``, cut at the first ``/``, ``?`` or ``:``,
       strip one trailing ``.``
    4. Empty result -> None

    Never raises. Values without any host structure still come back as a
    best-effort lower-cased token.

    Args:
        raw: Cell value from the selected source column.

    Returns:
        Canonical domain, or None when nothing usable remains.

    Examples:
        >>> normalize_domain("Jane.Doe@Example.COM")
        'example.com'
        >>> normalize_domain("HTTPS://WWW.Example.com/path?x=1")
        'example.com'
        >>> normalize_domain("shop.example.com:8443")
        'shop.example.com'
        >>> normalize_domain("   ") is None
        True
    """
    if not isinstance(raw, str):
        return None

    value = raw.strip()
    if not value:
        return None

    if "@" in value:
        parts = value.split("@")
        if len(parts) == 2:
            return parts[1].lower() or None

    domain = value.lower()
    domain = _SCHEME_RE.sub("", domain)
    domain = _WWW_RE.sub("", domain)
    domain = _HOST_END_RE.split(domain, maxsplit=1)[0]
    if domain.endswith("."):
        domain = domain[:-1]

    return domain or None

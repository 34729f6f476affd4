from __future__ import annotations

import re

# local-part@label.tld, no whitespace and a single "@".
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+")


def is_email_valid(candidate: str) -> bool:
    if not isinstance(candidate, str):
        return False
    return EMAIL_PATTERN.fullmatch(candidate) is not None

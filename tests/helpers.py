"""
Helpers for reading the links and codes out of captured e-mails.
"""

import re
from html import unescape
from typing import Dict
from urllib.parse import parse_qs, urlparse

import pyotp


def link_from(body: str) -> str:
    """First link of an e-mail body, HTML entities decoded."""
    match = re.search(r"href='([^']+)'", body)
    assert match, "no link found in e-mail body"
    return unescape(match.group(1))


def link_params(body: str) -> Dict[str, str]:
    """Query parameters of the first link in an e-mail body."""
    query = parse_qs(urlparse(link_from(body)).query)
    return {key: values[0] for key, values in query.items()}


def code_from(body: str) -> str:
    """Six-digit code from a two-factor e-mail body."""
    match = re.search(r">\s*(\d{6})\s*<", body)
    assert match, "no 2FA code found in e-mail body"
    return match.group(1)


def wrong_code(secret: str) -> str:
    """A six-digit code that is not accepted for ``secret`` right now."""
    totp = pyotp.TOTP(secret)
    for candidate in range(1_000_000):
        code = f"{candidate:06d}"
        if not totp.verify(code, valid_window=1):
            return code
    raise AssertionError("every code is valid")

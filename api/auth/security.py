"""
Password scheme helpers for store credentials.

Exactly one scheme is active per deployment (PASSWORD_SCHEME):
- plain:    the stored password is the raw secret
- digest:   the stored password is the MD5 hex digest of the secret
- prefixed: the client sends `<tag>@<storeCode>`, where the tag is chosen by
            the store code's first letter; only the tag is stored
"""

from __future__ import annotations

import hashlib
import os
import secrets
from dataclasses import dataclass, field
from enum import Enum

from core.guard import is_safe

PREFIX_SEPARATOR = "@"
DEFAULT_PREFIX_TAGS = "Z=ganola"


class CredentialConfigError(RuntimeError):
    pass


class PasswordFormatError(ValueError):
    pass


class PasswordScheme(str, Enum):
    PLAIN = "plain"
    DIGEST = "digest"
    PREFIXED = "prefixed"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def password_scheme() -> PasswordScheme:
    raw = os.environ.get("PASSWORD_SCHEME", PasswordScheme.PLAIN.value).strip().lower()
    try:
        return PasswordScheme(raw or PasswordScheme.PLAIN.value)
    except ValueError as exc:
        allowed = ", ".join(s.value for s in PasswordScheme)
        raise CredentialConfigError(f"PASSWORD_SCHEME must be one of: {allowed}. Got '{raw}'.") from exc


def parse_prefix_tags(raw: str) -> dict[str, str]:
    """
    Parse "Z=ganola,T=other" into {"Z": "ganola", "T": "other"}.
    """
    tags: dict[str, str] = {}
    for item in (raw or "").split(","):
        item = item.strip()
        if not item:
            continue
        letter, sep, tag = item.partition("=")
        letter, tag = letter.strip(), tag.strip()
        if not sep or len(letter) != 1 or not tag:
            raise CredentialConfigError(f"Invalid PASSWORD_PREFIX_TAGS entry: '{item}'.")
        tags[letter.upper()] = tag
    return tags


def prefix_tags() -> dict[str, str]:
    return parse_prefix_tags(os.environ.get("PASSWORD_PREFIX_TAGS", DEFAULT_PREFIX_TAGS))


@dataclass(frozen=True)
class CredentialPolicy:
    scheme: PasswordScheme = PasswordScheme.PLAIN
    prefix_tags: dict[str, str] = field(default_factory=dict)
    guard_input: bool = False


def credential_policy() -> CredentialPolicy:
    scheme = password_scheme()
    tags = prefix_tags()
    if scheme is PasswordScheme.PREFIXED and not tags:
        raise CredentialConfigError("PASSWORD_PREFIX_TAGS is empty but PASSWORD_SCHEME is 'prefixed'.")
    return CredentialPolicy(
        scheme=scheme,
        prefix_tags=tags,
        guard_input=_env_bool("AUTH_GUARD_INPUT", False),
    )


def md5_hex(plain_password: str) -> str:
    return hashlib.md5((plain_password or "").encode("utf-8")).hexdigest()


def expected_prefixed_password(store_code: str, tags: dict[str, str]) -> str | None:
    if not store_code:
        return None
    tag = tags.get(store_code[0].upper())
    if tag is None:
        return None
    return f"{tag}{PREFIX_SEPARATOR}{store_code}"


def strip_prefix_suffix(claimed_password: str) -> str:
    # Tags may contain the separator themselves, so cut at the last one.
    head, sep, _ = claimed_password.rpartition(PREFIX_SEPARATOR)
    return head if sep else claimed_password


def comparison_password(store_code: str, claimed_password: str, policy: CredentialPolicy) -> str:
    """
    Value to bind against the stored password column.

    Raises PasswordFormatError when the prefixed scheme is active and the
    claimed password is not the literal expected for this store code.
    """
    claimed = claimed_password or ""
    if policy.scheme is PasswordScheme.PLAIN:
        return claimed
    if policy.scheme is PasswordScheme.DIGEST:
        return md5_hex(claimed)

    expected = expected_prefixed_password(store_code, policy.prefix_tags)
    if expected is None or not secrets.compare_digest(claimed.encode("utf-8"), expected.encode("utf-8")):
        raise PasswordFormatError("Password does not match the store code format.")
    return strip_prefix_suffix(claimed)


def store_code_is_safe(store_code: str, policy: CredentialPolicy) -> bool:
    if not policy.guard_input:
        return True
    return is_safe(store_code)

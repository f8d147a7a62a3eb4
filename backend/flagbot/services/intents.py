from __future__ import annotations
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable

CHALLENGE_NAME = r"[-_a-zA-Z0-9]+"

_MENTION = re.compile(r"@[^ ]+ ")


class Intent(str, Enum):
    REQUEST_CODE = "request_code"
    SUBMIT = "submit"
    CHECK = "check"
    REQUEST_SECRET = "request_secret"
    EASTER_EGG_STAIRS = "easter_egg_stairs"
    EASTER_EGG_PROTECTED = "easter_egg_protected"
    CHALLENGE_INFO = "challenge_info"
    REQUEST_HELP = "request_help"
    NO_MATCH = "no_match"


@dataclass(frozen=True)
class ParsedIntent:
    intent: Intent
    challenge_name: str | None = None
    hash: str | None = None


NO_MATCH = ParsedIntent(Intent.NO_MATCH)


def _rule(pattern: str) -> re.Pattern[str]:
    # ASCII: under IGNORECASE alone [a-z] also matches e.g. the Kelvin sign
    return re.compile(rf"\A{pattern}\Z", re.IGNORECASE | re.ASCII)


def _fixed(intent: Intent) -> Callable[[re.Match[str]], ParsedIntent]:
    return lambda m: ParsedIntent(intent)


def _named(intent: Intent) -> Callable[[re.Match[str]], ParsedIntent]:
    return lambda m: ParsedIntent(intent, challenge_name=m.group("name"))


# Evaluated top to bottom; the first rule that matches wins.
RULES: list[tuple[re.Pattern[str], Callable[[re.Match[str]], ParsedIntent]]] = [
    (_rule(r"(?:send|give|tell)(?: me)?(?: my)?(?: submission)? code"), _fixed(Intent.REQUEST_CODE)),
    (
        _rule(rf"submit (?P<name>{CHALLENGE_NAME}) (?P<hash>[a-zA-Z0-9]+)"),
        lambda m: ParsedIntent(Intent.SUBMIT, challenge_name=m.group("name"), hash=m.group("hash")),
    ),
    (_rule(rf"check (?P<name>{CHALLENGE_NAME})"), _named(Intent.CHECK)),
    (_rule(r"(?:send|give|tell)(?: me)?(?: a)? secret"), _fixed(Intent.REQUEST_SECRET)),
    (_rule(r"do you have stairs in your house\??"), _fixed(Intent.EASTER_EGG_STAIRS)),
    (_rule(r"i am protected\.?"), _fixed(Intent.EASTER_EGG_PROTECTED)),
    (_rule(rf"(?:send|give|tell)(?: me)? (?P<name>{CHALLENGE_NAME}) info"), _named(Intent.CHALLENGE_INFO)),
    (_rule(rf"help (?P<name>{CHALLENGE_NAME})"), _named(Intent.CHALLENGE_INFO)),
    (_rule(r"help(?: me)?"), _fixed(Intent.REQUEST_HELP)),
]


def normalize(message: str) -> str:
    """Drop '@someone ' mentions and surrounding whitespace."""
    return _MENTION.sub("", message).strip()


def classify(message: str) -> ParsedIntent:
    """
    Map free text to the intent of the first matching rule.

    Examples:
        >>> classify("@bot give me my code").intent
        <Intent.REQUEST_CODE: 'request_code'>
        >>> classify("help ctf1")
        ParsedIntent(intent=<Intent.CHALLENGE_INFO: 'challenge_info'>, challenge_name='ctf1', hash=None)
    """
    text = normalize(message)
    for pattern, build in RULES:
        m = pattern.match(text)
        if m:
            return build(m)
    return NO_MATCH

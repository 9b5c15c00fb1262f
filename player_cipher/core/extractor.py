"""
Structural extraction of the decipher, helper and n-transform code blocks
from an obfuscated player script.

The player is never parsed. Each family of functions is located by an
ordered list of regular expressions describing the syntactic shape the
function has taken in past player releases. Within a family the first
pattern that matches wins; the three families are searched independently.

Output order is fixed:
- index 0: decipher function (when the decipher family matched)
- middle: helper object declarations, in source order
- last: n-transform function (when the n-transform family matched)
"""

import logging
import re

logger = logging.getLogger(__name__)


class PlayerPattern:
    """A structural pattern for one kind of player function."""

    def __init__(self, name: str, pattern: str, all_matches: bool = False):
        self.name = name
        self.pattern = re.compile(pattern, re.DOTALL | re.ASCII)
        self.all_matches = all_matches

    def find(self, script: str) -> list[str]:
        """Return the matched source text (every match or only the first)."""
        if self.all_matches:
            return [m.group(0) for m in self.pattern.finditer(script)]
        match = self.pattern.search(script)
        return [match.group(0)] if match else []

    def __repr__(self):
        return f"PlayerPattern({self.name!r})"


class ExtractedFunctions:
    """Code blocks pulled out of one player script."""

    def __init__(
        self,
        decipher: str | None = None,
        helpers: list[str] | None = None,
        n_transform: str | None = None,
    ):
        self.decipher = decipher
        self.helpers = helpers or []
        self.n_transform = n_transform

    @property
    def has_decipher(self) -> bool:
        return self.decipher is not None

    def as_list(self) -> list[str]:
        """Positional fragment list: decipher, helpers..., n-transform."""
        fragments = []
        if self.decipher is not None:
            fragments.append(self.decipher)
        fragments.extend(self.helpers)
        if self.n_transform is not None:
            fragments.append(self.n_transform)
        return fragments


# Signature decipher function. The join.call shape is the current one; the
# getter and the loose .join("") ending cover older players.
DECIPHER_PATTERNS: list[PlayerPattern] = [
    PlayerPattern(
        "join_call",
        r'function(?: \w+)?\s*\(((?:\w+,)*\w+)\)\s*\{[\s\S]+?return (?:\w+\.)?join\.call\(\1, ""\)\}',
    ),
    PlayerPattern(
        "prototype_getter",
        r"\w+\.prototype\.get=function\(\)\{return this\.j\}",
    ),
    PlayerPattern(
        "join_empty",
        r'function(?: \w+)?\s*\((?:\w+,)*\w+\)\s*\{[\s\S]+?\.join\(""\)\}',
    ),
]

# Object literals holding the swap/splice/reverse helpers the decipher body calls.
HELPER_PATTERNS: list[PlayerPattern] = [
    PlayerPattern("var_object", r"var \w+=\{.+?\};", all_matches=True),
]

# Throttling ("n" parameter) transform.
N_TRANSFORM_PATTERNS: list[PlayerPattern] = [
    PlayerPattern("single_param_function", r"function\(\w\)\{[\s\S]+?\}"),
    PlayerPattern("modulo_reassign", r"\w\[i\]=\w\[(\w%\w\.length)\]"),
    PlayerPattern("split_chars", r'\w=\w\.split\(""\);'),
]


def _first_match(script: str, patterns: list[PlayerPattern], family: str) -> list[str]:
    for pattern in patterns:
        found = pattern.find(script)
        if found:
            logger.debug("%s matched %d block(s) with %s", family, len(found), pattern.name)
            return found
        logger.debug("%s no match for %s", family, pattern.name)
    return []


def extract(script: str) -> ExtractedFunctions:
    """Run all three pattern families over a player script."""
    deciphers = _first_match(script, DECIPHER_PATTERNS, "decipher")
    helpers = _first_match(script, HELPER_PATTERNS, "helpers")
    transforms = _first_match(script, N_TRANSFORM_PATTERNS, "n-transform")

    result = ExtractedFunctions(
        decipher=deciphers[0] if deciphers else None,
        helpers=helpers,
        n_transform=transforms[0] if transforms else None,
    )
    logger.debug(
        "Extracted decipher=%s helpers=%d n_transform=%s",
        result.has_decipher,
        len(result.helpers),
        result.n_transform is not None,
    )
    return result


def extract_functions(script: str) -> list[str]:
    """
    Extract the positional fragment list from a player script.

    Never raises. The list may be empty or lack a decipher function; the
    caller decides whether that is usable.
    """
    return extract(script).as_list()

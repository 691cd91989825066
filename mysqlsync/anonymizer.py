"""Deterministic, pattern-keyed field anonymization.

A field anonymizer is any callable ``(column, value, row) -> new_value``.
The same input value always yields the same pseudonym, so natural keys
that appear in several tables (an e-mail address used as a key, say) stay
consistent after anonymization.

Rules pair a regular expression, full-matched against ``"table.column"``,
with an anonymizer.  :class:`Anonymizer` evaluates them first-match-wins
and caches the outcome (including "no rule matched") per field for the
lifetime of a run::

    anon = Anonymizer(DEFAULT_ANONYMIZERS)
    anon.anonymize("customer", "firstname", "Hans", row)   # -> "Shauna"

Rules can be written as ``/regex/:name`` strings (see :func:`parse_rule`)
where *name* is one of the built-ins below or ``generic(<template>)``.
"""

from __future__ import annotations

import hashlib
import logging
import re
import threading
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from . import _vocabulary

logger = logging.getLogger(__name__)

FieldAnonymizer = Callable[[str, Any, Mapping[str, Any]], Any]
AnonymizerRule = Tuple["re.Pattern[str]", FieldAnonymizer]


# -- hashing primitives -------------------------------------------------------


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    return str(value)


def hash_number(value: Any) -> int:
    """Non-negative integer from the low 64 bits of the MD5 digest of *value*."""
    digest = hashlib.md5(_text(value).encode("utf-8")).digest()
    return abs(int.from_bytes(digest[-8:], "big", signed=True))


def hash_text(value: Any) -> Optional[str]:
    """Decimal string of :func:`hash_number`; ``None`` and ``""`` pass through."""
    if value is None:
        return None
    if value == "":
        return ""
    return str(hash_number(value))


def pick(vocabulary: Sequence[str], value: Any) -> Optional[str]:
    """Map *value* onto a fixed vocabulary entry; ``None`` and ``""`` pass through."""
    if value is None:
        return None
    if value == "":
        return ""
    return vocabulary[hash_number(value) % len(vocabulary)]


def _same_length(hashed: Optional[str], value: Any) -> Optional[str]:
    if hashed is None:
        return None
    if value is None:
        return ""
    length = len(_text(value))
    if not hashed:
        return hashed
    repeats = length // len(hashed) + 1
    return (hashed * repeats)[:length]


# -- built-in anonymizers -----------------------------------------------------


def default(column: str, value: Any, row: Mapping[str, Any]) -> Optional[str]:
    """Irreversible hash of the value to a decimal number."""
    return hash_text(value)


def default_retain_length(column: str, value: Any, row: Mapping[str, Any]) -> Optional[str]:
    """Hash trimmed (or cycled) to the length of the original value."""
    return _same_length(hash_text(value), value)


def first_name(column: str, value: Any, row: Mapping[str, Any]) -> Optional[str]:
    return pick(_vocabulary.FIRST_NAMES, value)


def last_name(column: str, value: Any, row: Mapping[str, Any]) -> Optional[str]:
    return pick(_vocabulary.LAST_NAMES, value)


def last_name_first_name(column: str, value: Any, row: Mapping[str, Any]) -> Optional[str]:
    if value is None:
        return None
    return f"{last_name(column, value, row)}, {first_name(column, value, row)}"


def city(column: str, value: Any, row: Mapping[str, Any]) -> Optional[str]:
    return pick(_vocabulary.CITIES, value)


def street(column: str, value: Any, row: Mapping[str, Any]) -> Optional[str]:
    return pick(_vocabulary.STREETS, value)


def street_number(column: str, value: Any, row: Mapping[str, Any]) -> Optional[str]:
    return pick(_vocabulary.STREET_NUMBERS, value)


def phone(column: str, value: Any, row: Mapping[str, Any]) -> Optional[str]:
    if value is None:
        return None
    return f"+{hash_text(value)}"


def post_code(column: str, value: Any, row: Mapping[str, Any]) -> Optional[str]:
    if value is None:
        return None
    return str(hash_number(value) % 100_000)


def iban(column: str, value: Any, row: Mapping[str, Any]) -> Optional[str]:
    """Keep the country prefix; ``DE`` IBANs get a valid mod-97 checksum."""
    if value is None:
        return None
    text = _text(value)
    if len(text) < 2:
        return text
    prefix = text[:2]
    if prefix.lower() == "de":
        number = hash_number(value) % 10**18
        # "DE" moved to the end as digits (D=13, E=14) followed by "00".
        checksum = 98 - int(f"{number}131400") % 97
        return f"{prefix}{checksum:02d}{number:018d}"
    return f"{prefix}{hash_number(value)}"


class TemplateAnonymizer:
    """Render a ``${column}`` template against the current (raw) row.

    Missing or null columns are substituted with the text ``NULL``::

        TemplateAnonymizer("user-${id}")("username", "hans", {"id": 1})  # "user-1"
    """

    PLACEHOLDER = re.compile(r"\$\{(?P<key>.*?)}")

    def __init__(self, expression: str) -> None:
        self.expression = expression

    def __call__(self, column: str, value: Any, row: Mapping[str, Any]) -> str:
        def _repl(m: "re.Match[str]") -> str:
            found = row.get(m.group("key"))
            return "NULL" if found is None else _text(found)

        return self.PLACEHOLDER.sub(_repl, self.expression)

    def __repr__(self) -> str:
        return f"TemplateAnonymizer({self.expression!r})"


BUILTINS: Dict[str, FieldAnonymizer] = {
    "default": default,
    "default_retain_length": default_retain_length,
    "first_name": first_name,
    "last_name": last_name,
    "last_name_first_name": last_name_first_name,
    "city": city,
    "street": street,
    "street_number": street_number,
    "phone": phone,
    "post_code": post_code,
    "iban": iban,
}

_GENERIC = re.compile(r"^generic\((?P<expr>.*)\)$", re.IGNORECASE | re.DOTALL)
_RULE = re.compile(r"^/(?P<regexp>.*)/:(?P<anonymizer>.*)$", re.DOTALL)


def find_by_name(name: str) -> FieldAnonymizer:
    """Return the built-in anonymizer called *name*, or a ``generic(...)`` template."""
    m = _GENERIC.match(name.strip())
    if m:
        return TemplateAnonymizer(m.group("expr"))
    key = name.strip().lower().replace("-", "_")
    try:
        return BUILTINS[key]
    except KeyError:
        raise ValueError(
            f"Unknown anonymizer {name!r}; must be one of {sorted(BUILTINS)} "
            "or generic(<template>)"
        ) from None


def rule(
    pattern: Union[str, "re.Pattern[str]"],
    anonymizer: Union[str, FieldAnonymizer],
) -> AnonymizerRule:
    """Build a rule from a pattern and an anonymizer (or anonymizer name)."""
    compiled = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)
    fn = find_by_name(anonymizer) if isinstance(anonymizer, str) else anonymizer
    return compiled, fn


def parse_rule(text: str) -> AnonymizerRule:
    """Parse a ``/regex/:name`` rule string."""
    m = _RULE.match(text.strip())
    if not m:
        raise ValueError(f"Anonymizer rule must look like /regex/:name, got {text!r}")
    return rule(m.group("regexp"), m.group("anonymizer"))


DEFAULT_ANONYMIZERS: List[AnonymizerRule] = [
    rule(r"^.*?\.account_?[hH]older$", last_name_first_name),
    rule(r"^.*?\.street$", street),
    rule(r"^.*?\.street_?[nN]umber$", street_number),
    rule(r"^.*?\.post_?[cC]ode$", post_code),
    rule(r"^.*?\.city$", city),
    rule(r"^.*?\.first_?[nN]ame$", first_name),
    rule(r"^.*?\.last_?[nN]ame$", last_name),
    rule(r"^.*?\.birth_?[nN]ame$", last_name),
    rule(r"^.*?\.phone_?[nN]umber$", phone),
    rule(r"^.*?\.id_?[cC]ard_?[nN]umber$", default),
    rule(r"^.*?\.email_?[aA]ddress$", default),
    rule(r"^.*?\.tax_?[iI]d$", default_retain_length),
    rule(r"^.*?\.tax_?[iI]dentification_?[nN]umber$", default),
    rule(r"^.*?\.iban$", iban),
]


class Anonymizer:
    """First-match-wins resolution of rules with a per-field cache.

    The cache is shared by every table of a run, including tables processed
    in parallel, and is guarded by a lock.
    """

    def __init__(self, rules: Iterable[AnonymizerRule] = ()) -> None:
        self.rules: List[AnonymizerRule] = list(rules)
        self._cache: Dict[str, Optional[FieldAnonymizer]] = {}
        self._lock = threading.Lock()

    def __bool__(self) -> bool:
        return bool(self.rules)

    def resolve(self, table: str, column: str) -> Optional[FieldAnonymizer]:
        """Return the anonymizer for ``table.column``, or ``None``."""
        field = f"{table}.{column}"
        with self._lock:
            if field in self._cache:
                return self._cache[field]
            found = next((fn for p, fn in self.rules if p.fullmatch(field)), None)
            self._cache[field] = found
        logger.info("Determined anonymizer for %s: %s", field, getattr(found, "__name__", found))
        return found

    def anonymize(self, table: str, column: str, value: Any, row: Mapping[str, Any]) -> Any:
        fn = self.resolve(table, column)
        if fn is None:
            return value
        return fn(column, value, row)

    def __repr__(self) -> str:
        return f"Anonymizer(rules={len(self.rules)})"

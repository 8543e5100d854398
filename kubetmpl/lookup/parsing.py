"""apiVersion and label-selector parsing.

Selectors follow the Kubernetes label-selector grammar. Parsed requirements
are re-rendered in sorted order so that equivalent selectors written in a
different order map to the same call-cache entry.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from kubetmpl.errors import InvalidLookupArguments, InvalidSelector

_NAME_RE = re.compile(r"^[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?$")
_DNS_SUBDOMAIN_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")
_INT_RE = re.compile(r"^-?[0-9]+$")

_MAX_NAME_LEN = 63
_MAX_PREFIX_LEN = 253

# Longest operators first so "!=" wins over "!" and "==" over "=".
_OPERATORS = ("!=", "==", "=", "!", "<", ">", "(", ")", ",")
_SET_OPERATORS = {"in", "notin"}


def parse_group_version(api_version: str) -> tuple[str, str]:
    """Split *api_version* into (group, version); ``v1`` is the core group."""
    parts = api_version.split("/")
    if len(parts) == 1:
        return "", parts[0]
    if len(parts) == 2 and parts[0] and parts[1]:
        return parts[0], parts[1]
    raise InvalidLookupArguments(f"unexpected GroupVersion string: {api_version}")


@dataclass(frozen=True)
class _Requirement:
    key: str
    operator: str
    values: tuple[str, ...] = ()

    def render(self) -> str:
        if self.operator == "exists":
            return self.key
        if self.operator == "!":
            return f"!{self.key}"
        if self.operator in _SET_OPERATORS:
            return f"{self.key} {self.operator} ({','.join(sorted(self.values))})"
        return f"{self.key}{self.operator}{self.values[0]}"


def _tokenize(selector: str) -> list[str]:
    tokens: list[str] = []
    i = 0
    while i < len(selector):
        ch = selector[i]
        if ch.isspace():
            i += 1
            continue
        for op in _OPERATORS:
            if selector.startswith(op, i):
                tokens.append(op)
                i += len(op)
                break
        else:
            start = i
            while i < len(selector) and not selector[i].isspace() and selector[i] not in "!=<>(),":
                i += 1
            tokens.append(selector[start:i])
    return tokens


def _validate_key(selector: str, key: str) -> None:
    prefix, sep, name = key.rpartition("/")
    if sep:
        if not prefix or len(prefix) > _MAX_PREFIX_LEN or not _DNS_SUBDOMAIN_RE.match(prefix):
            raise InvalidSelector(selector, f"invalid label key prefix {prefix!r}")
    if not name or len(name) > _MAX_NAME_LEN or not _NAME_RE.match(name):
        raise InvalidSelector(selector, f"invalid label key {key!r}")


def _validate_value(selector: str, value: str) -> None:
    if value and (len(value) > _MAX_NAME_LEN or not _NAME_RE.match(value)):
        raise InvalidSelector(selector, f"invalid label value {value!r}")


class _SelectorParser:
    def __init__(self, selector: str) -> None:
        self._selector = selector
        self._tokens = _tokenize(selector)
        self._pos = 0

    def _peek(self) -> str | None:
        return self._tokens[self._pos] if self._pos < len(self._tokens) else None

    def _next(self) -> str | None:
        token = self._peek()
        self._pos += 1
        return token

    def _fail(self, detail: str) -> InvalidSelector:
        return InvalidSelector(self._selector, detail)

    def _identifier(self, what: str) -> str:
        token = self._next()
        if token is None or token in _OPERATORS:
            raise self._fail(f"expected {what}, found {token or 'end of string'}")
        return token

    def _value(self) -> str:
        # Values may be empty: "k=" and "k in ()" are both legal.
        token = self._peek()
        if token is None or token in (",", ")"):
            return ""
        value = self._identifier("label value")
        _validate_value(self._selector, value)
        return value

    def parse(self) -> list[_Requirement]:
        requirements: list[_Requirement] = []
        while self._peek() is not None:
            requirements.append(self._requirement())
            token = self._next()
            if token is None:
                break
            if token != ",":
                raise self._fail(f"expected ',' after requirement, found {token}")
            if self._peek() is None:
                raise self._fail("trailing ','")
        return requirements

    def _requirement(self) -> _Requirement:
        if self._peek() == "!":
            self._next()
            key = self._identifier("label key")
            _validate_key(self._selector, key)
            return _Requirement(key, "!")

        key = self._identifier("label key")
        _validate_key(self._selector, key)
        op = self._peek()
        if op is None or op == ",":
            return _Requirement(key, "exists")
        self._next()

        if op in ("=", "==", "!="):
            return _Requirement(key, op, (self._value(),))
        if op in ("<", ">"):
            value = self._identifier("integer value")
            if not _INT_RE.match(value):
                raise self._fail(f"for '{op}' operator, the value must be an integer, found {value!r}")
            return _Requirement(key, op, (value,))
        if op in _SET_OPERATORS:
            if self._next() != "(":
                raise self._fail(f"expected '(' after '{op}'")
            values = [self._value()]
            while self._peek() == ",":
                self._next()
                values.append(self._value())
            if self._next() != ")":
                raise self._fail(f"expected ')' to close '{op}' values")
            return _Requirement(key, op, tuple(values))
        raise self._fail(f"unknown operator {op!r} after key {key!r}")


def parse_selector(selector: str | None) -> str:
    """Validate *selector* and return its canonical string form.

    ``None`` and blank selectors select everything and render as ``""``.
    """
    if selector is None or not selector.strip():
        return ""
    requirements = _SelectorParser(selector).parse()
    requirements.sort(key=lambda r: (r.key, r.operator, tuple(sorted(r.values))))
    return ",".join(r.render() for r in requirements)

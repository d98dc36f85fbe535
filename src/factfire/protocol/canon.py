from __future__ import annotations

import hashlib

from factfire.errors import SchemaError
from factfire.ir.fact import Fact
from factfire.ir.values import (
    Value,
    VAuth,
    VBool,
    VFact,
    VNat,
    VParty,
    VRecord,
    VRules,
    VSym,
    VUnit,
)


FACT_V1_PREFIX = b"factfire\x00fact_v1\x00"

TAG_CODE_BY_KIND = {
    "nat": 0x01,
    "sym": 0x02,
    "party": 0x03,
    "auth": 0x04,
    "bool": 0x05,
    "unit": 0x06,
    "rules": 0x07,
    "record": 0x08,
    "fact": 0x09,
}


def _u32be(number: int) -> bytes:
    return number.to_bytes(4, "big", signed=False)


def _encode_text(value: str) -> bytes:
    raw = value.encode("utf-8")
    return _u32be(len(raw)) + raw


def _encode_names(names: list[str]) -> bytes:
    out = bytearray(_u32be(len(names)))
    for name in names:
        out += _encode_text(name)
    return bytes(out)


def canonical_bytes_value(value: Value) -> bytes:
    code = TAG_CODE_BY_KIND.get(value.kind)
    if code is None:
        raise SchemaError(f"unsupported value kind for canonical encoding: {value.kind}")
    head = bytes([code])
    if isinstance(value, VNat):
        digits = str(value.value).encode("ascii")
        return head + _u32be(len(digits)) + digits
    if isinstance(value, (VSym, VParty)):
        return head + _encode_text(value.value)
    if isinstance(value, VAuth):
        return head + _encode_names(sorted(value.value))
    if isinstance(value, VBool):
        return head + (b"\x01" if value.value else b"\x00")
    if isinstance(value, VUnit):
        return head
    if isinstance(value, VRules):
        return head + _encode_names(list(value.value))
    if isinstance(value, VRecord):
        out = bytearray(head + _u32be(len(value.fields)))
        for name, item in value.fields:
            out += _encode_text(name)
            out += canonical_bytes_value(item)
        return bytes(out)
    if isinstance(value, VFact):
        return head + canonical_bytes_fact(value.fact)
    raise SchemaError(f"unsupported value type: {type(value).__name__}")


def canonical_bytes_fact(fact: Fact) -> bytes:
    out = bytearray(FACT_V1_PREFIX)
    out += _encode_text(fact.name)
    out += canonical_bytes_value(fact.value)
    out += _encode_names(sorted(fact.by))
    out += _encode_names(sorted(fact.obs))
    out += _encode_names(list(fact.rules))
    return bytes(out)


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def fact_digest(fact: Fact) -> str:
    """Content id of a fact: `sha256:<hex>` over its fact_v1 bytes."""

    return f"sha256:{sha256_hex(canonical_bytes_fact(fact))}"

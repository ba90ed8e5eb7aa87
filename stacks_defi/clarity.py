# clarity.py
# Just enough of the Clarity value wire format (SIP-005) to call read-only
# contract functions: encode uint / principal arguments, decode the result.
# Decoded values are plain Python: ints, bools, bytes, str, dict (tuple), list,
# None (none). `some x` and `ok x` decode to x; `err x` decodes to Err(x).

import hashlib
from dataclasses import dataclass
from typing import Any

C32_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"

TYPE_INT = 0x00
TYPE_UINT = 0x01
TYPE_BUFFER = 0x02
TYPE_TRUE = 0x03
TYPE_FALSE = 0x04
TYPE_STANDARD_PRINCIPAL = 0x05
TYPE_CONTRACT_PRINCIPAL = 0x06
TYPE_OK = 0x07
TYPE_ERR = 0x08
TYPE_NONE = 0x09
TYPE_SOME = 0x0A
TYPE_LIST = 0x0B
TYPE_TUPLE = 0x0C
TYPE_STRING_ASCII = 0x0D
TYPE_STRING_UTF8 = 0x0E

UINT128_MAX = (1 << 128) - 1


class ClarityError(ValueError):
    pass


@dataclass(frozen=True)
class Err:
    """A contract's `(err ...)` response."""
    value: Any


# --- c32check addresses ---

def c32_encode(data: bytes) -> str:
    n = int.from_bytes(data, "big")
    chars = []
    while n > 0:
        n, rem = divmod(n, 32)
        chars.append(C32_ALPHABET[rem])
    leading = len(data) - len(data.lstrip(b"\x00"))
    return "0" * leading + "".join(reversed(chars))


def c32_decode(s: str) -> bytes:
    s = s.upper().replace("O", "0").replace("L", "1").replace("I", "1")
    stripped = s.lstrip("0")
    leading = len(s) - len(stripped)
    n = 0
    for ch in stripped:
        idx = C32_ALPHABET.find(ch)
        if idx < 0:
            raise ClarityError(f"invalid c32 character {ch!r}")
        n = n * 32 + idx
    raw = n.to_bytes((n.bit_length() + 7) // 8, "big") if n else b""
    return b"\x00" * leading + raw


def _checksum(version: int, data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(bytes([version]) + data).digest()).digest()[:4]


def address_from_hash(version: int, hash160: bytes) -> str:
    return "S" + C32_ALPHABET[version] + c32_encode(hash160 + _checksum(version, hash160))


def parse_address(address: str):
    """'SP...'/'ST...' -> (version, hash160). Verifies the checksum."""
    if not isinstance(address, str) or len(address) < 3 or address[0].upper() != "S":
        raise ClarityError(f"not a Stacks address: {address!r}")
    version = C32_ALPHABET.find(address[1].upper())
    if version < 0:
        raise ClarityError(f"bad address version in {address!r}")
    payload = c32_decode(address[2:])
    if len(payload) != 24:
        raise ClarityError(f"bad address length in {address!r}")
    data, checksum = payload[:20], payload[20:]
    if _checksum(version, data) != checksum:
        raise ClarityError(f"bad address checksum in {address!r}")
    return version, data


# --- encoding (function arguments) ---

def encode_uint(n: int) -> bytes:
    if not 0 <= n <= UINT128_MAX:
        raise ClarityError(f"uint out of range: {n}")
    return bytes([TYPE_UINT]) + n.to_bytes(16, "big")


def encode_principal(principal: str) -> bytes:
    """Standard ('SP...') or contract ('SP....name') principal."""
    address, _, contract_name = principal.partition(".")
    version, hash160 = parse_address(address)
    if not contract_name:
        return bytes([TYPE_STANDARD_PRINCIPAL, version]) + hash160
    name = contract_name.encode("ascii")
    if len(name) > 128:
        raise ClarityError("contract name too long")
    return bytes([TYPE_CONTRACT_PRINCIPAL, version]) + hash160 + bytes([len(name)]) + name


def to_hex(value: bytes) -> str:
    return "0x" + value.hex()


# --- decoding (function results) ---

class _Reader:
    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def take(self, n: int) -> bytes:
        if self.pos + n > len(self.data):
            raise ClarityError("truncated Clarity value")
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def u8(self) -> int:
        return self.take(1)[0]

    def u32(self) -> int:
        return int.from_bytes(self.take(4), "big")


def _read_value(r: _Reader):
    t = r.u8()
    if t == TYPE_INT:
        return int.from_bytes(r.take(16), "big", signed=True)
    if t == TYPE_UINT:
        return int.from_bytes(r.take(16), "big")
    if t == TYPE_BUFFER:
        return r.take(r.u32())
    if t == TYPE_TRUE:
        return True
    if t == TYPE_FALSE:
        return False
    if t in (TYPE_STANDARD_PRINCIPAL, TYPE_CONTRACT_PRINCIPAL):
        version = r.u8()
        address = address_from_hash(version, r.take(20))
        if t == TYPE_STANDARD_PRINCIPAL:
            return address
        return address + "." + r.take(r.u8()).decode("ascii")
    if t in (TYPE_OK, TYPE_SOME):
        return _read_value(r)
    if t == TYPE_ERR:
        return Err(_read_value(r))
    if t == TYPE_NONE:
        return None
    if t == TYPE_LIST:
        return [_read_value(r) for _ in range(r.u32())]
    if t == TYPE_TUPLE:
        out = {}
        for _ in range(r.u32()):
            key = r.take(r.u8()).decode("ascii")
            out[key] = _read_value(r)
        return out
    if t == TYPE_STRING_ASCII:
        return r.take(r.u32()).decode("ascii")
    if t == TYPE_STRING_UTF8:
        return r.take(r.u32()).decode("utf-8")
    raise ClarityError(f"unknown Clarity type id 0x{t:02x}")


def decode(data: bytes):
    r = _Reader(data)
    value = _read_value(r)
    if r.pos != len(data):
        raise ClarityError("trailing bytes after Clarity value")
    return value


def decode_hex(hex_str: str):
    s = hex_str[2:] if hex_str.startswith("0x") else hex_str
    try:
        data = bytes.fromhex(s)
    except ValueError as e:
        raise ClarityError(f"invalid hex: {e}") from e
    return decode(data)

"""ssurtparse.parse.ipaddr
IPv4 literal recognition, following the WHATWG URL standard's IPv4 parser
https://url.spec.whatwg.org/#concept-ipv4-parser
"""

import logging
import re

logger = logging.getLogger(__name__)

# ipv4-number = "0" ( "x" / "X" ) *HEXDIG / "0" 1*OCTDIG / "0" / %x31-39 *DIGIT
_HEX_NUMBER_PAT: re.Pattern[bytes] = re.compile(rb"0[xX]([0-9A-Fa-f]*)")
_OCTAL_NUMBER_PAT: re.Pattern[bytes] = re.compile(rb"0([0-7]+)")
_DECIMAL_NUMBER_PAT: re.Pattern[bytes] = re.compile(rb"0|[1-9][0-9]*")

# most significant digits a 32-bit number can have, by base
_MAX_DIGITS: dict[int, int] = {8: 11, 10: 10, 16: 8}


def _to_int(digits: bytes, base: int) -> int | None:
    """None if digits can't fit in 32 bits. Checked before int() sees them,
    since int() refuses very long decimal strings.
    """
    digits = digits.lstrip(b"0")
    if len(digits) > _MAX_DIGITS[base]:
        return None
    return int(digits, base=base) if digits else 0


def _parse_ipv4_number(part: bytes) -> int | None:
    m: re.Match[bytes] | None = _HEX_NUMBER_PAT.fullmatch(part)
    if m is not None:
        # "0x" on its own is zero
        return _to_int(m[1], 16)
    m = _OCTAL_NUMBER_PAT.fullmatch(part)
    if m is not None:
        return _to_int(m[1], 8)
    if _DECIMAL_NUMBER_PAT.fullmatch(part) is not None:
        return _to_int(part, 10)
    return None


def parse_ipv4(host: bytes) -> int | None:
    """Returns the 32-bit address if host is an IPv4 literal, otherwise None.

    Browsers accept the short, octal and hexadecimal forms too, so
    parse_ipv4(b"0x7f.1") == parse_ipv4(b"127.0.0.1") == 0x7F000001.
    A single trailing dot is allowed.
    """
    parts: list[bytes] = host.split(b".")
    if len(parts) > 1 and parts[-1] == b"":
        parts.pop()
    if len(parts) > 4:
        return None

    numbers: list[int] = []
    for part in parts:
        if part == b"":
            return None
        n: int | None = _parse_ipv4_number(part)
        if n is None:
            return None
        numbers.append(n)

    if any(n > 255 for n in numbers[:-1]):
        return None
    if numbers[-1] >= 256 ** (5 - len(numbers)):
        return None

    result: int = numbers[-1]
    for i, n in enumerate(numbers[:-1]):
        result += n * 256 ** (3 - i)
    logger.debug("recognized %r as IPv4 address %#010x", host, result)
    return result

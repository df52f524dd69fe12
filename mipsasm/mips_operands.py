# mipsasm/mips_operands.py
import re

from mipsasm.mips_consts import REGISTER_MAP
from mipsasm.mips_errors import InvalidOperandError

# Optional sign, then either 0x-prefixed hex or plain decimal digits
_NUMBER_RE = re.compile(r'^[+-]?(0[xX][0-9a-fA-F]+|[0-9]+)$')


def translate_reg(reg_str):
    """Converts register name ($t0, $3, etc.) to its number."""
    if not reg_str:
        raise InvalidOperandError("Empty register operand.")
    reg_num = REGISTER_MAP.get(reg_str.lower())
    if reg_num is None:
        raise InvalidOperandError(f"Invalid register name: '{reg_str}'")
    return reg_num


def parse_number(num_str):
    """Parses a decimal or 0x-hex literal (optionally signed) with no range check."""
    if not num_str or not _NUMBER_RE.match(num_str):
        raise InvalidOperandError(f"Invalid immediate value: '{num_str}'")
    digits = num_str.lstrip('+-')
    value = int(digits, 16) if digits[:2].lower() == '0x' else int(digits, 10)
    return -value if num_str.startswith('-') else value


def translate_num(num_str, lower_bound, upper_bound):
    """Parses a numeric literal and checks lower_bound <= value <= upper_bound."""
    value = parse_number(num_str)
    if not (lower_bound <= value <= upper_bound):
        raise InvalidOperandError(f"Immediate '{num_str}' out of range ({lower_bound} to {upper_bound})")
    return value

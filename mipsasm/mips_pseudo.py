# mipsasm/mips_pseudo.py
"""
Pass one: pseudo-instruction expansion.

Each handler takes the raw operand strings of one source line and returns the
list of real-instruction records it stands for. Only operand counts and
numeric ranges are checked here; registers and labels are validated when the
records are encoded in pass two. The one exception: expansions that need $at
as scratch while their operands are still live (swpr, and traddu with all
three operands the same register) refuse $at as an operand. blt/bgt read
their operands before writing $at, so $at is accepted there.
"""
import logging

from mipsasm.mips_consts import AT_REG, ZERO_REG, REGISTER_MAP, INT16_MIN, INT16_MAX, INT32_MIN, UINT32_MAX
from mipsasm.mips_errors import InvalidArityError, InvalidOperandError
from mipsasm.mips_operands import translate_num

logger = logging.getLogger(__name__)


def _inst(name, *operands):
    return {"instruction": name, "operands": list(operands)}


def _expand_li(args):
    # li $dst, imm -> addiu $dst, $zero, imm  |  lui $at, hi; ori $dst, $at, lo
    dst, imm_str = args
    imm_val = translate_num(imm_str, INT32_MIN, UINT32_MAX) # signed or unsigned 32-bit
    if INT16_MIN <= imm_val <= INT16_MAX:
        return [_inst("addiu", dst, ZERO_REG, str(imm_val))]
    word = imm_val & 0xFFFFFFFF
    upper = (word >> 16) & 0xFFFF
    lower = word & 0xFFFF
    return [_inst("lui", AT_REG, str(upper)), _inst("ori", dst, AT_REG, str(lower))]


def _expand_move(args):
    # move $dst, $src -> addu $dst, $src, $zero
    dst, src = args
    return [_inst("addu", dst, src, ZERO_REG)]


def _expand_blt(args):
    # blt rs, rt, label -> slt $at, rs, rt; bne $at, $zero, label
    rs, rt, label = args
    return [_inst("slt", AT_REG, rs, rt), _inst("bne", AT_REG, ZERO_REG, label)]


def _expand_bgt(args):
    # bgt rs, rt, label -> slt $at, rt, rs; bne $at, $zero, label (rs > rt is rt < rs)
    rs, rt, label = args
    return [_inst("slt", AT_REG, rt, rs), _inst("bne", AT_REG, ZERO_REG, label)]


def _same_reg(a, b):
    # Pass one doesn't validate names, so unknown spellings only match themselves
    return REGISTER_MAP.get(a.lower(), a) == REGISTER_MAP.get(b.lower(), b)


def _reject_scratch(name, *regs):
    for reg in regs:
        if _same_reg(reg, AT_REG):
            raise InvalidOperandError(f"'{name}' uses {AT_REG} as scratch and cannot take it as an operand: '{reg}'")


def _expand_traddu(args):
    # traddu $dst, rs, rt -> dst = dst + rs + rt; no source is read after dst is overwritten
    dst, rs, rt = args
    if _same_reg(rt, dst):
        if _same_reg(rs, dst):
            _reject_scratch("traddu", dst)
            return [_inst("addu", AT_REG, rs, rt), _inst("addu", dst, dst, AT_REG)]
        return [_inst("addu", dst, dst, rt), _inst("addu", dst, dst, rs)]
    return [_inst("addu", dst, dst, rs), _inst("addu", dst, dst, rt)]


def _expand_swpr(args):
    # swpr rs, rt -> swap contents through $at
    rs, rt = args
    _reject_scratch("swpr", rs, rt)
    return [
        _inst("addu", AT_REG, rs, ZERO_REG),
        _inst("addu", rs, rt, ZERO_REG),
        _inst("addu", rt, AT_REG, ZERO_REG),
    ]


def _expand_mul(args):
    dst, rs, rt = args
    return [_inst("mult", rs, rt), _inst("mflo", dst)]


def _expand_div(args):
    dst, rs, rt = args
    return [_inst("div", rs, rt), _inst("mflo", dst)]


def _expand_rem(args):
    dst, rs, rt = args
    return [_inst("div", rs, rt), _inst("mfhi", dst)]


# name -> (operand count, handler)
PSEUDO_HANDLERS = {
    "li": (2, _expand_li),
    "move": (2, _expand_move),
    "blt": (3, _expand_blt),
    "bgt": (3, _expand_bgt),
    "traddu": (3, _expand_traddu),
    "swpr": (2, _expand_swpr),
    "mul": (3, _expand_mul),
    "div": (3, _expand_div),
    "rem": (3, _expand_rem),
}


def expand_instruction(name, args):
    """
    Returns the real-instruction records for one source line.
    Non-pseudo mnemonics pass through untouched as a single record.
    Raises InvalidArityError / InvalidOperandError; nothing is produced on failure.
    """
    args = list(args or [])
    entry = PSEUDO_HANDLERS.get(name)
    if entry is None:
        return [_inst(name, *args)]
    arity, handler = entry
    if len(args) != arity:
        raise InvalidArityError.for_instruction(name, arity, len(args))
    expanded = handler(args)
    logger.debug(f"Expanded '{name} {' '.join(args)}' into {len(expanded)} instruction(s)")
    return expanded


def format_instruction(record):
    """Renders a record as 'name arg1 arg2 ...' with single spaces."""
    return " ".join([record["instruction"], *record["operands"]])


def write_pass_one(output, name, args):
    """
    Expands one source line and writes each real instruction on its own line.
    Returns the number of words written; on error raises before writing anything.
    """
    expanded = expand_instruction(name, args)
    if output is not None:
        output.write("".join(format_instruction(rec) + "\n" for rec in expanded))
    return len(expanded)

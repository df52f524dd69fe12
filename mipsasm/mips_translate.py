# mipsasm/mips_translate.py
"""
Pass two: encode real instructions into 32-bit words.

Every write_* encoder is pure: it validates its operands and returns the word,
or raises an AssemblerError. Only translate_inst() touches the output stream,
and only once the word is fully built.
"""
import logging

from mipsasm.mips_consts import (
    INSTRUCTION_TABLE, FORMAT_ARITY,
    FMT_RTYPE, FMT_SHIFT, FMT_JR, FMT_MULTDIV, FMT_MOVEFROM,
    FMT_ADDIU, FMT_ORI, FMT_LUI, FMT_MEM, FMT_BRANCH, FMT_JUMP,
    INT16_MIN, INT16_MAX, UINT16_MAX, INT32_MIN, INT32_MAX, UINT32_MAX, SHAMT_MAX,
)
from mipsasm.mips_errors import (
    InvalidArityError, MisalignedAddressError, NotFoundError,
    UnknownInstructionError, UnreachableBranchError, UnresolvedLabelError,
)
from mipsasm.mips_operands import translate_num, translate_reg

logger = logging.getLogger(__name__)


def _check_arity(fmt, args):
    expected = FORMAT_ARITY[fmt]
    if len(args) != expected:
        raise InvalidArityError(f"Incorrect operand count for {fmt} format. Expected {expected}, got {len(args)}.")


def _r_word(rs=0, rt=0, rd=0, shamt=0, funct=0):
    # Format: opcode(6)=0 rs(5) rt(5) rd(5) shamt(5) funct(6)
    return (0 << 26) | (rs << 21) | (rt << 16) | (rd << 11) | (shamt << 6) | funct


def _i_word(opcode, rs, rt, imm):
    # Format: opcode(6) rs(5) rt(5) immediate(16)
    return (opcode << 26) | (rs << 21) | (rt << 16) | (imm & 0xFFFF)


def write_rtype(funct, args):
    """rd, rs, rt"""
    _check_arity(FMT_RTYPE, args)
    rd = translate_reg(args[0])
    rs = translate_reg(args[1])
    rt = translate_reg(args[2])
    return _r_word(rs=rs, rt=rt, rd=rd, funct=funct)


def write_shift(funct, args):
    """rd, rt, shamt"""
    _check_arity(FMT_SHIFT, args)
    rd = translate_reg(args[0])
    rt = translate_reg(args[1])
    shamt = translate_num(args[2], 0, SHAMT_MAX)
    return _r_word(rt=rt, rd=rd, shamt=shamt, funct=funct)


def write_jr(funct, args):
    _check_arity(FMT_JR, args)
    rs = translate_reg(args[0])
    return _r_word(rs=rs, funct=funct)


def write_multdiv(funct, args):
    """rs, rt (result lands in hi/lo)"""
    _check_arity(FMT_MULTDIV, args)
    rs = translate_reg(args[0])
    rt = translate_reg(args[1])
    return _r_word(rs=rs, rt=rt, funct=funct)


def write_movefrom(funct, args):
    """rd (copy of hi/lo)"""
    _check_arity(FMT_MOVEFROM, args)
    rd = translate_reg(args[0])
    return _r_word(rd=rd, funct=funct)


def write_addiu(opcode, args):
    # Accepts any signed 32-bit value; only the low 16 bits are encoded.
    _check_arity(FMT_ADDIU, args)
    rt = translate_reg(args[0])
    rs = translate_reg(args[1])
    imm = translate_num(args[2], INT32_MIN, INT32_MAX)
    return _i_word(opcode, rs, rt, imm)


def write_ori(opcode, args):
    _check_arity(FMT_ORI, args)
    rt = translate_reg(args[0])
    rs = translate_reg(args[1])
    imm = translate_num(args[2], 0, UINT16_MAX)
    return _i_word(opcode, rs, rt, imm)


def write_lui(opcode, args):
    # Supplies the upper half of a 32-bit value, so any signed/unsigned 32-bit literal is accepted.
    _check_arity(FMT_LUI, args)
    rt = translate_reg(args[0])
    imm = translate_num(args[1], INT32_MIN, UINT32_MAX)
    return _i_word(opcode, 0, rt, imm)


def write_mem(opcode, args):
    """rt, offset, base"""
    _check_arity(FMT_MEM, args)
    rt = translate_reg(args[0])
    offset = translate_num(args[1], INT16_MIN, INT16_MAX)
    base = translate_reg(args[2])
    return _i_word(opcode, base, rt, offset)


def can_branch_to(src_addr, dest_addr):
    """True if dest_addr is reachable from a branch at src_addr with a signed 16-bit word displacement."""
    word_offset = (dest_addr - (src_addr + 4)) // 4
    return INT16_MIN <= word_offset <= INT16_MAX


def write_branch(opcode, args, addr, symtbl):
    """rs, rt, label -- label must already be in the label table."""
    _check_arity(FMT_BRANCH, args)
    rs = translate_reg(args[0])
    rt = translate_reg(args[1])
    label = args[2]
    try:
        target_addr = symtbl.lookup(label)
    except NotFoundError as e:
        raise UnresolvedLabelError(f"Undefined label: '{label}'") from e

    byte_offset = target_addr - (addr + 4)
    if byte_offset % 4 != 0:
        raise MisalignedAddressError(
            f"Branch target 0x{target_addr:08x} for label '{label}' is not word-aligned relative to PC+4 (0x{addr + 4:08x})")
    if not can_branch_to(addr, target_addr):
        raise UnreachableBranchError(
            f"Branch target '{label}' (offset {byte_offset // 4}) too far for 16-bit signed relative offset.")
    word_offset = byte_offset // 4
    logger.debug(f"Branch to '{label}' (0x{target_addr:08x}) from 0x{addr:08x}: offset {word_offset}")
    return _i_word(opcode, rs, rt, word_offset)


def write_jump(opcode, args, addr, reltbl):
    """
    label -- always deferred to the linker: the site is recorded in the
    relocation table and the 26-bit target field is left zero.
    """
    _check_arity(FMT_JUMP, args)
    reltbl.insert(args[0], addr)
    # Format: opcode(6) address(26)
    return opcode << 26


def encode_inst(name, args, addr, symtbl, reltbl):
    """Looks up the mnemonic in the dispatch table and returns its encoded word."""
    spec = INSTRUCTION_TABLE.get(name)
    if spec is None:
        raise UnknownInstructionError(f"Unknown instruction: '{name}'")
    args = list(args or [])
    if spec.fmt == FMT_BRANCH:
        return write_branch(spec.code, args, addr, symtbl)
    if spec.fmt == FMT_JUMP:
        return write_jump(spec.code, args, addr, reltbl)
    return _ENCODERS[spec.fmt](spec.code, args)


_ENCODERS = {
    FMT_RTYPE: write_rtype,
    FMT_SHIFT: write_shift,
    FMT_JR: write_jr,
    FMT_MULTDIV: write_multdiv,
    FMT_MOVEFROM: write_movefrom,
    FMT_ADDIU: write_addiu,
    FMT_ORI: write_ori,
    FMT_LUI: write_lui,
    FMT_MEM: write_mem,
}


def write_inst_hex(output, word):
    output.write(f"{word:08x}\n")


def translate_inst(output, name, args, addr, symtbl, reltbl):
    """
    Encodes one real instruction at `addr` and writes it to `output` as eight hex digits.
    Returns the word. On error nothing is written and the tables are left unchanged.
    """
    word = encode_inst(name, args, addr, symtbl, reltbl)
    if output is not None:
        write_inst_hex(output, word)
    return word

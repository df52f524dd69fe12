# mipsasm/mips_consts.py
from collections import namedtuple

# MIPS Register Map (Name to Number)
REGISTER_MAP = {
    "$zero": 0, "$0": 0,
    "$at": 1, "$1": 1,
    "$v0": 2, "$2": 2,
    "$v1": 3, "$3": 3,
    "$a0": 4, "$4": 4,
    "$a1": 5, "$5": 5,
    "$a2": 6, "$6": 6,
    "$a3": 7, "$7": 7,
    "$t0": 8, "$8": 8,
    "$t1": 9, "$9": 9,
    "$t2": 10, "$10": 10,
    "$t3": 11, "$11": 11,
    "$t4": 12, "$12": 12,
    "$t5": 13, "$13": 13,
    "$t6": 14, "$14": 14,
    "$t7": 15, "$15": 15,
    "$s0": 16, "$16": 16,
    "$s1": 17, "$17": 17,
    "$s2": 18, "$18": 18,
    "$s3": 19, "$19": 19,
    "$s4": 20, "$20": 20,
    "$s5": 21, "$21": 21,
    "$s6": 22, "$22": 22,
    "$s7": 23, "$23": 23,
    "$t8": 24, "$24": 24,
    "$t9": 25, "$25": 25,
    "$k0": 26, "$26": 26,
    "$k1": 27, "$27": 27,
    "$gp": 28, "$28": 28,
    "$sp": 29, "$29": 29,
    "$fp": 30, "$30": 30,
    "$ra": 31, "$31": 31,
}

# Reverse map for disassembler (Number to Preferred Name); skip the numeric "$N" spellings
REGISTER_MAP_REV = {v: k for k, v in REGISTER_MAP.items() if not k[1:].isdigit()}

# Registers the pseudo-instruction expansions rely on
ZERO_REG = "$zero"
AT_REG = "$at" # assembler temporary, scratch for compare-and-branch / swap

# --- Dispatch Table ---
# Each real mnemonic maps to its encoder format and the fixed opcode (I/J-type) or funct (R-type) value.
InstructionSpec = namedtuple("InstructionSpec", ["fmt", "code"])

FMT_RTYPE = "rtype"       # rd, rs, rt
FMT_SHIFT = "shift"       # rd, rt, shamt
FMT_JR = "jr"             # rs
FMT_MULTDIV = "multdiv"   # rs, rt
FMT_MOVEFROM = "movefrom" # rd
FMT_ADDIU = "addiu"       # rt, rs, imm (signed)
FMT_ORI = "ori"           # rt, rs, imm (unsigned 16)
FMT_LUI = "lui"           # rt, imm
FMT_MEM = "mem"           # rt, offset, base
FMT_BRANCH = "branch"     # rs, rt, label
FMT_JUMP = "jump"         # label

# Operand count per format
FORMAT_ARITY = {
    FMT_RTYPE: 3, FMT_SHIFT: 3, FMT_JR: 1, FMT_MULTDIV: 2, FMT_MOVEFROM: 1,
    FMT_ADDIU: 3, FMT_ORI: 3, FMT_LUI: 2, FMT_MEM: 3, FMT_BRANCH: 3, FMT_JUMP: 1,
}

INSTRUCTION_TABLE = {
    "addu": InstructionSpec(FMT_RTYPE, 0x21),
    "or": InstructionSpec(FMT_RTYPE, 0x25),
    "slt": InstructionSpec(FMT_RTYPE, 0x2a),
    "sltu": InstructionSpec(FMT_RTYPE, 0x2b),
    "sll": InstructionSpec(FMT_SHIFT, 0x00),
    "jr": InstructionSpec(FMT_JR, 0x08),
    "mfhi": InstructionSpec(FMT_MOVEFROM, 0x10),
    "mflo": InstructionSpec(FMT_MOVEFROM, 0x12),
    "mult": InstructionSpec(FMT_MULTDIV, 0x18),
    "div": InstructionSpec(FMT_MULTDIV, 0x1a),
    "addiu": InstructionSpec(FMT_ADDIU, 0x09),
    "ori": InstructionSpec(FMT_ORI, 0x0d),
    "lui": InstructionSpec(FMT_LUI, 0x0f),
    "lb": InstructionSpec(FMT_MEM, 0x20),
    "lw": InstructionSpec(FMT_MEM, 0x23),
    "lbu": InstructionSpec(FMT_MEM, 0x24),
    "sb": InstructionSpec(FMT_MEM, 0x28),
    "sw": InstructionSpec(FMT_MEM, 0x2b),
    "beq": InstructionSpec(FMT_BRANCH, 0x04),
    "bne": InstructionSpec(FMT_BRANCH, 0x05),
    "j": InstructionSpec(FMT_JUMP, 0x02),
    "jal": InstructionSpec(FMT_JUMP, 0x03),
}

# Memory ops accept the 'offset($base)' source form; the reader splits it into two operands
MEMORY_INSTRUCTIONS = {name for name, spec in INSTRUCTION_TABLE.items() if spec.fmt == FMT_MEM}

# --- Reverse Maps for Disassembler ---
R_TYPE_FORMATS = (FMT_RTYPE, FMT_SHIFT, FMT_JR, FMT_MULTDIV, FMT_MOVEFROM)

FUNCT_MAP_REV = {spec.code: name for name, spec in INSTRUCTION_TABLE.items() if spec.fmt in R_TYPE_FORMATS}
OPCODE_MAP_REV = {spec.code: name for name, spec in INSTRUCTION_TABLE.items() if spec.fmt not in R_TYPE_FORMATS}

# --- Numeric Ranges ---
INT16_MIN, INT16_MAX = -(1 << 15), (1 << 15) - 1
UINT16_MAX = (1 << 16) - 1
INT32_MIN, INT32_MAX = -(1 << 31), (1 << 31) - 1
UINT32_MAX = (1 << 32) - 1
SHAMT_MAX = 31

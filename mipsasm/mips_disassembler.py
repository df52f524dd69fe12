# mipsasm/mips_disassembler.py
import logging

from mipsasm.mips_consts import (
    REGISTER_MAP_REV, OPCODE_MAP_REV, FUNCT_MAP_REV, INSTRUCTION_TABLE,
    FMT_RTYPE, FMT_SHIFT, FMT_JR, FMT_MULTDIV, FMT_MOVEFROM,
    FMT_ADDIU, FMT_ORI, FMT_LUI, FMT_MEM, FMT_BRANCH, FMT_JUMP,
)

logger = logging.getLogger(__name__)


def decode_fields(word):
    """Splits a 32-bit word into every field a MIPS word can carry."""
    return {
        "opcode": (word >> 26) & 0x3F,
        "rs": (word >> 21) & 0x1F,
        "rt": (word >> 16) & 0x1F,
        "rd": (word >> 11) & 0x1F,
        "shamt": (word >> 6) & 0x1F,
        "funct": word & 0x3F,
        "imm": word & 0xFFFF,
        "target": word & 0x03FFFFFF, # 26-bit address field for J-type
    }


def sign_extend(imm, bits=16):
    """ Sign extend a 'bits'-bit immediate value represented as an integer. """
    sign_bit = 1 << (bits - 1)
    if (imm & sign_bit) != 0:
        return imm - (1 << bits)
    return imm


class MipsDisassembler:
    def __init__(self, base_address=0):
        self.base_address = base_address
        self.errors = [] # Store errors encountered during disassembly

    def _get_reg_name(self, reg_num):
        """Gets the canonical register name ($zero, $t0, etc.) from number."""
        return REGISTER_MAP_REV.get(reg_num, f"$?{reg_num}")

    def decode_fields(self, machine_code_int):
        return decode_fields(machine_code_int)

    def disassemble_instruction(self, machine_code_int, pc=0):
        """ Disassembles a single 32-bit word of the modeled subset. Uses PC for branch/jump targets. """
        f = decode_fields(machine_code_int)
        rs_name = self._get_reg_name(f["rs"])
        rt_name = self._get_reg_name(f["rt"])
        rd_name = self._get_reg_name(f["rd"])
        signed_imm = sign_extend(f["imm"])

        if f["opcode"] == 0:
            mnemonic = FUNCT_MAP_REV.get(f["funct"])
        else:
            mnemonic = OPCODE_MAP_REV.get(f["opcode"])
        if mnemonic is None:
            return f".word 0x{machine_code_int:08x}"

        fmt = INSTRUCTION_TABLE[mnemonic].fmt
        if fmt == FMT_RTYPE:
            return f"{mnemonic} {rd_name}, {rs_name}, {rt_name}"
        elif fmt == FMT_SHIFT:
            return f"{mnemonic} {rd_name}, {rt_name}, {f['shamt']}"
        elif fmt == FMT_JR:
            return f"{mnemonic} {rs_name}"
        elif fmt == FMT_MULTDIV:
            return f"{mnemonic} {rs_name}, {rt_name}"
        elif fmt == FMT_MOVEFROM:
            return f"{mnemonic} {rd_name}"
        elif fmt == FMT_ADDIU:
            return f"{mnemonic} {rt_name}, {rs_name}, {signed_imm}"
        elif fmt == FMT_ORI:
            # Conventionally show immediate in hex for logical ops
            return f"{mnemonic} {rt_name}, {rs_name}, 0x{f['imm']:x}"
        elif fmt == FMT_LUI:
            return f"{mnemonic} {rt_name}, 0x{f['imm']:x}"
        elif fmt == FMT_MEM:
            return f"{mnemonic} {rt_name}, {signed_imm}({rs_name})"
        elif fmt == FMT_BRANCH:
            branch_target = (pc + 4 + (signed_imm * 4)) & 0xFFFFFFFF
            return f"{mnemonic} {rs_name}, {rt_name}, 0x{branch_target:08x}"
        elif fmt == FMT_JUMP:
            # Pseudo-absolute target; a zero field means the site is still awaiting relocation
            target_addr = (f["target"] << 2) | (pc & 0xF0000000)
            return f"{mnemonic} 0x{target_addr:08x}"
        logger.warning(f"Disassembly format unknown for mnemonic '{mnemonic}'")
        return f".word 0x{machine_code_int:08x}"

    def disassemble(self, machine_code_hex_lines):
        """ Disassembles a list of hex strings. Returns dict with 'assembly_code' and 'errors'. """
        assembly_lines = []
        self.errors = []
        current_pc = self.base_address

        for i, hex_line in enumerate(machine_code_hex_lines):
            line_num = i + 1
            hex_line = hex_line.strip().lower()
            if not hex_line: continue # Skip empty lines
            if hex_line.startswith("0x"): hex_line = hex_line[2:]

            if len(hex_line) > 8 or not all(c in '0123456789abcdef' for c in hex_line):
                self.errors.append({"line": line_num, "message": f"Invalid hex format/value: '{hex_line}'"})
                assembly_lines.append(f"Error line {line_num}: Invalid hex input")
            else:
                machine_code_int = int(hex_line.zfill(8), 16)
                assembly_lines.append(self.disassemble_instruction(machine_code_int, current_pc))
            current_pc += 4

        if self.errors:
            logger.warning(f"Disassembly completed with {len(self.errors)} errors.")
        return {"assembly_code": "\n".join(assembly_lines), "errors": self.errors}

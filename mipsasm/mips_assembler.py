# mipsasm/mips_assembler.py
import re
import logging

from mipsasm.mips_consts import MEMORY_INSTRUCTIONS, UINT32_MAX
from mipsasm.mips_errors import (
    AssemblerError, AllocationFailureError, DuplicateNameError, InvalidOperandError, MisalignedAddressError
)
from mipsasm.mips_pseudo import expand_instruction, format_instruction
from mipsasm.mips_tables import SymbolTable
from mipsasm.mips_translate import encode_inst, write_inst_hex

logger = logging.getLogger(__name__)

_LABEL_RE = re.compile(r'^\s*([a-zA-Z_][a-zA-Z0-9_]*):\s*(.*)$')
_MEMORY_OPERAND_RE = re.compile(r'^([+-]?(?:0[xX][0-9a-fA-F]+|\d+))?\((\$[a-zA-Z0-9]+)\)$')
_PAREN_INNER_SPACE_RE = re.compile(r"\(\s*([^()]*?)\s*\)")
_OFFSET_PAREN_SPACE_RE = re.compile(r"((?:^|[\s,])[+-]?(?:0[xX][0-9a-fA-F]+|\d+))\s+\(")


class MipsAssembler:
    def __init__(self, base_address=0):
        if not 0 <= base_address <= UINT32_MAX:
            raise InvalidOperandError(f"Base address {base_address} is outside the 32-bit address space.")
        if base_address % 4 != 0:
            raise MisalignedAddressError(f"Base address 0x{base_address:08x} is not word-aligned.")
        self.base_address = base_address
        self._reset()

    def _reset(self):
        self.symbol_table = SymbolTable(SymbolTable.UNIQUE_NAME)
        self.relocation_table = SymbolTable(SymbolTable.NON_UNIQUE)
        self.current_address = self.base_address
        self.parsed_lines = [] # Records handed to pass one
        self.expanded = [] # Real instructions from pass one, with their final addresses
        self.line_word_counts = [] # (line_num, words) per source instruction line
        self.machine_code = [] # Encoded integer words from pass two
        self.errors = []

    def _add_error(self, line_num, error, instruction_text=""):
        """Adds an error, preventing duplicates for the same line/message."""
        message = error.message if isinstance(error, AssemblerError) else str(error)
        kind = error.kind if isinstance(error, AssemblerError) else "AssemblerError"
        if not any(err['line'] == line_num and err['message'] == message for err in self.errors):
            logger.debug(f"Adding error: Line {line_num}, Msg: {message}, Text: '{instruction_text}'")
            self.errors.append({"line": line_num, "message": message, "kind": kind, "text": instruction_text})

    def _parse_line(self, line, line_num):
        """ Splits a raw line into label, mnemonic and operand strings. Returns None for blank lines. """
        original_line = line
        line = line.split('#')[0].strip()
        if not line:
            return None

        label = None
        label_match = _LABEL_RE.match(line)
        if label_match:
            label = label_match.group(1)
            line = label_match.group(2).strip()

        parsed = {"label": label, "instruction": None, "operands": [], "line_num": line_num,
                  "original_text": original_line.strip()}
        if not line: # Line could just be a label
            return parsed

        # "4 ( $sp )" -> "4($sp)"
        line = _OFFSET_PAREN_SPACE_RE.sub(r"\1(", _PAREN_INNER_SPACE_RE.sub(r"(\1)", line))
        tokens = [tok for tok in re.split(r'[\s,]+', line) if tok]
        instruction = tokens[0].lower()
        operands = tokens[1:]

        # 'offset($reg)' -> 'offset', '$reg' so memory ops carry rt, offset, base
        if instruction in MEMORY_INSTRUCTIONS and operands:
            mem_match = _MEMORY_OPERAND_RE.match(operands[-1])
            if mem_match:
                operands = operands[:-1] + [mem_match.group(1) or "0", mem_match.group(2)]

        parsed["instruction"] = instruction
        parsed["operands"] = operands
        return parsed

    def parse_source(self, assembly_code):
        """ Tokenizes source text into records for first_pass(). """
        records = []
        for i, line in enumerate(assembly_code.splitlines()):
            parsed = self._parse_line(line, i + 1)
            if parsed:
                records.append(parsed)
        return records

    @staticmethod
    def _normalize_record(record, index):
        # Bare (mnemonic, operands) pairs come from callers that tokenize on their own
        if isinstance(record, dict):
            return record
        mnemonic, operands = record
        return {"label": None, "instruction": mnemonic, "operands": list(operands), "line_num": index + 1,
                "original_text": " ".join([mnemonic, *operands])}

    def first_pass(self, records):
        """ Pass 1: record labels, expand pseudo-instructions and assign every real instruction its address. """
        self._reset()
        logger.debug("--- Starting First Pass ---")
        for index, record in enumerate(records):
            parsed = self._normalize_record(record, index)
            line_num = parsed["line_num"]
            original_text = parsed["original_text"]
            self.parsed_lines.append(parsed)

            if parsed.get("label"):
                try:
                    self.symbol_table.insert(parsed["label"], self.current_address)
                    logger.debug(f"Pass 1: Label '{parsed['label']}' defined at address 0x{self.current_address:08x}")
                except DuplicateNameError:
                    self._add_error(line_num, DuplicateNameError(f"Duplicate label definition: {parsed['label']}"), original_text)
                except AllocationFailureError:
                    raise
                except AssemblerError as e:
                    self._add_error(line_num, e, original_text)

            if not parsed.get("instruction"):
                continue

            try:
                expanded = expand_instruction(parsed["instruction"], parsed["operands"])
            except AllocationFailureError:
                raise
            except AssemblerError as e:
                self._add_error(line_num, e, original_text)
                expanded = []

            if expanded and self.current_address + 4 * (len(expanded) - 1) > UINT32_MAX:
                self._add_error(line_num, InvalidOperandError(
                    f"Instruction at 0x{self.current_address:x} runs past the end of the 32-bit address space."), original_text)
                expanded = []

            self.line_word_counts.append((line_num, len(expanded)))
            for base_instr in expanded:
                base_instr["address"] = self.current_address
                base_instr["line_num"] = line_num
                base_instr["original_text"] = original_text
                self.expanded.append(base_instr)
                logger.debug(f"Pass 1: '{format_instruction(base_instr)}' at 0x{self.current_address:08x} (from line {line_num})")
                self.current_address += 4
        logger.debug("--- First Pass Complete ---")

    def second_pass(self):
        """ Pass 2: encode every expanded instruction, resolving branches and recording jump relocations. """
        self.machine_code = []
        logger.debug("--- Starting Second Pass ---")
        for instr in self.expanded:
            try:
                word = encode_inst(instr["instruction"], instr["operands"], instr["address"],
                                   self.symbol_table, self.relocation_table)
            except AllocationFailureError:
                raise
            except AssemblerError as e:
                logger.warning(f"Encoding failed for instruction on line {instr['line_num']}: '{instr['original_text']}'")
                self._add_error(instr["line_num"], e, instr["original_text"])
                continue
            self.machine_code.append(word)
            logger.debug(f"Pass 2: Assembled 0x{word:08x} for '{format_instruction(instr)}' at 0x{instr['address']:08x}")
        logger.debug("--- Second Pass Complete ---")

    def assemble(self, assembly_code):
        """ Main method to assemble MIPS code. """
        logger.info("Starting assembly process...")
        try:
            self.first_pass(self.parse_source(assembly_code))
            if self.errors:
                logger.warning("Errors detected in Pass 1; addresses are unreliable, skipping Pass 2.")
            else:
                self.second_pass()
        except AllocationFailureError:
            raise
        except Exception as e:
            logger.error(f"Unexpected exception during assembly: {e}", exc_info=True)
            self._add_error(0, f"An unexpected internal error occurred during assembly: {e}", "")

        formatted_output = []
        for code in self.machine_code:
            formatted_output.append({
                "hex": f"0x{code:08x}",
                "bin": f"{code:032b}",
                "dec": str(code) # Unsigned decimal representation
            })

        if self.errors:
            logger.warning(f"Assembly completed with {len(self.errors)} errors.")
        else:
            logger.info("Assembly successful.")

        return {
            "machine_code": formatted_output,
            "intermediate": [
                {"address": instr["address"], "line": instr["line_num"], "text": format_instruction(instr)}
                for instr in self.expanded
            ],
            "symbol_table": self.symbol_table.to_list(),
            "relocation_table": self.relocation_table.to_list(),
            "errors": self.errors,
        }

    def write_intermediate(self, output):
        """ Writes the pass-one listing: one real instruction per line. """
        for instr in self.expanded:
            output.write(format_instruction(instr) + "\n")

    def write_object(self, output):
        """ Writes the encoded words followed by the symbol and relocation tables. """
        output.write(".text\n")
        for word in self.machine_code:
            write_inst_hex(output, word)
        output.write("\n.symbol\n")
        self.symbol_table.write(output)
        output.write("\n.relocation\n")
        self.relocation_table.write(output)

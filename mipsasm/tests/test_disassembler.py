# mipsasm/tests/test_disassembler.py
import pytest
from mipsasm.mips_consts import REGISTER_MAP, INSTRUCTION_TABLE
from mipsasm.mips_disassembler import MipsDisassembler, decode_fields
from mipsasm.mips_translate import write_rtype


@pytest.fixture
def disassembler():
    return MipsDisassembler()


@pytest.mark.parametrize("name", sorted(REGISTER_MAP))
def test_rtype_round_trip_every_register_name(name):
    num = REGISTER_MAP[name]
    others = ["$t9", name, "$k0"]
    for rd_name, rs_name, rt_name in (others, others[1:] + others[:1], others[2:] + others[:2]):
        word = write_rtype(INSTRUCTION_TABLE["addu"].code, [rd_name, rs_name, rt_name])
        fields = decode_fields(word)
        assert fields["opcode"] == 0
        assert fields["funct"] == 0x21
        assert fields["shamt"] == 0
        assert (fields["rd"], fields["rs"], fields["rt"]) == (
            REGISTER_MAP[rd_name], REGISTER_MAP[rs_name], REGISTER_MAP[rt_name])
    assert num in (fields["rd"], fields["rs"], fields["rt"])


def test_round_trip_text(disassembler):
    word = write_rtype(INSTRUCTION_TABLE["slt"].code, ["$1", "$8", "$9"])
    fields = disassembler.decode_fields(word)
    assert (fields["rd"], fields["rs"], fields["rt"], fields["funct"]) == (1, 8, 9, 0x2a)
    assert disassembler.disassemble_instruction(word) == "slt $at, $t0, $t1"


@pytest.mark.parametrize("word,pc,expected", [
    (0x012a8021, 0, "addu $s0, $t1, $t2"),
    (0x00095100, 0, "sll $t2, $t1, 4"),
    (0x00000000, 0, "sll $zero, $zero, 0"),
    (0x03e00008, 0, "jr $ra"),
    (0x0211001a, 0, "div $s0, $s1"),
    (0x00001010, 0, "mfhi $v0"),
    (0x2508ffff, 0, "addiu $t0, $t0, -1"),
    (0x34280001, 0, "ori $t0, $at, 0x1"),
    (0x3c091001, 0, "lui $t1, 0x1001"),
    (0x83b0fffc, 0, "lb $s0, -4($sp)"),
    (0x11090002, 0, "beq $t0, $t1, 0x0000000c"),
    (0x1500fffe, 12, "bne $t0, $zero, 0x00000008"),
    (0x0c000000, 0x00400010, "jal 0x00000000"),
    (0xffffffff, 0, ".word 0xffffffff"),
    (0x0000003f, 0, ".word 0x0000003f"),
])
def test_disassemble_instruction(disassembler, word, pc, expected):
    assert disassembler.disassemble_instruction(word, pc) == expected


def test_disassemble_list(disassembler):
    result = disassembler.disassemble(["0x24080064", "", "0x11090002", "zz"])
    # The empty line is skipped without advancing the PC
    assert result["assembly_code"].splitlines() == [
        "addiu $t0, $zero, 100",
        "beq $t0, $t1, 0x00000010",
        "Error line 4: Invalid hex input",
    ]
    assert result["errors"] == [{"line": 4, "message": "Invalid hex format/value: 'zz'"}]


def test_disassemble_uses_base_address():
    disassembler = MipsDisassembler(base_address=0x00400000)
    result = disassembler.disassemble(["1000ffff"])
    assert result["assembly_code"] == "beq $zero, $zero, 0x00400000"
    assert not result["errors"]

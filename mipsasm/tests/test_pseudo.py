# mipsasm/tests/test_pseudo.py
import io

import pytest
from mipsasm.mips_errors import InvalidArityError, InvalidOperandError
from mipsasm.mips_pseudo import expand_instruction, write_pass_one


def lines(output):
    return output.getvalue().splitlines()

# --- Arity ---

@pytest.mark.parametrize("name,args", [
    ("move", []),
    ("li", ["$t0"]),
    ("blt", ["$t0", "$t1"]),
    ("bgt", ["$t0", "$t1", "x", "y"]),
    ("rem", ["$v0", "$s0", "$s1", "$s2"]),
    ("swpr", ["$t0"]),
    ("traddu", ["$t0", "$t1"]),
    ("mul", ["$t0", "$t1"]),
    ("div", ["$t0", "$t1"]), # the pseudo form always takes a destination
])
def test_wrong_arity_writes_nothing(name, args):
    out = io.StringIO()
    with pytest.raises(InvalidArityError):
        write_pass_one(out, name, args)
    assert out.getvalue() == ""

# --- li ---

def test_li_small_value_is_one_addiu():
    out = io.StringIO()
    assert write_pass_one(out, "li", ["$s0", "100"]) == 1
    assert lines(out) == ["addiu $s0 $zero 100"]


def test_li_large_value_is_lui_ori_pair():
    out = io.StringIO()
    # 432096 = 0x000697e0
    assert write_pass_one(out, "li", ["$s0", "432096"]) == 2
    assert lines(out) == ["lui $at 6", "ori $s0 $at 38880"]


@pytest.mark.parametrize("value", ["4294967296", "-2147483649", "0x100000000"])
def test_li_value_wider_than_32_bits_fails(value):
    out = io.StringIO()
    with pytest.raises(InvalidOperandError):
        write_pass_one(out, "li", ["$s0", value])
    assert out.getvalue() == ""


@pytest.mark.parametrize("value,words", [
    ("32767", 1), ("-32768", 1),   # signed 16-bit boundary uses addiu
    ("32768", 2), ("-32769", 2),
    ("0xFFFFFFFF", 2), ("-2147483648", 2), ("4294967295", 2),
])
def test_li_boundaries(value, words):
    assert len(expand_instruction("li", ["$t0", value])) == words


def test_li_negative_wide_value_splits_twos_complement():
    # -32769 = 0xffff7fff
    expanded = expand_instruction("li", ["$t0", "-32769"])
    assert expanded == [
        {"instruction": "lui", "operands": ["$at", "65535"]},
        {"instruction": "ori", "operands": ["$t0", "$at", "32767"]},
    ]


def test_li_hex_literal():
    assert expand_instruction("li", ["$t0", "0x10"]) == [{"instruction": "addiu", "operands": ["$t0", "$zero", "16"]}]


@pytest.mark.parametrize("value", ["abc", "35x", "1_000", "", "0x"])
def test_li_rejects_non_numbers(value):
    with pytest.raises(InvalidOperandError):
        expand_instruction("li", ["$t0", value])

# --- Other pseudo-instructions ---

def test_move():
    out = io.StringIO()
    assert write_pass_one(out, "move", ["$t0", "$t1"]) == 1
    assert lines(out) == ["addu $t0 $t1 $zero"]


def test_blt_and_bgt():
    out = io.StringIO()
    assert write_pass_one(out, "blt", ["$t0", "$t1", "done"]) == 2
    assert write_pass_one(out, "bgt", ["$t0", "$t1", "done"]) == 2
    assert lines(out) == [
        "slt $at $t0 $t1", "bne $at $zero done",
        "slt $at $t1 $t0", "bne $at $zero done",
    ]


def test_traddu():
    out = io.StringIO()
    assert write_pass_one(out, "traddu", ["$t0", "$t1", "$t2"]) == 2
    assert lines(out) == ["addu $t0 $t0 $t1", "addu $t0 $t0 $t2"]


def test_traddu_rt_same_as_destination_adds_it_first():
    out = io.StringIO()
    assert write_pass_one(out, "traddu", ["$t0", "$t1", "$t0"]) == 2
    assert lines(out) == ["addu $t0 $t0 $t0", "addu $t0 $t0 $t1"]


def test_traddu_rs_same_as_destination_keeps_order():
    out = io.StringIO()
    assert write_pass_one(out, "traddu", ["$t0", "$t0", "$t1"]) == 2
    assert lines(out) == ["addu $t0 $t0 $t0", "addu $t0 $t0 $t1"]


@pytest.mark.parametrize("args", [["$t0", "$t0", "$t0"], ["$t0", "$8", "$T0"]])
def test_traddu_all_operands_same_register_goes_through_at(args):
    out = io.StringIO()
    assert write_pass_one(out, "traddu", args) == 2
    assert lines(out) == [f"addu $at {args[1]} {args[2]}", f"addu {args[0]} {args[0]} $at"]


def test_traddu_all_operands_at_is_rejected():
    with pytest.raises(InvalidOperandError):
        expand_instruction("traddu", ["$at", "$1", "$at"])


def test_swpr():
    out = io.StringIO()
    assert write_pass_one(out, "swpr", ["$t0", "$t1"]) == 3
    assert lines(out) == ["addu $at $t0 $zero", "addu $t0 $t1 $zero", "addu $t1 $at $zero"]


@pytest.mark.parametrize("args", [["$at", "$t1"], ["$t0", "$1"], ["$AT", "$at"]])
def test_swpr_refuses_scratch_register(args):
    out = io.StringIO()
    with pytest.raises(InvalidOperandError, match="scratch"):
        write_pass_one(out, "swpr", args)
    assert out.getvalue() == ""


def test_blt_and_bgt_accept_scratch_register():
    # slt reads both sources before $at is written
    assert [r["operands"] for r in expand_instruction("blt", ["$at", "$t1", "done"])] == [
        ["$at", "$at", "$t1"], ["$at", "$zero", "done"]]
    assert [r["operands"] for r in expand_instruction("bgt", ["$t0", "$at", "done"])] == [
        ["$at", "$at", "$t0"], ["$at", "$zero", "done"]]


def test_mul_div():
    out = io.StringIO()
    assert write_pass_one(out, "mul", ["$t0", "$t1", "$t2"]) == 2
    assert write_pass_one(out, "div", ["$t0", "$t1", "$t2"]) == 2
    assert lines(out) == ["mult $t1 $t2", "mflo $t0", "div $t1 $t2", "mflo $t0"]


def test_rem_writes_two_lines_without_extra_whitespace():
    out = io.StringIO()
    assert write_pass_one(out, "rem", ["$v0", "$s0", "$s1"]) == 2
    assert out.getvalue() == "div $s0 $s1\nmfhi $v0\n"

# --- Pass-through ---

def test_real_instruction_passes_through_unchecked():
    out = io.StringIO()
    assert write_pass_one(out, "addu", ["$t0", "$t1"]) == 1 # arity is pass two's problem
    assert write_pass_one(out, "bogus", []) == 1
    assert lines(out) == ["addu $t0 $t1", "bogus"]


def test_registers_not_validated_in_pass_one():
    assert expand_instruction("move", ["$nope", "$t1"]) == [{"instruction": "addu", "operands": ["$nope", "$t1", "$zero"]}]


def test_expansion_is_deterministic():
    first = expand_instruction("li", ["$t0", "432096"])
    second = expand_instruction("li", ["$t0", "432096"])
    assert first == second
    assert first is not second


def test_write_pass_one_without_output_still_counts():
    assert write_pass_one(None, "swpr", ["$t0", "$t1"]) == 3

import io

import pytest

from oberonc.codegen import CodeGenerator
from oberonc.table import ItemType, var_item
from oberonc.vm import Machine, Op


@pytest.fixture
def generator():
    return CodeGenerator(Machine(output=io.StringIO()))


def test_gen_writes_and_advances(generator):
    generator.gen(17)
    generator.emit(Op.STOP)
    assert generator.counter == 2
    assert generator.memory[:2] == [17, Op.STOP]


def test_gen_const_non_negative(generator):
    generator.gen_const(5)
    assert generator.counter == 1
    assert generator.memory[0] == 5


def test_address_chain_is_resolved(generator):
    item = var_item("x", ItemType.INTEGER, 0)
    generator.gen_address(item)
    first = generator.counter - 1
    generator.gen_var(item)
    second = generator.counter - 2
    generator.fill_gaps(item.addr)
    assert generator.memory[first] == generator.counter
    assert generator.memory[second] == generator.counter


def test_assignment_and_read_back(generator):
    item = var_item("x", ItemType.INTEGER, 0)
    generator.gen_address(item)
    generator.gen(5)
    generator.emit(Op.SAVE)
    generator.gen_var(item)
    generator.emit(Op.STOP)
    generator.fill_gaps(item.addr)
    generator.gen(0)
    assert generator.run() == 5


@pytest.mark.parametrize("text, op", [("DIV", Op.DIV), ("*", Op.MULT), ("MOD", Op.MOD)])
def test_gen_operation(generator, text, op):
    generator.gen_operation(text)
    assert generator.memory[generator.counter - 1] == op


def test_gen_operation_unknown_emits_nothing(generator):
    generator.gen_operation("+")
    assert generator.counter == 0


@pytest.mark.parametrize(
    "text, op",
    [("=", Op.CMPEQ), ("#", Op.CMPNE), ("<", Op.CMPLT),
     ("<=", Op.CMPLE), (">", Op.CMPGT), (">=", Op.CMPGE)],
)
def test_gen_comparison(generator, text, op):
    generator.gen_comparison(text)
    assert generator.counter == 1
    assert generator.memory[0] == op


def test_gen_goto(generator):
    generator.gen(1)
    generator.gen_goto(40)
    assert generator.memory[1:3] == [40, Op.GOTO]


def test_gen_halt_returns_code(generator):
    generator.gen_halt(3)
    assert generator.run() == 3


@pytest.mark.parametrize("negate", [False, True])
def test_abs(generator, negate):
    generator.gen(7)
    if negate:
        generator.emit(Op.NEG)
    generator.gen_func("ABS")
    generator.emit(Op.STOP)
    assert generator.run() == 7


def test_max_and_min(generator):
    generator.gen_func("MAX")
    generator.emit(Op.STOP)
    assert generator.run() == 2**31 - 1

    other = CodeGenerator(Machine(output=io.StringIO()))
    other.gen_func("MIN")
    other.emit(Op.STOP)
    assert other.run() == -(2**31)


def test_listing_ends_at_counter(generator):
    generator.gen(2)
    generator.emit(Op.STOP)
    lines = generator.listing().splitlines()
    assert len(lines) == generator.counter + 1
    assert lines[1] == "1) STOP"
import io

import pytest

from oberonc.vm import Machine, Op, op_name


def _run(program, stdin=""):
    machine = Machine(input=io.StringIO(stdin), output=io.StringIO())
    machine.memory[: len(program)] = [int(cell) for cell in program]
    result = machine.run()
    return machine, result


def test_add():
    _, result = _run([2, 3, Op.ADD, Op.STOP])
    assert result == 2 + 3


def test_subtraction_takes_lower_operand_first():
    _, result = _run([10, 4, Op.SUB, Op.STOP])
    assert result == 10 - 4


def test_division_truncates_towards_zero():
    _, result = _run([7, Op.NEG, 2, Op.DIV, Op.STOP])
    assert result == -3


def test_modulo_takes_sign_of_dividend():
    _, result = _run([7, Op.NEG, 2, Op.MOD, Op.STOP])
    assert result == -1


def test_division_by_zero_raises():
    with pytest.raises(ZeroDivisionError):
        _run([7, 0, Op.DIV, Op.STOP])


def test_double_negation_restores_value():
    _, result = _run([9, Op.NEG, Op.NEG, Op.STOP])
    assert result == 9


def test_save_and_load():
    machine, result = _run([100, 42, Op.SAVE, 100, Op.LOAD, Op.STOP])
    assert result == 42
    assert machine.memory[100] == 42


def test_swap_exchanges_top_two():
    _, result = _run([1, 2, Op.SWAP, Op.SUB, Op.STOP])
    assert result == 2 - 1


def test_dup_and_over():
    _, dup = _run([6, Op.DUP, Op.MULT, Op.STOP])
    assert dup == 6 * 6
    _, over = _run([8, 2, Op.OVER, Op.STOP])
    assert over == 8


def test_drop_leaves_lower_value():
    _, result = _run([4, 5, Op.DROP, Op.STOP])
    assert result == 4


def test_goto_skips_code():
    _, result = _run([4, Op.GOTO, 1, Op.STOP, 8, Op.STOP])
    assert result == 8


@pytest.mark.parametrize("condition, expected", [(0, 22), (1, 11)])
def test_ifz_jumps_only_on_zero(condition, expected):
    _, result = _run([condition, 5, Op.IFZ, 11, Op.STOP, 22, Op.STOP])
    assert result == expected


@pytest.mark.parametrize(
    "jump, taken_when",
    [(Op.IFEQ, (3, 3)), (Op.IFNE, (3, 4)), (Op.IFLT, (3, 4)),
     (Op.IFLE, (4, 4)), (Op.IFGT, (5, 4)), (Op.IFGE, (4, 4))],
)
def test_conditional_jump_taken(jump, taken_when):
    a, b = taken_when
    _, result = _run([a, b, 6, jump, 11, Op.STOP, 22, Op.STOP])
    assert result == 22


@pytest.mark.parametrize(
    "jump, not_taken_when",
    [(Op.IFEQ, (3, 4)), (Op.IFNE, (4, 4)), (Op.IFLT, (4, 4)),
     (Op.IFLE, (5, 4)), (Op.IFGT, (4, 4)), (Op.IFGE, (3, 4))],
)
def test_conditional_jump_not_taken(jump, not_taken_when):
    a, b = not_taken_when
    _, result = _run([a, b, 6, jump, 11, Op.STOP, 22, Op.STOP])
    assert result == 11


@pytest.mark.parametrize("a, b", [(3, 5), (5, 3), (4, 4), (0, 9)])
@pytest.mark.parametrize(
    "cmp, complement",
    [(Op.CMPLT, Op.CMPGE), (Op.CMPGT, Op.CMPLE), (Op.CMPEQ, Op.CMPNE)],
)
def test_comparisons_are_complementary(a, b, cmp, complement):
    _, first = _run([a, b, cmp, Op.STOP])
    _, second = _run([a, b, complement, Op.STOP])
    assert {first, second} == {0, 1}


def test_out_pads_to_width():
    machine, _ = _run([7, 3, Op.OUT, Op.LN, Op.STOP])
    assert machine.output.getvalue().startswith("  7\n")


def test_in_reads_integer():
    machine, result = _run([100, Op.IN, Op.SAVE, 100, Op.LOAD, Op.STOP], stdin="42\n")
    assert result == 42
    assert machine.output.getvalue().startswith("? ")


def test_in_reports_bad_input():
    machine, result = _run([Op.IN, Op.STOP], stdin="abc\n")
    assert "Неправильный ввод" in machine.output.getvalue()
    assert result == 0


def test_invalid_command_stops():
    machine, result = _run([-1000])
    assert "Недопустимая команда: -1000" in machine.output.getvalue()
    assert result is None


def test_ticks_count_every_command():
    program = [1, 2, Op.ADD, 3, Op.MULT, Op.STOP]
    machine, _ = _run(program)
    assert machine.ticks == len(program)
    assert f"Количество тактов: {len(program)}" in machine.output.getvalue()


def test_empty_stack_has_no_exit_code():
    machine, result = _run([Op.STOP])
    assert result is None
    assert "Код возврата" not in machine.output.getvalue()


def test_exit_code_reported():
    machine, _ = _run([12, Op.STOP])
    assert machine.output.getvalue().endswith("Код возврата: 12")


def test_op_name():
    assert op_name(Op.ADD) == "ADD"
    assert op_name(int(Op.IFZ)) == "IFZ"
    assert op_name(5) == "ERROR"


def test_listing_shows_values_and_mnemonics():
    machine = Machine(output=io.StringIO())
    machine.memory[:3] = [2, 3, Op.ADD]
    lines = machine.listing(2).splitlines()
    assert lines == ["0) 2", "1) 3", "2) ADD"]
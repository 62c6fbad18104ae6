"""A stack machine that runs generated code held in a single memory array."""

from __future__ import annotations

import operator
import sys
from enum import IntEnum
from typing import Callable, TextIO

MEMORY_SIZE = 8 * 1024

_INT_BITS = 32


def _wrap(value: int) -> int:
    """Reduce ``value`` to a signed 32-bit integer."""
    half = 1 << (_INT_BITS - 1)
    return (value + half) % (1 << _INT_BITS) - half


def _div(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("деление на ноль")
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _mod(a: int, b: int) -> int:
    return a - _div(a, b) * b


class Op(IntEnum):
    """Machine commands. Any non-negative cell is pushed as a value."""

    STOP = -1
    ADD = -2
    SUB = -3
    MULT = -4
    DIV = -5
    MOD = -6
    NEG = -7
    LOAD = -8
    SAVE = -9
    DUP = -10
    DROP = -11
    SWAP = -12
    OVER = -13
    GOTO = -14
    IFEQ = -15
    IFNE = -16
    IFLT = -17
    IFLE = -18
    IFGT = -19
    IFGE = -20
    IN = -21
    OUT = -22
    LN = -23
    AND = -24
    OR = -25
    NOT = -26
    CMPEQ = -27
    CMPNE = -28
    CMPLT = -29
    CMPLE = -30
    CMPGT = -31
    CMPGE = -32
    IFZ = -33


_OP_BY_CODE = {op.value: op for op in Op}

# Pop the top operand b, then replace the next one a with f(a, b).
_BINARY: dict[int, Callable[[int, int], int]] = {
    Op.ADD: lambda a, b: _wrap(a + b),
    Op.SUB: lambda a, b: _wrap(a - b),
    Op.MULT: lambda a, b: _wrap(a * b),
    Op.DIV: lambda a, b: _wrap(_div(a, b)),
    Op.MOD: _mod,
    Op.AND: lambda a, b: int(bool(a) and bool(b)),
    Op.OR: lambda a, b: int(bool(a) or bool(b)),
    Op.CMPEQ: lambda a, b: int(a == b),
    Op.CMPNE: lambda a, b: int(a != b),
    Op.CMPLT: lambda a, b: int(a < b),
    Op.CMPLE: lambda a, b: int(a <= b),
    Op.CMPGT: lambda a, b: int(a > b),
    Op.CMPGE: lambda a, b: int(a >= b),
}

# Stack holds: a, b, address (on top). Jump when relation(a, b) holds.
_CONDITIONAL_JUMPS: dict[int, Callable[[int, int], bool]] = {
    Op.IFEQ: operator.eq,
    Op.IFNE: operator.ne,
    Op.IFLT: operator.lt,
    Op.IFLE: operator.le,
    Op.IFGT: operator.gt,
    Op.IFGE: operator.ge,
}


def op_name(code: int) -> str:
    """Return the mnemonic of a command code, or ``"ERROR"`` if there is none."""
    op = _OP_BY_CODE.get(code)
    return op.name if op is not None else "ERROR"


class Machine:
    """Code, variables and stack share one memory; the stack grows downwards from its end."""

    def __init__(
        self,
        memory_size: int = MEMORY_SIZE,
        input: TextIO | None = None,
        output: TextIO | None = None,
    ) -> None:
        self.memory = [-1] * memory_size
        self.pc = 0
        self.sp = memory_size
        self.ticks = 0
        self.input = input
        self.output = output
        self._tokens: list[str] = []

    def _read_int(self, stream: TextIO) -> int | None:
        while not self._tokens:
            line = stream.readline()
            if not line:
                return None
            self._tokens.extend(line.split())
        token = self._tokens.pop(0)
        try:
            return _wrap(int(token))
        except ValueError:
            return None

    def run(self) -> int | None:
        """Execute from the current ``pc`` until STOP.

        Return the value left on top of the stack, or ``None`` if it is empty.
        """
        out = self.output if self.output is not None else sys.stdout
        inp = self.input if self.input is not None else sys.stdin
        m = self.memory

        while True:
            cmd = m[self.pc]
            self.pc += 1
            self.ticks += 1

            if cmd >= 0:
                self.sp -= 1
                m[self.sp] = cmd
                continue
            if cmd == Op.STOP:
                break

            binary = _BINARY.get(cmd)
            if binary is not None:
                self.sp += 1
                m[self.sp] = binary(m[self.sp], m[self.sp - 1])
                continue

            relation = _CONDITIONAL_JUMPS.get(cmd)
            if relation is not None:
                if relation(m[self.sp + 2], m[self.sp + 1]):
                    self.pc = m[self.sp]
                self.sp += 3
                continue

            sp = self.sp
            match cmd:
                case Op.NEG:
                    m[sp] = _wrap(-m[sp])
                case Op.LOAD:
                    m[sp] = m[m[sp]]
                case Op.SAVE:
                    m[m[sp + 1]] = m[sp]
                    self.sp += 2
                case Op.DUP:
                    m[sp - 1] = m[sp]
                    self.sp -= 1
                case Op.DROP:
                    self.sp += 1
                case Op.SWAP:
                    m[sp], m[sp + 1] = m[sp + 1], m[sp]
                case Op.OVER:
                    self.sp -= 1
                    m[self.sp] = m[self.sp + 2]
                case Op.GOTO:
                    self.pc = m[sp]
                    self.sp += 1
                case Op.IFZ:
                    address, condition = m[sp], m[sp + 1]
                    self.sp += 2
                    if condition == 0:
                        self.pc = address
                case Op.IN:
                    self.sp -= 1
                    out.write("? ")
                    out.flush()
                    value = self._read_int(inp)
                    if value is None:
                        out.write("Неправильный ввод")
                        value = 0
                    m[self.sp] = value
                case Op.OUT:
                    width = max(m[sp], 0)
                    out.write(f"{m[sp + 1]:>{width}}")
                    self.sp += 2
                case Op.LN:
                    out.write("\n")
                case _:
                    out.write(f"Недопустимая команда: {cmd}")
                    break

        out.write(f"\nКоличество тактов: {self.ticks}\n")
        if self.sp < len(m):
            out.write(f"Код возврата: {m[self.sp]}")
            return m[self.sp]
        return None

    def listing(self, count: int) -> str:
        """Return cells 0 to ``count`` inclusive, one per line, commands by name."""
        lines = []
        for address, cell in enumerate(self.memory[: count + 1]):
            shown = str(cell) if cell >= 0 else op_name(cell)
            lines.append(f"{address}) {shown}")
        return "\n".join(lines) + "\n"
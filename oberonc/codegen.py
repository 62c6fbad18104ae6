"""Emission of machine code into the memory of a stack machine."""

from __future__ import annotations

from .table import Item
from .vm import Machine, Op

INT_MAX = 2**31 - 1

_OPERATIONS = {"DIV": Op.DIV, "*": Op.MULT, "MOD": Op.MOD}

_COMPARISONS = {
    "=": Op.CMPEQ,
    "#": Op.CMPNE,
    "<": Op.CMPLT,
    "<=": Op.CMPLE,
    ">": Op.CMPGT,
    ">=": Op.CMPGE,
}


class CodeGenerator:
    """Writes commands one after another into a machine's memory.

    ``counter`` is the address at which the next command goes.
    """

    def __init__(self, machine: Machine | None = None) -> None:
        self.machine = machine if machine is not None else Machine()
        self.counter = 0

    @property
    def memory(self) -> list[int]:
        return self.machine.memory

    def gen(self, cmd: int) -> None:
        """Write ``cmd`` at the current address and advance."""
        self.machine.memory[self.counter] = int(cmd)
        self.counter += 1

    def emit(self, op: Op) -> None:
        """Write one machine command."""
        self.gen(op)

    def patch(self, position: int, value: int) -> None:
        """Overwrite an earlier cell, e.g. to fix up a forward jump."""
        self.machine.memory[position] = int(value)

    def gen_const(self, value: int) -> None:
        if value >= 0:
            self.gen(value)
        else:
            self.emit(Op.NEG)
            self.gen(value)

    def gen_address(self, item: Item) -> None:
        """Emit a placeholder for a variable's address and chain it to earlier ones.

        The item's ``addr`` is set two past the placeholder so that
        ``fill_gaps`` can walk the chain back.
        """
        self.gen(item.addr)
        item.addr = self.counter + 1

    def gen_var(self, item: Item) -> None:
        self.gen_address(item)
        self.emit(Op.LOAD)

    def gen_func(self, name: str) -> None:
        """Emit the body of a standard function applied to the value on the stack."""
        if name == "ABS":
            self.emit(Op.DUP)
            self.gen(0)
            self.gen(self.counter + 3)
            self.emit(Op.IFGE)
            self.emit(Op.NEG)
        elif name == "MAX":
            self.gen(INT_MAX)
        elif name == "MIN":
            self.gen(INT_MAX)
            self.emit(Op.NEG)
            self.gen(1)
            self.emit(Op.SUB)
        elif name == "ODD":
            self.gen(2)
            self.emit(Op.MOD)
            self.gen(0)
            self.gen(0)
            self.emit(Op.IFEQ)

    def gen_operation(self, operation: str) -> None:
        """Emit a multiplicative operation written as ``DIV``, ``*`` or ``MOD``."""
        op = _OPERATIONS.get(operation)
        if op is not None:
            self.emit(op)

    def gen_comparison(self, operation: str) -> None:
        """Emit a comparison written as ``=``, ``#``, ``<``, ``<=``, ``>`` or ``>=``."""
        op = _COMPARISONS.get(operation)
        if op is not None:
            self.emit(op)

    def gen_halt(self, exit_code: int) -> None:
        self.gen_const(exit_code)
        self.emit(Op.STOP)

    def gen_goto(self, address: int) -> None:
        self.gen(address)
        self.emit(Op.GOTO)

    def fill_gaps(self, to: int) -> None:
        """Resolve a chain of address placeholders to the current address."""
        memory = self.machine.memory
        while to > 0:
            previous = memory[to - 2]
            memory[to - 2] = self.counter
            to = previous

    def run(self) -> int | None:
        """Run the generated code; return the exit code left on the stack."""
        return self.machine.run()

    def listing(self) -> str:
        """Return the generated code up to and including the current address."""
        return self.machine.listing(self.counter)
"""Recursive-descent parser that checks a module and generates its code."""

from __future__ import annotations

from .codegen import CodeGenerator
from .driver import SourceText
from .errors import ContextError, ParseError
from .scanner import Lex, Scanner, lex_name
from .table import (
    Item,
    ItemKind,
    ItemType,
    NameTable,
    const_item,
    function_item,
    module_item,
    procedure_item,
    type_item,
    var_item,
)
from .vm import Op

_RELATIONS = frozenset({Lex.EQ, Lex.NE, Lex.LT, Lex.LE, Lex.GT, Lex.GE})
_ADDITIVE = frozenset({Lex.PLUS, Lex.MINUS})
_MULTIPLICATIVE = frozenset({Lex.DIV, Lex.MOD, Lex.MULT})

_IMPORTABLE = frozenset({"In", "Out"})


class Parser:
    """Parses one module from a scanner and emits its code.

    Messages about declared but unused variables are collected in
    ``warnings``.
    """

    def __init__(self, scanner: Scanner, generator: CodeGenerator | None = None) -> None:
        self.scanner = scanner
        self.table = NameTable()
        self.generator = generator if generator is not None else CodeGenerator()
        self.warnings: list[str] = []
        scanner.next_lex()

    # -- entry point -----------------------------------------------------

    def compile(self) -> CodeGenerator:
        """Parse the module and return the generator holding its code."""
        table = self.table
        table.open_scope()  # standard identifiers
        table.add(function_item("ABS", ItemType.INTEGER))
        table.add(function_item("MIN", ItemType.INTEGER))
        table.add(function_item("MAX", ItemType.INTEGER))
        table.add(function_item("ODD", ItemType.BOOLEAN))
        for name in ("HALT", "INC", "DEC", "In.Open", "In.Int", "Out.Int", "Out.Ln"):
            table.add(procedure_item(name))
        table.add(type_item("INTEGER", ItemType.INTEGER))

        table.open_scope()  # the module itself
        self._module()
        table.close_scope()
        table.close_scope()
        return self.generator

    # -- error helpers ---------------------------------------------------

    def _syntax_error(self, expected: str) -> ParseError:
        self.scanner.source.skip_line()
        return ParseError(expected, self.scanner.lex_position)

    def _context_error(self, message: str) -> ContextError:
        self.scanner.source.skip_line()
        return ContextError(message, self.scanner.lex_position)

    def _find(self, name: str) -> Item:
        try:
            return self.table.find(name)
        except ContextError as exc:
            raise self._context_error(exc.message) from None

    def _declare(self, item: Item) -> None:
        try:
            self.table.declare(item)
        except ContextError as exc:
            raise self._context_error(exc.message) from None

    @property
    def _lex(self) -> Lex:
        return self.scanner.lex

    def _next(self) -> None:
        self.scanner.next_lex()

    def _check(self, lex: Lex) -> None:
        self._expect(lex)
        self._next()

    def _expect(self, lex: Lex) -> None:
        if self._lex is not lex:
            raise self._syntax_error(lex_name(lex))

    def _check_int(self, type_: ItemType | None) -> None:
        if type_ is not ItemType.INTEGER:
            raise self._context_error("Ожидается целый тип")

    def _check_bool(self, type_: ItemType | None) -> None:
        if type_ is not ItemType.BOOLEAN:
            raise self._context_error("Ожидается логический тип")

    # -- module and declarations -----------------------------------------

    def _module(self) -> None:
        self._check(Lex.MODULE)
        self._expect(Lex.NAME)
        module_name = self.scanner.name_value
        self._declare(module_item(module_name))
        self._next()
        self._check(Lex.SEMI)

        if self._lex is Lex.IMPORT:
            self._import()

        self._declarations()

        if self._lex is Lex.BEGIN:
            self._next()
            self._statements()

        self._check(Lex.END)
        self._expect(Lex.NAME)
        end_name = self.scanner.name_value
        item = self._find(end_name)
        if item.kind is not ItemKind.MODULE:
            raise self._syntax_error("имя модуля")
        if item.name != module_name:
            raise self._syntax_error(f"имя модуля {end_name}")
        self._next()
        self._check(Lex.DOT)

        self.generator.emit(Op.STOP)
        self._locate_variables()

    def _locate_variables(self) -> None:
        gen = self.generator
        gen.gen(gen.counter)
        for var in reversed(self.table.variables()):
            if var.addr > 0:
                gen.fill_gaps(var.addr)
                gen.gen(0)
            else:
                self.warnings.append(
                    f"Переменна `{var.name}` объявлена, но не используется"
                )

    def _import(self) -> None:
        self._check(Lex.IMPORT)
        self._import_name()
        while self._lex is Lex.COMMA:
            self._check(Lex.COMMA)
            self._import_name()
        self._check(Lex.SEMI)

    def _import_name(self) -> None:
        self._expect(Lex.NAME)
        name = self.scanner.name_value
        if name not in _IMPORTABLE:
            raise self._context_error("Ожидается модуль `In` или `Out`")
        self._declare(module_item(name))
        self._next()

    def _declarations(self) -> None:
        while self._lex in (Lex.CONST, Lex.VAR):
            if self._lex is Lex.CONST:
                self._check(Lex.CONST)
                while self._lex is Lex.NAME:
                    self._const_declaration()
                    self._check(Lex.SEMI)
            else:
                self._check(Lex.VAR)
                while self._lex is Lex.NAME:
                    self._var_declaration()
                    self._check(Lex.SEMI)

    def _const_declaration(self) -> None:
        self._expect(Lex.NAME)
        name = self.scanner.name_value
        self._next()
        self._check(Lex.EQ)
        value = self._const_expression()
        self._declare(const_item(name, ItemType.INTEGER, value))

    def _const_expression(self) -> int:
        sign = 1
        if self._lex is Lex.MINUS:
            self._check(Lex.MINUS)
            sign = -1
        elif self._lex is Lex.PLUS:
            self._check(Lex.PLUS)

        if self._lex is Lex.NAME:
            item = self._find(self.scanner.name_value)
            self._check(Lex.NAME)
            if item.kind is not ItemKind.CONST:
                raise self._context_error("имя модуля")
            return item.value * sign
        if self._lex is Lex.NUM:
            value = self.scanner.num_value * sign
            self._check(Lex.NUM)
            return value
        raise self._syntax_error("имя константы или число")

    def _var_declaration(self) -> None:
        self._var_name()
        while self._lex is Lex.COMMA:
            self._check(Lex.COMMA)
            self._var_name()
        self._check(Lex.COLON)
        self._type()

    def _var_name(self) -> None:
        self._expect(Lex.NAME)
        self._declare(var_item(self.scanner.name_value, ItemType.INTEGER, 0))
        self._next()

    def _type(self) -> None:
        self._expect(Lex.NAME)
        item = self._find(self.scanner.name_value)
        if item.kind is not ItemKind.TYPE:
            raise self._context_error("Необьявленное имя типа")
        self._next()

    # -- statements ------------------------------------------------------

    def _statements(self) -> None:
        self._statement()
        while self._lex is Lex.SEMI:
            self._next()
            self._statement()

    def _statement(self) -> None:
        if self._lex is Lex.NAME:
            self._assignment_or_call()
        elif self._lex is Lex.IF:
            self._if_statement()
        elif self._lex is Lex.WHILE:
            self._while_statement()

    def _assignment_or_call(self) -> None:
        self._expect(Lex.NAME)
        item = self._find(self.scanner.name_value)
        self._next()

        if item.kind is ItemKind.VAR:
            self.generator.gen_address(item)
            self._check(Lex.ASS)
            if item.type is not self._expression():
                raise self._context_error("Неверный тип при присваивании")
            self.generator.emit(Op.SAVE)
            return

        if item.kind not in (ItemKind.PROCEDURE, ItemKind.MODULE):
            raise self._context_error("Ожидается имя перменной или процедуры")

        if self._lex is Lex.DOT:
            if item.kind is not ItemKind.MODULE:
                raise self._context_error("Ожидается имя модуля")
            self._next()
            self._expect(Lex.NAME)
            item = self._find(f"{item.name}.{self.scanner.name_value}")
            if item.kind is not ItemKind.PROCEDURE:
                raise self._context_error("Ожидается процедура")
            self._next()
        elif item.kind is not ItemKind.PROCEDURE:
            raise self._context_error("Ожидается имя процедуры")

        if self._lex is Lex.LPAR:
            self._next()
            self._procedure_arguments(item)
            self._check(Lex.RPAR)
        elif item.name == "Out.Ln":
            self.generator.emit(Op.LN)
        elif item.name != "In.Open":
            raise self._context_error("Ожидается скобка")

    def _if_statement(self) -> None:
        gen = self.generator
        exits: list[int] = []

        self._check(Lex.IF)
        self._conditional_branch(exits)
        while self._lex is Lex.ELSIF:
            self._check(Lex.ELSIF)
            self._conditional_branch(exits)

        if self._lex is Lex.ELSE:
            self._check(Lex.ELSE)
            self._statements()
        self._check(Lex.END)

        for position in exits:
            gen.patch(position, gen.counter)

    def _conditional_branch(self, exits: list[int]) -> None:
        gen = self.generator
        self._check_bool(self._expression())
        false_jump = gen.counter
        gen.gen(0)
        gen.emit(Op.IFZ)

        self._check(Lex.THEN)
        self._statements()

        exits.append(gen.counter)
        gen.gen(0)
        gen.emit(Op.GOTO)
        gen.patch(false_jump, gen.counter)

    def _while_statement(self) -> None:
        gen = self.generator
        start = gen.counter

        self._check(Lex.WHILE)
        self._check_bool(self._expression())
        jump_out = gen.counter
        gen.gen(0)
        gen.emit(Op.IFZ)

        self._check(Lex.DO)
        self._statements()
        self._check(Lex.END)

        gen.gen_goto(start)
        gen.patch(jump_out, gen.counter)

    # -- expressions -----------------------------------------------------

    def _expression(self) -> ItemType | None:
        type_ = self._logical_term()
        while self._lex is Lex.OR:
            self._next()
            other = self._logical_term()
            self._check_bool(type_)
            self._check_bool(other)
            self.generator.emit(Op.OR)
            type_ = ItemType.BOOLEAN
        return type_

    def _logical_term(self) -> ItemType | None:
        type_ = self._logical_factor()
        while self._lex is Lex.AND:
            self._next()
            other = self._logical_factor()
            self._check_bool(type_)
            self._check_bool(other)
            self.generator.emit(Op.AND)
            type_ = ItemType.BOOLEAN
        return type_

    def _logical_factor(self) -> ItemType | None:
        if self._lex is Lex.NOT:
            self._next()
            self._check_bool(self._logical_factor())
            self.generator.emit(Op.NOT)
            return ItemType.BOOLEAN
        return self._comparison()

    def _comparison(self) -> ItemType | None:
        type_ = self._simple_expression()
        if self._lex in _RELATIONS:
            relation = lex_name(self._lex)
            self._next()
            other = self._simple_expression()
            self._check_int(type_)
            self._check_int(other)
            self.generator.gen_comparison(relation)
            type_ = ItemType.BOOLEAN
        return type_

    def _simple_expression(self) -> ItemType | None:
        if self._lex in _ADDITIVE:
            sign = self._lex
            self._next()
            type_ = self._term()
            self._check_int(type_)
            if sign is Lex.MINUS:
                self.generator.emit(Op.NEG)
        else:
            type_ = self._term()
            if self._lex in _ADDITIVE:
                self._check_int(type_)

        while self._lex in _ADDITIVE:
            operation = self._lex
            self._next()
            type_ = self._term()
            self._check_int(type_)
            self.generator.emit(Op.ADD if operation is Lex.PLUS else Op.SUB)
        return type_

    def _term(self) -> ItemType | None:
        type_ = self._factor()
        if self._lex in _MULTIPLICATIVE:
            self._check_int(type_)
        while self._lex in _MULTIPLICATIVE:
            operation = self._lex
            self._next()
            type_ = self._factor()
            self._check_int(type_)
            self.generator.gen_operation(lex_name(operation))
        return type_

    def _factor(self) -> ItemType | None:
        lex = self._lex
        if lex is Lex.NAME:
            item = self._find(self.scanner.name_value)
            if item.kind is ItemKind.CONST:
                self.generator.gen_const(item.value)
                self._next()
                return item.type
            if item.kind is ItemKind.VAR:
                self.generator.gen_var(item)
                self._next()
                return item.type
            if item.kind is ItemKind.FUNCTION:
                self._next()
                self._check(Lex.LPAR)
                self._function_arguments(item)
                self._check(Lex.RPAR)
                return item.type
            raise self._context_error("Ожидается константа, имя или функция")
        if lex is Lex.NUM:
            self.generator.gen(self.scanner.num_value)
            self._next()
            return ItemType.INTEGER
        if lex is Lex.LPAR:
            self._next()
            type_ = self._expression()
            self._check(Lex.RPAR)
            return type_
        raise self._syntax_error("Имя, число или '('")

    # -- standard procedures and functions -------------------------------

    def _variable_argument(self) -> None:
        self._expect(Lex.NAME)
        item = self._find(self.scanner.name_value)
        if item.kind is not ItemKind.VAR:
            raise self._context_error("Ожидается имя переменной")
        self.generator.gen_address(item)
        self._next()

    def _step(self, op: Op) -> None:
        gen = self.generator
        self._variable_argument()
        gen.emit(Op.DUP)
        gen.emit(Op.LOAD)
        if self._lex is Lex.COMMA:
            self._next()
            self._check_int(self._expression())
        else:
            gen.gen(1)
        gen.emit(op)
        gen.emit(Op.SAVE)

    def _procedure_arguments(self, item: Item) -> None:
        gen = self.generator
        name = item.name
        if name == "HALT":
            gen.gen_halt(self._const_expression())
        elif name == "INC":
            self._step(Op.ADD)
        elif name == "DEC":
            self._step(Op.SUB)
        elif name == "In.Open":
            pass
        elif name == "In.Int":
            self._variable_argument()
            gen.emit(Op.IN)
            gen.emit(Op.SAVE)
        elif name == "Out.Int":
            self._check_int(self._expression())
            self._check(Lex.COMMA)
            self._check_int(self._expression())
            gen.emit(Op.OUT)
        elif name == "Out.Ln":
            gen.emit(Op.LN)
        else:
            raise self._context_error("Неизвестная процедура")

    def _function_arguments(self, item: Item) -> None:
        name = item.name
        if name in ("ABS", "ODD"):
            self._check_int(self._expression())
        elif name in ("MIN", "MAX"):
            self._type()
        else:
            raise self._context_error("Неизвестная функция")
        self.generator.gen_func(name)


def compile_source(source: str) -> CodeGenerator:
    """Compile module text and return the generator holding its code."""
    return Parser(Scanner(SourceText(source))).compile()
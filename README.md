# oberonc

`oberonc` compiles programs written in a small subset of Oberon into code
for a simple stack machine, and runs that code. It is a single-pass,
recursive-descent compiler: scanning, name checking, type checking and code
generation all happen while the source is read once.

## The language

A program is one module:

```
MODULE Sum;
IMPORT In, Out;
CONST Limit = 10;
VAR i, s: INTEGER;
BEGIN
  i := 1; s := 0;
  WHILE i <= Limit DO
    s := s + i;
    INC(i)
  END;
  Out.Int(s, 0); Out.Ln
END Sum.
```

Recognised:

- `IMPORT` of the modules `In` and `Out` only.
- `CONST` declarations whose values are numbers or other constants, with an
  optional sign.
- `VAR` declarations of type `INTEGER`.
- Assignment, `IF ... THEN ... ELSIF ... ELSE ... END` and
  `WHILE ... DO ... END`.
- Integer arithmetic `+ - * DIV MOD` (division truncates toward zero, results
  wrap to 32 bits), comparisons `= # < <= > >=`, and the boolean operators
  `&` (or `AND`), `OR` and `~`.
- Standard functions `ABS`, `MIN(INTEGER)`, `MAX(INTEGER)`, `ODD`, and
  standard procedures `HALT`, `INC`, `DEC`, `In.Open`, `In.Int`, `Out.Int`,
  `Out.Ln`. `In.Open` generates no code.
- Nested comments `(* ... *)`.

Names are letters followed by letters or the digits `1` to `8`. Reserved
words of full Oberon that the subset does not support (`ARRAY`, `PROCEDURE`,
`REPEAT` and so on) are still reserved and cannot be used as names.

## Using it from Python

```python
from oberonc.parser import compile_source

generator = compile_source(program_text)
print(generator.listing(), end="")   # numbered listing of the generated code
exit_code = generator.run()          # runs it on the stack machine
```

`compile_source` returns the `CodeGenerator` holding the compiled code. Its
`listing()` shows each memory cell from address 0 up to the current address,
commands by mnemonic. `run()` executes the code, writing program output to
standard output, then reports how many instructions ran and, if the stack is
not empty, the value left on top as the return code; that value is also
returned (`None` for an empty stack). `In.Int` prompts with `? ` and reads
whitespace-separated integers from standard input.

For more control, build the pieces yourself:

```python
import io
import sys

from oberonc.codegen import CodeGenerator
from oberonc.driver import SourceText
from oberonc.parser import Parser
from oberonc.scanner import Scanner
from oberonc.vm import Machine

machine = Machine(input=io.StringIO("7\n"), output=io.StringIO())
parser = Parser(Scanner(SourceText(program_text, echo=sys.stdout)), CodeGenerator(machine))
parser.compile()
print(parser.warnings)   # declared but unused variables
parser.generator.run()
print(machine.output.getvalue())
```

`SourceText` can also read a file with `SourceText.from_file(path)`; when
`echo` is set, every character read is written to it.

Modules:

- `oberonc.driver` — `SourceText`, character-by-character reading.
- `oberonc.scanner` — `Scanner`, the `Lex` token kinds and `lex_name`.
- `oberonc.table` — `NameTable` with nested scopes and the `Item` entries it
  holds.
- `oberonc.codegen` — `CodeGenerator`, which emits commands and patches
  forward jumps.
- `oberonc.vm` — `Machine`, the stack machine, with its `Op` command set and
  `op_name`.
- `oberonc.parser` — `Parser` and `compile_source`.

## Errors

Problems in the source are raised as exceptions, all derived from
`oberonc.errors.CompileError`; the messages are in Russian:

- `LexError` — a character or number the scanner cannot accept, or an
  unterminated comment;
- `ParseError` — a token other than the expected one (its `expected`
  attribute names what was expected);
- `ContextError` — an undeclared or redeclared name, a wrong kind of name, or
  a type mismatch.

Each error carries the column where it happened in `position`;
`caret_line()` returns a line with a `^` under that column, ready to print
below the offending source line. A file that cannot be opened raises
`CompileError` from `SourceText.from_file`.

## What it does not do

There is no command-line program; the compiler is used from Python as shown
above. Compiled code is kept only in memory and is not written to a file.

## Tests

The tests use pytest; install the `test` extra to get it.
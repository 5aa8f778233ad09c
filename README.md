# bcplkit

This is a library of building blocks for a compiler for the BCPL language. It provides token types, a syntax tree, scoped label management, a page-aligned code buffer, the BCPL runtime library routines, and tree-rewriting optimisation passes.

## Modules

### `bcplkit.tokens`

- `TokenType` is an enum of every BCPL token kind: keywords (`KW_LET`, `KW_VALOF`, ...), integer operators (`OP_PLUS`, `OP_LSHIFT`, ...), floating-point operators (`OP_FLOAT_PLUS` for `+.`, ...), literals and delimiters.
  - `is_keyword` reports whether a kind is a keyword.
  - `spelling` gives the source text of a keyword, operator or delimiter.
  - `TokenType.from_keyword("WHILE")` looks up a keyword by its spelling.
- `Token` is a frozen dataclass with the fields `type`, `text`, `int_val`, `float_val`, `line` and `col`.

### `bcplkit.nodes`

This module holds the syntax tree as dataclasses.

- Expressions: `NumberLiteral`, `FloatLiteral`, `StringLiteral`, `CharLiteral`, `VariableAccess`, `UnaryOp`, `BinaryOp`, `FunctionCall`, `ConditionalExpression`, `Valof`, `VectorConstructor`, `VectorAccess`.
- Statements: `Assignment`, `RoutineCall`, `CompoundStatement`, `IfStatement`, `TestStatement`, `WhileStatement`, `ForStatement`, `GotoStatement`, `LabeledStatement`, `ReturnStatement`, `FinishStatement`, `ResultisStatement`, `RepeatStatement` (with `RepeatLoopType`), `SwitchonStatement` (with `SwitchCase`), `EndcaseStatement`, `DeclarationStatement`.
- Declarations: `LetDeclaration` (with `VarInit`), `FunctionDeclaration`, `GlobalDeclaration`, `ManifestDeclaration`, `GetDirective`.
- The top level is `Program`.

Every node has `clone()`, which returns a deep copy.

### `bcplkit.labels`

`LabelManager` generates unique labels of the form `prefix_N`. It keeps a stack of scopes (`ScopeType.FUNCTION`, `VALOF`, `LOOP`, `SWITCHON`, `COMPOUND`), and each scope gets its own end, RESULTIS, repeat or ENDCASE labels.

- `define_label` records a global or scope-local label position.
- `request_label_fixup` and `take_fixups` queue `Fixup` records and then hand them over.
- `current_resultis_label`, `current_repeat_label`, `current_endcase_label`, `current_end_label` and `current_return_label` find the label for the innermost matching scope.
- `label_position` returns `None` for an unknown label. `label_address` raises instead.

Misuse raises `LabelError`. This covers popping an empty stack, redefining a label, and asking for a label outside the matching scope. The manager is guarded by a lock.

### `bcplkit.jit_memory`

`JITMemoryManager` owns one anonymous memory region whose size is rounded up to the page size. You can also use it as a context manager.

- The region is writable after `allocate`.
- `make_executable` puts it in the executable state, and `write` is then refused. `make_writable` switches it back.
- `read` and `write` check their bounds.
- `page_size()` and `round_to_page_size(size)` are static helpers.

Errors raise `JITMemoryError`. These include allocating twice, allocating zero bytes, using the manager before allocation, and going out of range.

The executable state is tracked by the manager only. The package never runs the bytes stored in the region.

### `bcplkit.runtime`

`JitRuntime(stdin=None, stdout=None)` holds a symbol table and the current input and output streams.

- Symbol table: `register_symbol`, `symbol_address` (raises `SymbolNotFoundError`), and `symbols()`, which returns a read-only view.
- Streams:
  - `findinput` and `findoutput` open files and return `None` on failure.
  - `selectinput` and `selectoutput` switch the current streams.
  - `rdch` returns `-1` at end of input.
  - `wrch`, `writen` and `newline` write output.
  - `writes` writes character codes up to the first `0`.
  - `endread` and `endwrite` close the current stream and fall back to the standard one.
- `finish()` and `stop(n)` raise `FinishRequested`, which is a `SystemExit`, with the status.
- `close()` closes files registered under symbols named `file_...`. It also runs on leaving a `with` block.

The module-level helpers are:

- `vec(n)`: a zero-filled list of `n` words.
- `unpack_string(text)`: the UTF-8 bytes of `text`, followed by `0`.
- `to_float(n)`
- `trunc(f)`: truncates toward zero.

### `bcplkit.optimizer`

`Optimizer(manifests=None).visit(node)` returns an optimised copy of any node and never modifies its input. It does the following:

- Substitutes manifest constants.
- Folds integer arithmetic and comparisons. Arithmetic wraps to a signed 64-bit word, division truncates, and true is `-1`. It also folds floating-point arithmetic.
- Rewrites `x*2` as `x<<1` and `x/2` as `x>>1`.
- Removes identities such as `+0` and `*1`, and rewrites `x*0` as `0`.
- Resolves `IF`, `TEST` and conditional expressions whose condition is constant.
- Runs `FOR` loops through loop hoisting.
- Drops global and manifest declarations and `GET` directives, for which `visit` returns `None`.

### `bcplkit.loop_optimizer`

`process(loop, optimizer)` optimises a `ForStatement` and hoists loop-invariant expressions out of its body into `LET _licm_temp_N = ...` declarations placed before the loop.

- An expression counts as invariant if it uses no variable that is assigned in the loop, including the loop variable.
- Calls to `WRITES`, `WRITEN`, `NEWLINE`, `FINISH` and `READN` are never hoisted.

### `bcplkit.licm`

`LoopInvariantCodeMotionPass(manifests).apply(program)` copies a program unchanged, except that every `FOR` loop goes through `loop_optimizer.process`. Global and manifest declarations and `GET` directives are dropped.

### `bcplkit.inlining`

`FunctionInliningPass().apply(program)` chooses inlinable routines. A routine qualifies if it has a statement body of at most `MAX_BODY_NODES` (20) nodes and does not call itself.

It replaces matching calls with `VALOF $( LET params = args; body $)`, but only where the argument count matches. Only a call that forms a function's expression body is rewritten. Calls nested elsewhere are copied unchanged.

## What this package does not do

The package does not scan or parse BCPL source. `bcplkit.tokens` only defines the token kinds, so syntax trees must be built directly from `bcplkit.nodes`.

It also does not:

- generate machine code;
- execute code;
- provide a command-line compiler.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
from bcplkit.nodes import BinaryOp, NumberLiteral, VariableAccess
from bcplkit.optimizer import Optimizer
from bcplkit.tokens import TokenType

opt = Optimizer({"SIZE": 10})
expr = BinaryOp(TokenType.OP_MULTIPLY, VariableAccess("SIZE"), NumberLiteral(4))
print(opt.visit(expr))   # NumberLiteral(value=40)
```

Using the runtime with in-memory streams:

```python
import io
from bcplkit.runtime import JitRuntime

out = io.StringIO()
rt = JitRuntime(stdin=io.StringIO(""), stdout=out)
rt.writen(42)
rt.newline()
print(repr(out.getvalue()))    # '42\n'
```
"""Expression compiler: user text -> AST -> numeric function of ``x``.

The accepted grammar is deliberately small::

    expr    := term (("+" | "-") term)*
    term    := unary (("*" | "/") unary)*
    unary   := ("+" | "-") unary | power
    power   := primary ("^" unary)?
    primary := NUMBER | "x" | CONSTANT | FUNC "(" expr ")" | "(" expr ")"

Power is right associative and binds tighter than unary minus, so ``-x^2`` is
``-(x^2)`` and ``2^3^2`` is ``2^(3^2)``. Evaluation runs on float64 numpy
arrays with floating point warnings silenced: ``1/0`` yields ``inf`` and
``sqrt(-1)`` yields ``nan`` instead of raising. Callers decide what a
non-finite value means. Nesting (parentheses, calls, signs, powers) is capped
at ``MAX_NESTING`` levels; longer flat chains such as ``x+x+...+x`` are fine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
import math
import re
from typing import Callable, Literal, Protocol

import numpy as np

from calcpal_graph.errors import CompileError


DegreeScope = Literal["input", "trig"]
SampleStatus = Literal["OK", "INVALID"]

VARIABLE = "x"
DEG_TO_RAD = math.pi / 180.0
# Parentheses, calls, unary signs and powers each add a level.
MAX_NESTING = 100

FUNCTIONS: dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "sin": np.sin,
    "cos": np.cos,
    "tan": np.tan,
    "asin": np.arcsin,
    "acos": np.arccos,
    "atan": np.arctan,
    "sinh": np.sinh,
    "cosh": np.cosh,
    "tanh": np.tanh,
    "log": np.log,
    "ln": np.log,
    "log10": np.log10,
    "exp": np.exp,
    "sqrt": np.sqrt,
    "cbrt": np.cbrt,
    "abs": np.abs,
    "floor": np.floor,
    "ceil": np.ceil,
    "sign": np.sign,
}
CONSTANTS: dict[str, float] = {"pi": math.pi, "e": math.e}
TRIG_FUNCTIONS = frozenset({"sin", "cos", "tan"})

_SUPERSCRIPT_DIGITS = "⁰¹²³⁴⁵⁶⁷⁸⁹"
_SUPERSCRIPT_TABLE = str.maketrans(_SUPERSCRIPT_DIGITS, "0123456789")
_SUPERSCRIPT_RUN = re.compile(f"[{_SUPERSCRIPT_DIGITS}]+")
_GLYPHS = (("×", "*"), ("÷", "/"), ("−", "-"), ("π", "pi"))
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z_0-9]*$")

_TOKEN_RE = re.compile(
    r"""
    (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
    |(?P<name>[A-Za-z_][A-Za-z_0-9]*)
    |(?P<op>[-+*/^])
    |(?P<lparen>\()
    |(?P<rparen>\))
    """,
    re.VERBOSE,
)


def normalize_expression(text: str) -> str:
    """Rewrite caret/superscript powers and keypad glyphs into parser syntax."""
    out = text.replace("**", "^")
    for glyph, replacement in _GLYPHS:
        out = out.replace(glyph, replacement)
    return _SUPERSCRIPT_RUN.sub(lambda m: "^" + m.group(0).translate(_SUPERSCRIPT_TABLE), out)


def register_function(name: str, func: Callable[[np.ndarray], np.ndarray]) -> None:
    if not _IDENTIFIER.match(name):
        raise ValueError(f"function name must be an identifier, got `{name}`")
    if name == VARIABLE or name in CONSTANTS:
        raise ValueError(f"`{name}` is reserved")
    if not callable(func):
        raise ValueError("func must be callable")
    FUNCTIONS[name] = func
    _compile_cached.cache_clear()


class Node(Protocol):
    """One AST node; ``apply`` combines already-evaluated child values."""

    @property
    def children(self) -> tuple["Node", ...]:
        ...

    def apply(self, x: np.ndarray, args: list[np.ndarray]) -> np.ndarray:
        ...


@dataclass(frozen=True)
class Number:
    value: float

    @property
    def children(self) -> tuple[Node, ...]:
        return ()

    def apply(self, x: np.ndarray, args: list[np.ndarray]) -> np.ndarray:
        return np.full(np.shape(x), self.value, dtype=np.float64)


@dataclass(frozen=True)
class Variable:
    name: str = VARIABLE

    @property
    def children(self) -> tuple[Node, ...]:
        return ()

    def apply(self, x: np.ndarray, args: list[np.ndarray]) -> np.ndarray:
        return x


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: Node

    @property
    def children(self) -> tuple[Node, ...]:
        return (self.operand,)

    def apply(self, x: np.ndarray, args: list[np.ndarray]) -> np.ndarray:
        (value,) = args
        return np.negative(value) if self.op == "-" else value


_BINARY_OPS: dict[str, Callable[[np.ndarray, np.ndarray], np.ndarray]] = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.true_divide,
    "^": np.power,
}


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: Node
    right: Node

    @property
    def children(self) -> tuple[Node, ...]:
        return (self.left, self.right)

    def apply(self, x: np.ndarray, args: list[np.ndarray]) -> np.ndarray:
        left, right = args
        return _BINARY_OPS[self.op](left, right)


@dataclass(frozen=True)
class Call:
    name: str
    argument: Node
    func: Callable[[np.ndarray], np.ndarray] = field(compare=False, repr=False)
    # Degree->radian factor applied to the argument; 1.0 unless trig-scoped degree mode.
    scale: float = 1.0

    @property
    def children(self) -> tuple[Node, ...]:
        return (self.argument,)

    def apply(self, x: np.ndarray, args: list[np.ndarray]) -> np.ndarray:
        (arg,) = args
        if self.scale != 1.0:
            arg = arg * self.scale
        return self.func(arg)


def postorder(tree: Node) -> tuple[Node, ...]:
    """Flatten ``tree`` so every node comes after its children.

    Walks with an explicit stack, so left-deep chains such as ``x+x+...+x``
    are not bounded by the interpreter recursion limit.
    """
    out: list[Node] = []
    stack: list[tuple[Node, bool]] = [(tree, False)]
    while stack:
        node, expanded = stack.pop()
        children = node.children
        if expanded or not children:
            out.append(node)
            continue
        stack.append((node, True))
        for child in reversed(children):
            stack.append((child, False))
    return tuple(out)


def run_program(program: tuple[Node, ...], x: np.ndarray) -> np.ndarray:
    values: list[np.ndarray] = []
    for node in program:
        arity = len(node.children)
        args = values[len(values) - arity :] if arity else []
        if arity:
            del values[len(values) - arity :]
        values.append(node.apply(x, args))
    return values[-1]


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    position: int


def tokenize(text: str) -> list[Token]:
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        ch = text[pos]
        if ch.isspace():
            pos += 1
            continue
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise CompileError(f"unexpected character `{ch}`", expression=text, position=pos)
        kind = match.lastgroup
        assert kind is not None
        tokens.append(Token(kind=kind, text=match.group(kind), position=pos))
        pos = match.end()
    tokens.append(Token(kind="end", text="", position=len(text)))
    return tokens


class _Parser:
    def __init__(self, text: str, *, trig_scale: float) -> None:
        self._text = text
        self._tokens = tokenize(text)
        self._index = 0
        self._trig_scale = trig_scale
        self._depth = 0

    def parse(self) -> Node:
        if self._peek().kind == "end":
            raise CompileError("expression is empty", expression=self._text, position=0)
        node = self._expr()
        token = self._peek()
        if token.kind == "rparen":
            raise CompileError("unbalanced parenthesis `)`", expression=self._text, position=token.position)
        if token.kind != "end":
            raise CompileError(f"unexpected `{token.text}`", expression=self._text, position=token.position)
        return node

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        self._index += 1
        return token

    def _accept_op(self, *ops: str) -> str | None:
        token = self._peek()
        if token.kind == "op" and token.text in ops:
            self._index += 1
            return token.text
        return None

    def _expr(self) -> Node:
        node = self._term()
        while (op := self._accept_op("+", "-")) is not None:
            node = BinaryOp(op, node, self._term())
        return node

    def _term(self) -> Node:
        node = self._unary()
        while (op := self._accept_op("*", "/")) is not None:
            node = BinaryOp(op, node, self._unary())
        return node

    def _enter(self, token: Token) -> None:
        self._depth += 1
        if self._depth > MAX_NESTING:
            raise CompileError(
                f"expression nested too deeply (more than {MAX_NESTING} levels)",
                expression=self._text,
                position=token.position,
            )

    def _unary(self) -> Node:
        token = self._peek()
        op = self._accept_op("+", "-")
        if op is not None:
            self._enter(token)
            node = UnaryOp(op, self._unary())
            self._depth -= 1
            return node
        return self._power()

    def _power(self) -> Node:
        base = self._primary()
        token = self._peek()
        if self._accept_op("^") is not None:
            self._enter(token)
            node = BinaryOp("^", base, self._unary())
            self._depth -= 1
            return node
        return base

    def _primary(self) -> Node:
        token = self._advance()
        if token.kind == "number":
            return Number(float(token.text))
        if token.kind == "lparen":
            self._enter(token)
            inner = self._expr()
            self._expect_rparen(token)
            self._depth -= 1
            return inner
        if token.kind == "name":
            return self._name(token)
        if token.kind == "end":
            raise CompileError("unexpected end of expression", expression=self._text, position=token.position)
        raise CompileError(f"unexpected `{token.text}`", expression=self._text, position=token.position)

    def _name(self, token: Token) -> Node:
        name = token.text
        if name == VARIABLE:
            return Variable()
        if name in CONSTANTS:
            return Number(CONSTANTS[name])
        if name in FUNCTIONS:
            opener = self._advance()
            if opener.kind != "lparen":
                raise CompileError(
                    f"function `{name}` must be followed by `(`",
                    expression=self._text,
                    position=opener.position,
                )
            self._enter(opener)
            argument = self._expr()
            self._expect_rparen(opener)
            self._depth -= 1
            scale = self._trig_scale if name in TRIG_FUNCTIONS else 1.0
            return Call(name=name, argument=argument, func=FUNCTIONS[name], scale=scale)
        raise CompileError(f"unknown identifier `{name}`", expression=self._text, position=token.position)

    def _expect_rparen(self, opener: Token) -> None:
        token = self._advance()
        if token.kind != "rparen":
            raise CompileError(
                "unbalanced parenthesis: missing `)`",
                expression=self._text,
                position=opener.position,
            )


@dataclass(frozen=True)
class Sample:
    x: float
    y: float | None
    status: SampleStatus

    @property
    def valid(self) -> bool:
        return self.status == "OK"


@dataclass(frozen=True)
class CompiledFunction:
    """Pure numeric function of ``x`` bound to one angle mode."""

    expression: str
    normalized: str
    tree: Node = field(repr=False, compare=False)
    degree_mode: bool = False
    degree_scope: DegreeScope = "input"
    program: tuple[Node, ...] = field(default=(), repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.program:
            object.__setattr__(self, "program", postorder(self.tree))

    def evaluate(self, x: np.ndarray | float) -> np.ndarray:
        xs = np.asarray(x, dtype=np.float64)
        with np.errstate(all="ignore"):
            if self.degree_mode and self.degree_scope == "input":
                xs = xs * DEG_TO_RAD
            ys = run_program(self.program, xs)
        return np.asarray(ys, dtype=np.float64)

    def __call__(self, x: float) -> float:
        return float(self.evaluate(float(x)))

    def sample(self, x: float) -> Sample:
        try:
            y = self(x)
        except (ArithmeticError, ValueError):
            return Sample(x=float(x), y=None, status="INVALID")
        if not math.isfinite(y):
            return Sample(x=float(x), y=None, status="INVALID")
        return Sample(x=float(x), y=y, status="OK")


def compile_expression(
    text: str,
    degree_mode: bool = False,
    *,
    degree_scope: DegreeScope = "input",
) -> CompiledFunction:
    if not isinstance(text, str):
        raise CompileError(f"expression must be a string, got {type(text).__name__}")
    if degree_scope not in ("input", "trig"):
        raise ValueError(f"degree_scope must be 'input' or 'trig', got {degree_scope!r}")
    return _compile_cached(text, bool(degree_mode), degree_scope)


@lru_cache(maxsize=256)
def _compile_cached(text: str, degree_mode: bool, degree_scope: DegreeScope) -> CompiledFunction:
    normalized = normalize_expression(text)
    trig_scale = DEG_TO_RAD if degree_mode and degree_scope == "trig" else 1.0
    try:
        tree = _Parser(normalized, trig_scale=trig_scale).parse()
    except RecursionError as exc:
        raise CompileError("expression nested too deeply", expression=text) from exc
    return CompiledFunction(
        expression=text,
        normalized=normalized,
        tree=tree,
        degree_mode=degree_mode,
        degree_scope=degree_scope,
    )

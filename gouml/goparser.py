"""A parser for the declarations of Go source files.

It reads the package clause, the imports, type declarations and function
declarations with their signatures. Function bodies and ``var``/``const``
declarations are skipped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

__all__ = [
    "GoSyntaxError",
    "Ident",
    "StarExpr",
    "ArrayType",
    "MapType",
    "ChanType",
    "FuncType",
    "InterfaceType",
    "StructType",
    "SelectorExpr",
    "Ellipsis",
    "ParenExpr",
    "Field",
    "TypeSpec",
    "ImportSpec",
    "FuncDecl",
    "GoFile",
    "parse_source",
    "parse_file",
]


class GoSyntaxError(ValueError):
    """Raised when Go source cannot be parsed."""

    def __init__(self, message: str, filename: str = "<source>", line: int = 0) -> None:
        super().__init__(f"{filename}:{line}: {message}")
        self.message = message
        self.filename = filename
        self.line = line


@dataclass(frozen=True)
class Ident:
    name: str


@dataclass(frozen=True)
class StarExpr:
    x: "Expr"


@dataclass(frozen=True)
class ArrayType:
    elt: "Expr"
    length: Optional[str] = None


@dataclass(frozen=True)
class MapType:
    key: "Expr"
    value: "Expr"


@dataclass(frozen=True)
class ChanType:
    value: "Expr"
    direction: str = "both"


@dataclass(frozen=True)
class Field:
    names: tuple[str, ...]
    type: "Expr"
    tag: Optional[str] = None


@dataclass(frozen=True)
class FuncType:
    params: tuple[Field, ...] = ()
    results: tuple[Field, ...] = ()


@dataclass(frozen=True)
class InterfaceType:
    methods: tuple[Field, ...] = ()


@dataclass(frozen=True)
class StructType:
    fields: tuple[Field, ...] = ()


@dataclass(frozen=True)
class SelectorExpr:
    x: "Expr"
    sel: Ident


@dataclass(frozen=True)
class Ellipsis:
    elt: "Expr"


@dataclass(frozen=True)
class ParenExpr:
    x: "Expr"


Expr = Union[
    Ident,
    StarExpr,
    ArrayType,
    MapType,
    ChanType,
    FuncType,
    InterfaceType,
    StructType,
    SelectorExpr,
    Ellipsis,
    ParenExpr,
]


@dataclass(frozen=True)
class TypeSpec:
    name: str
    type: Expr
    is_alias: bool = False


@dataclass(frozen=True)
class ImportSpec:
    name: Optional[str]
    path: str


@dataclass(frozen=True)
class FuncDecl:
    name: str
    type: FuncType
    recv: Optional[tuple[Field, ...]] = None


@dataclass(frozen=True)
class GoFile:
    """The declarations of one Go source file."""

    name: str
    imports: tuple[ImportSpec, ...]
    decls: tuple[Union[TypeSpec, FuncDecl], ...]

    @property
    def type_specs(self) -> tuple[TypeSpec, ...]:
        return tuple(d for d in self.decls if isinstance(d, TypeSpec))

    @property
    def func_decls(self) -> tuple[FuncDecl, ...]:
        return tuple(d for d in self.decls if isinstance(d, FuncDecl))


_KEYWORDS = frozenset(
    "break case chan const continue default defer else fallthrough for func go "
    "goto if import interface map package range return select struct switch "
    "type var".split()
)

_TOKEN_RE = re.compile(
    r"""
    (?P<newline>\n)
    |(?P<space>[ \t\r\f\ufeff]+)
    |(?P<line_comment>//[^\n]*)
    |(?P<block_comment>/\*.*?\*/)
    |(?P<raw_string>`[^`]*`)
    |(?P<string>"(?:[^"\\\n]|\\.)*")
    |(?P<char>'(?:[^'\\\n]|\\.)*')
    |(?P<number>
        0[xXbBoO][0-9a-fA-F_]*(?:\.[0-9a-fA-F_]*)?(?:[pP][+-]?[0-9_]+)?i?
        |[0-9][0-9_]*(?:\.[0-9_]*)?(?:[eE][+-]?[0-9_]+)?i?
        |\.[0-9][0-9_]*(?:[eE][+-]?[0-9_]+)?i?
    )
    |(?P<ident>[^\W\d]\w*)
    |(?P<op>
        <<=|>>=|&\^=|\.\.\.|&&|\|\||<-|\+\+|--|==|!=|<=|>=|:=
        |\+=|-=|\*=|/=|%=|&=|\|=|\^=|<<|>>|&\^
        |[-+*/%&|^<>=!()\[\]{},;.:~]
    )
    """,
    re.VERBOSE | re.DOTALL,
)

_SEMI_KEYWORDS = frozenset({"break", "continue", "fallthrough", "return"})
_SEMI_OPS = frozenset({"++", "--", ")", "]", "}"})
_OPENERS = {"(": ")", "[": "]", "{": "}"}
_TYPE_START_OPS = frozenset({"*", "[", "(", "<-"})
_TYPE_START_KEYWORDS = frozenset({"map", "chan", "func", "struct", "interface"})


@dataclass(frozen=True)
class _Token:
    kind: str
    value: str
    line: int


def _inserts_semicolon(token: _Token) -> bool:
    if token.kind in ("ident", "number", "string", "char"):
        return True
    if token.kind == "keyword":
        return token.value in _SEMI_KEYWORDS
    return token.kind == "op" and token.value in _SEMI_OPS


def _tokenize(text: str, filename: str) -> list[_Token]:
    tokens: list[_Token] = []
    line = 1
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise GoSyntaxError(f"unexpected character {text[pos]!r}", filename, line)
        kind = match.lastgroup or ""
        value = match.group()
        newlines = value.count("\n")
        if kind == "newline" or (kind == "block_comment" and newlines):
            if tokens and _inserts_semicolon(tokens[-1]):
                tokens.append(_Token("op", ";", line))
        elif kind not in ("space", "line_comment", "block_comment"):
            if kind == "ident" and value in _KEYWORDS:
                kind = "keyword"
            elif kind == "raw_string":
                kind = "string"
            tokens.append(_Token(kind, value, line))
        line += newlines
        pos = match.end()
    if tokens and _inserts_semicolon(tokens[-1]):
        tokens.append(_Token("op", ";", line))
    tokens.append(_Token("eof", "", line))
    return tokens


def _is(token: _Token, value: str) -> bool:
    return token.kind in ("op", "keyword") and token.value == value


class _Parser:
    def __init__(self, text: str, filename: str) -> None:
        self.filename = filename
        self.tokens = _tokenize(text, filename)
        self.pos = 0

    # token access

    def _peek(self, offset: int = 0) -> _Token:
        index = self.pos + offset
        return self.tokens[index] if index < len(self.tokens) else self.tokens[-1]

    def _advance(self) -> _Token:
        token = self._peek()
        if token.kind != "eof":
            self.pos += 1
        return token

    def _at(self, value: str) -> bool:
        return _is(self._peek(), value)

    def _at_eof(self) -> bool:
        return self._peek().kind == "eof"

    def _error(self, expected: str) -> GoSyntaxError:
        token = self._peek()
        found = token.value if token.kind != "eof" else "EOF"
        return GoSyntaxError(f"expected {expected}, found {found!r}", self.filename, token.line)

    def _expect(self, value: str) -> _Token:
        if not self._at(value):
            raise self._error(repr(value))
        return self._advance()

    def _ident(self) -> str:
        if self._peek().kind != "ident":
            raise self._error("identifier")
        return self._advance().value

    def _expect_semi(self) -> None:
        if self._at(";"):
            self._advance()
        elif not (self._at_eof() or self._at(")") or self._at("}")):
            raise self._error("';' or newline")

    def _skip_balanced(self) -> None:
        stack = [_OPENERS[self._advance().value]]
        while stack:
            token = self._advance()
            if token.kind == "eof":
                raise GoSyntaxError(f"expected {stack[-1]!r}, found 'EOF'", self.filename, token.line)
            if token.kind == "op":
                if token.value in _OPENERS:
                    stack.append(_OPENERS[token.value])
                elif token.value == stack[-1]:
                    stack.pop()

    # file level

    def parse(self) -> GoFile:
        while self._at(";"):
            self._advance()
        self._expect("package")
        name = self._ident()
        self._expect_semi()

        imports: list[ImportSpec] = []
        decls: list[Union[TypeSpec, FuncDecl]] = []
        while not self._at_eof():
            if self._at(";"):
                self._advance()
            elif self._at("import"):
                imports.extend(self._grouped(self._import_spec))
            elif self._at("type"):
                decls.extend(self._grouped(self._type_spec))
            elif self._at("func"):
                decls.append(self._func_decl())
            elif self._at("var") or self._at("const"):
                self._skip_value_decl()
            else:
                raise self._error("declaration")
        return GoFile(name=name, imports=tuple(imports), decls=tuple(decls))

    def _grouped(self, parse_spec):
        self._advance()
        if not self._at("("):
            spec = parse_spec()
            self._expect_semi()
            return [spec]
        self._advance()
        specs = []
        while not self._at(")"):
            if self._at(";"):
                self._advance()
                continue
            specs.append(parse_spec())
            if not self._at(")"):
                self._expect(";")
        self._advance()
        self._expect_semi()
        return specs

    def _import_spec(self) -> ImportSpec:
        name: Optional[str] = None
        if self._at("."):
            self._advance()
            name = "."
        elif self._peek().kind == "ident":
            name = self._advance().value
        if self._peek().kind != "string":
            raise self._error("import path")
        raw = self._advance().value
        return ImportSpec(name=name, path=raw.removeprefix('"').removesuffix('"'))

    def _type_spec(self) -> TypeSpec:
        name = self._ident()
        is_alias = False
        if self._at("="):
            self._advance()
            is_alias = True
        return TypeSpec(name=name, type=self._type(), is_alias=is_alias)

    def _func_decl(self) -> FuncDecl:
        self._advance()
        recv = self._parameters() if self._at("(") else None
        name = self._ident()
        if self._at("["):
            self._skip_balanced()
        func_type = self._signature()
        if self._at("{"):
            self._skip_balanced()
        self._expect_semi()
        return FuncDecl(name=name, type=func_type, recv=recv)

    def _skip_value_decl(self) -> None:
        self._advance()
        if self._at("("):
            self._skip_balanced()
        else:
            while not (self._at(";") or self._at_eof()):
                token = self._peek()
                if token.kind == "op" and token.value in _OPENERS:
                    self._skip_balanced()
                else:
                    self._advance()
        self._expect_semi()

    # types

    def _starts_type(self) -> bool:
        token = self._peek()
        if token.kind == "ident":
            return True
        if token.kind == "op":
            return token.value in _TYPE_START_OPS
        return token.kind == "keyword" and token.value in _TYPE_START_KEYWORDS

    def _type_name(self) -> Expr:
        name = Ident(self._ident())
        if self._at("."):
            self._advance()
            return SelectorExpr(x=name, sel=Ident(self._ident()))
        return name

    def _type(self) -> Expr:
        token = self._peek()
        if token.kind == "ident":
            return self._type_name()
        if token.kind not in ("op", "keyword"):
            raise self._error("type")
        value = token.value
        if value == "*":
            self._advance()
            return StarExpr(self._type())
        if value == "(":
            self._advance()
            inner = self._type()
            self._expect(")")
            return ParenExpr(inner)
        if value == "[":
            return self._array_type()
        if value == "map":
            self._advance()
            self._expect("[")
            key = self._type()
            self._expect("]")
            return MapType(key=key, value=self._type())
        if value == "chan":
            self._advance()
            direction = "both"
            if self._at("<-"):
                self._advance()
                direction = "send"
            return ChanType(value=self._type(), direction=direction)
        if value == "<-":
            self._advance()
            self._expect("chan")
            return ChanType(value=self._type(), direction="recv")
        if value == "func":
            self._advance()
            return self._signature()
        if value == "struct":
            self._advance()
            return self._struct_type()
        if value == "interface":
            self._advance()
            return self._interface_type()
        raise self._error("type")

    def _array_type(self) -> ArrayType:
        self._advance()
        if self._at("]"):
            self._advance()
            return ArrayType(elt=self._type())
        parts: list[str] = []
        depth = 0
        while depth or not self._at("]"):
            token = self._advance()
            if token.kind == "eof":
                raise self._error("']'")
            if token.kind == "op" and token.value in "([{":
                depth += 1
            elif token.kind == "op" and token.value in ")]}":
                depth -= 1
            parts.append(token.value)
        self._advance()
        return ArrayType(elt=self._type(), length="".join(parts))

    def _signature(self) -> FuncType:
        params = self._parameters()
        results: tuple[Field, ...] = ()
        if self._at("("):
            results = self._parameters()
        elif self._starts_type():
            results = (Field((), self._type()),)
        return FuncType(params=params, results=results)

    def _param_type(self) -> Expr:
        if self._at("..."):
            self._advance()
            return Ellipsis(self._type())
        return self._type()

    def _parameters(self) -> tuple[Field, ...]:
        start = self._expect("(")
        items: list[tuple[Optional[str], Expr]] = []
        while not self._at(")"):
            nxt = self._peek(1)
            named = self._peek().kind == "ident" and not (
                _is(nxt, ",") or _is(nxt, ")") or _is(nxt, ".")
            )
            if named:
                name = self._advance().value
                items.append((name, self._param_type()))
            else:
                items.append((None, self._param_type()))
            if not self._at(","):
                break
            self._advance()
        self._expect(")")
        return self._group_parameters(items, start.line)

    def _group_parameters(
        self, items: list[tuple[Optional[str], Expr]], line: int
    ) -> tuple[Field, ...]:
        if all(name is None for name, _ in items):
            return tuple(Field((), typ) for _, typ in items)
        fields: list[Field] = []
        pending: list[str] = []
        for name, typ in items:
            if name is None:
                if not isinstance(typ, Ident):
                    raise GoSyntaxError("mixed named and unnamed parameters", self.filename, line)
                pending.append(typ.name)
            else:
                fields.append(Field((*pending, name), typ))
                pending = []
        if pending:
            raise GoSyntaxError("mixed named and unnamed parameters", self.filename, line)
        return tuple(fields)

    def _struct_type(self) -> StructType:
        self._expect("{")
        fields: list[Field] = []
        while not self._at("}"):
            if self._at(";"):
                self._advance()
                continue
            fields.append(self._field_decl())
            if not self._at("}"):
                self._expect(";")
        self._advance()
        return StructType(tuple(fields))

    def _field_decl(self) -> Field:
        token, nxt = self._peek(), self._peek(1)
        names: list[str] = []
        if _is(token, "*"):
            self._advance()
            typ: Expr = StarExpr(self._type_name())
        elif token.kind == "ident" and (
            _is(nxt, ".") or _is(nxt, ";") or _is(nxt, "}") or nxt.kind == "string"
        ):
            typ = self._type_name()
        else:
            names.append(self._ident())
            while self._at(","):
                self._advance()
                names.append(self._ident())
            typ = self._type()
        tag = self._advance().value if self._peek().kind == "string" else None
        return Field(tuple(names), typ, tag)

    def _interface_type(self) -> InterfaceType:
        self._expect("{")
        methods: list[Field] = []
        while not self._at("}"):
            if self._at(";"):
                self._advance()
                continue
            if self._peek().kind == "ident" and _is(self._peek(1), "("):
                name = self._advance().value
                methods.append(Field((name,), self._signature()))
            else:
                methods.append(Field((), self._type()))
            if not self._at("}"):
                self._expect(";")
        self._advance()
        return InterfaceType(tuple(methods))


def parse_source(text: str, filename: str = "<source>") -> GoFile:
    """Parse the declarations of Go source ``text``."""
    return _Parser(text, filename).parse()


def parse_file(path: Union[str, Path]) -> GoFile:
    """Read and parse the Go file at ``path``."""
    text = Path(path).read_text(encoding="utf-8")
    return parse_source(text, str(path))
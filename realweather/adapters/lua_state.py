"""Minimal reader for DCS table-literal documents.

Mission and dictionary files are Lua chunks made only of global
assignments whose values are literals::

    mission = {
        ["weather"] = { ["qnh"] = 760, },
    }

``LuaState`` parses such chunks into Python values and applies targeted
field assignments. Values map as follows: ``nil`` -> ``None``, booleans ->
``bool``, numbers -> ``int`` (integral literals) or ``float``, strings ->
``str``, tables -> insertion-ordered ``dict``. Keys follow the same
mapping; integral float keys collapse to ``int``.

Bytes that are not valid UTF-8 survive as lone surrogates
(``surrogateescape``) and are written back unchanged by the serializer.
"""

from __future__ import annotations

import copy
import logging
import re
from pathlib import Path
from typing import Any

from realweather.errors import EvalError, ParseError

logger = logging.getLogger(__name__)

ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"

_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_HEX_RE = re.compile(r"0[xX](?:[0-9a-fA-F]+(?:\.[0-9a-fA-F]*)?|\.[0-9a-fA-F]+)(?:[pP][+-]?\d+)?")
_DEC_RE = re.compile(r"(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_LONG_OPEN_RE = re.compile(r"\[(=*)\[")
_SPACE_RE = re.compile(r"[ \t\r\f\v]+")

_KEYWORDS = {"nil", "true", "false"}
_DIGITS = "0123456789"
_SYMBOLS = ("=", "{", "}", "[", "]", ",", ";", ".", "-", "(", ")")

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    '"': '"',
    "'": "'",
    "\n": "\n",
}

NAME, NUMBER, STRING, SYMBOL, KEYWORD, EOF = "name", "number", "string", "symbol", "keyword", "eof"


class _Token:
    __slots__ = ("kind", "value", "line")

    def __init__(self, kind: str, value: Any, line: int):
        self.kind = kind
        self.value = value
        self.line = line

    def __repr__(self) -> str:
        return f"<{self.kind} {self.value!r} @{self.line}>"


class _Lexer:
    def __init__(self, source: str, chunk: str):
        self.source = source
        self.chunk = chunk
        self.pos = 0
        self.line = 1

    def error(self, message: str, line: int | None = None) -> ParseError:
        return ParseError(self.chunk, line or self.line, message)

    def tokens(self) -> list[_Token]:
        tokens = []
        while True:
            token = self._next()
            tokens.append(token)
            if token.kind == EOF:
                return tokens

    def _next(self) -> _Token:
        self._skip_space_and_comments()
        src, pos = self.source, self.pos
        if pos >= len(src):
            return _Token(EOF, None, self.line)

        ch = src[pos]
        line = self.line

        if ch == '"' or ch == "'":
            return _Token(STRING, self._short_string(ch), line)

        if ch == "[":
            match = _LONG_OPEN_RE.match(src, pos)
            if match:
                return _Token(STRING, self._long_string(match), line)

        if ch in _DIGITS or (ch == "." and pos + 1 < len(src) and src[pos + 1] in _DIGITS):
            return _Token(NUMBER, self._number(), line)

        match = _NAME_RE.match(src, pos)
        if match:
            self.pos = match.end()
            word = match.group()
            return _Token(KEYWORD if word in _KEYWORDS else NAME, word, line)

        for symbol in _SYMBOLS:
            if src.startswith(symbol, pos):
                self.pos += len(symbol)
                return _Token(SYMBOL, symbol, line)

        raise self.error(f"unexpected symbol near {ch!r}")

    def _skip_space_and_comments(self) -> None:
        src = self.source
        while self.pos < len(src):
            match = _SPACE_RE.match(src, self.pos)
            if match:
                self.pos = match.end()
                continue
            if src[self.pos] == "\n":
                self.line += 1
                self.pos += 1
                continue
            if src.startswith("--", self.pos):
                self.pos += 2
                match = _LONG_OPEN_RE.match(src, self.pos)
                if match:
                    self._long_string(match)
                else:
                    end = src.find("\n", self.pos)
                    self.pos = len(src) if end < 0 else end
                continue
            if self.pos == 0 and src.startswith("#"):
                end = src.find("\n")
                self.pos = len(src) if end < 0 else end
                continue
            break

    def _number(self) -> int | float:
        src = self.source
        match = _HEX_RE.match(src, self.pos) or _DEC_RE.match(src, self.pos)
        text = match.group()
        self.pos = match.end()
        if self.pos < len(src) and (src[self.pos].isalnum() or src[self.pos] == "_"):
            raise self.error(f"malformed number near {text + src[self.pos]!r}")

        if text[:2].lower() == "0x":
            if "." in text or "p" in text.lower():
                return float.fromhex(text)
            return int(text, 16)
        if any(c in text for c in ".eE"):
            return float(text)
        return int(text)

    def _short_string(self, quote: str) -> str:
        src = self.source
        start_line = self.line
        pos = self.pos + 1
        parts: list[str] = []
        pending = bytearray()

        def flush_bytes() -> None:
            if pending:
                parts.append(pending.decode(ENCODING, ENCODING_ERRORS))
                pending.clear()

        while True:
            if pos >= len(src):
                raise self.error("unfinished string", start_line)
            ch = src[pos]
            if ch == quote:
                pos += 1
                break
            if ch == "\n":
                raise self.error("unfinished string", start_line)
            if ch != "\\":
                flush_bytes()
                parts.append(ch)
                pos += 1
                continue

            pos += 1
            if pos >= len(src):
                raise self.error("unfinished string", start_line)
            esc = src[pos]
            if esc in _SIMPLE_ESCAPES:
                flush_bytes()
                parts.append(_SIMPLE_ESCAPES[esc])
                if esc == "\n":
                    self.line += 1
                pos += 1
            elif esc == "\r":
                flush_bytes()
                parts.append("\n")
                self.line += 1
                pos += 2 if src.startswith("\n", pos + 1) else 1
            elif esc in _DIGITS:
                digits = re.match(r"[0-9]{1,3}", src[pos:pos + 3]).group()
                value = int(digits)
                if value > 255:
                    raise self.error("decimal escape too large")
                pending.append(value)
                pos += len(digits)
            elif esc == "x":
                digits = src[pos + 1:pos + 3]
                if not re.fullmatch(r"[0-9a-fA-F]{2}", digits):
                    raise self.error("hexadecimal digit expected")
                pending.append(int(digits, 16))
                pos += 3
            elif esc == "z":
                pos += 1
                while pos < len(src) and src[pos].isspace():
                    if src[pos] == "\n":
                        self.line += 1
                    pos += 1
            elif esc == "u":
                match = re.match(r"u\{([0-9a-fA-F]+)\}", src[pos:])
                if not match:
                    raise self.error("missing '{' in \\u{xxxx}")
                flush_bytes()
                parts.append(chr(int(match.group(1), 16)))
                pos += match.end()
            else:
                raise self.error(f"invalid escape sequence '\\{esc}'")

        flush_bytes()
        self.pos = pos
        return "".join(parts)

    def _long_string(self, opening: re.Match) -> str:
        src = self.source
        start_line = self.line
        close = "]" + opening.group(1) + "]"
        body_start = opening.end()
        end = src.find(close, body_start)
        if end < 0:
            raise self.error("unfinished long string", start_line)
        body = src[body_start:end]
        self.line += body.count("\n")
        self.pos = end + len(close)
        # a newline right after the opening bracket is skipped
        if body.startswith("\r\n"):
            body = body[2:]
        elif body.startswith("\n"):
            body = body[1:]
        return body


class _Parser:
    def __init__(self, source: str, chunk: str):
        self._lexer = _Lexer(source, chunk)
        self._tokens = self._lexer.tokens()
        self._index = 0

    @property
    def _current(self) -> _Token:
        return self._tokens[self._index]

    def _advance(self) -> _Token:
        token = self._tokens[self._index]
        if token.kind != EOF:
            self._index += 1
        return token

    def _check(self, symbol: str) -> bool:
        token = self._current
        return token.kind == SYMBOL and token.value == symbol

    def _accept(self, symbol: str) -> bool:
        if self._check(symbol):
            self._advance()
            return True
        return False

    def _expect(self, symbol: str) -> _Token:
        if not self._check(symbol):
            raise self._error(f"'{symbol}' expected")
        return self._advance()

    def _error(self, message: str) -> ParseError:
        token = self._current
        near = "<eof>" if token.kind == EOF else repr(token.value)
        return self._lexer.error(f"{message} near {near}", token.line)

    def chunk(self) -> list[tuple[list[Any], Any]]:
        statements = []
        while self._current.kind != EOF:
            if self._accept(";"):
                continue
            statements.append(self._assignment())
        return statements

    def target(self) -> list[Any]:
        """Parse ``name{.field | [key]}`` into its key path."""
        token = self._current
        if token.kind != NAME:
            raise self._error("unexpected symbol")
        self._advance()
        path: list[Any] = [token.value]
        while True:
            if self._accept("."):
                field = self._current
                if field.kind != NAME:
                    raise self._error("<name> expected")
                self._advance()
                path.append(field.value)
            elif self._check("["):
                self._advance()
                key = self.expression()
                self._expect("]")
                path.append(key)
            else:
                return path

    def end(self) -> None:
        if self._current.kind != EOF:
            raise self._error("unexpected symbol")

    def _assignment(self) -> tuple[list[Any], Any]:
        path = self.target()
        self._expect("=")
        return path, self.expression()

    def expression(self) -> Any:
        token = self._current
        if token.kind == KEYWORD:
            self._advance()
            return {"nil": None, "true": True, "false": False}[token.value]
        if token.kind in (NUMBER, STRING):
            self._advance()
            return token.value
        if self._check("-"):
            self._advance()
            operand = self.expression()
            if isinstance(operand, bool) or not isinstance(operand, (int, float)):
                raise self._error("attempt to negate a non-number value")
            return -operand
        if self._check("("):
            self._advance()
            value = self.expression()
            self._expect(")")
            return value
        if self._check("{"):
            return self._table()
        raise self._error("unexpected symbol")

    def _table(self) -> dict:
        self._expect("{")
        table: dict = {}
        position = 1
        while not self._check("}"):
            if self._check("["):
                line = self._current.line
                self._advance()
                key = self.expression()
                self._expect("]")
                self._expect("=")
                value = self.expression()
                _raw_set(table, _normalize_key(key, self._lexer.chunk, line), value)
            elif self._current.kind == NAME and self._peek_is_assign():
                key = self._advance().value
                self._expect("=")
                _raw_set(table, key, self.expression())
            else:
                _raw_set(table, position, self.expression())
                position += 1

            if not (self._accept(",") or self._accept(";")):
                break
        self._expect("}")
        return table

    def _peek_is_assign(self) -> bool:
        following = self._tokens[self._index + 1]
        return following.kind == SYMBOL and following.value == "="


def _normalize_key(key: Any, chunk: str = "<assign>", line: int = 0) -> Any:
    if key is None:
        raise ParseError(chunk, line, "table index is nil")
    if isinstance(key, float):
        if key != key:
            raise ParseError(chunk, line, "table index is NaN")
        if key.is_integer():
            return int(key)
    return key


def _raw_set(table: dict, key: Any, value: Any) -> None:
    if value is None:
        table.pop(key, None)
    else:
        table[key] = value


class LuaState:
    """Global environment for table-literal documents.

    One instance is shared by every document of a run; it is not
    thread-safe.
    """

    def __init__(self):
        self.globals: dict[str, Any] = {}

    def do_string(self, source: str, chunk: str = "<string>") -> None:
        """Parse and execute every assignment in ``source``."""
        for path, value in _Parser(source, chunk).chunk():
            self._set_path(path, value)

    def do_file(self, path: Path) -> None:
        path = Path(path)
        source = path.read_bytes().decode(ENCODING, ENCODING_ERRORS)
        self.do_string(source, chunk=path.name)

    def load_document(self, path: Path, name: str) -> dict:
        """Execute ``path`` and return the table bound to global ``name``."""
        logger.debug("Loading %s from %s", name, path)
        self.do_file(path)
        root = self.get_global(name)
        if not isinstance(root, dict):
            raise EvalError(f"{Path(path).name}: global '{name}' is not a table")
        return root

    def get_global(self, name: str) -> Any:
        return self.globals.get(name)

    def assign(self, target: str, value: Any) -> None:
        """Set the field at ``target`` (e.g. ``mission.weather.qnh``).

        ``None`` removes the field. Raises ``EvalError`` when an
        intermediate field is not a table.
        """
        parser = _Parser(target, "<assign>")
        path = parser.target()
        parser.end()
        self._set_path(path, copy.deepcopy(value))

    def _set_path(self, path: list[Any], value: Any) -> None:
        if len(path) == 1:
            _raw_set(self.globals, path[0], value)
            return

        current: Any = self.globals.get(path[0])
        walked = str(path[0])
        for key in path[1:-1]:
            if not isinstance(current, dict):
                raise EvalError(f"attempt to index a {_type_name(current)} value ({walked})")
            current = current.get(_normalize_key(key))
            walked = f"{walked}[{key!r}]" if not isinstance(key, str) else f"{walked}.{key}"
        if not isinstance(current, dict):
            raise EvalError(f"attempt to index a {_type_name(current)} value ({walked})")
        _raw_set(current, _normalize_key(path[-1]), value)


def _type_name(value: Any) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return "table" if isinstance(value, dict) else type(value).__name__

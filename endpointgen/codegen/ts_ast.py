"""A small TypeScript scanner for reading declaration modules.

The generator never executes TypeScript. It only needs a handful of
structural facts from the sources it reads:

- the object literal bound to a variable (``export const endpoints = {...}``),
- the members of an interface or object type alias,
- the method signatures of a class,
- the named imports of a module.

This module provides a tokenizer that understands comments, string and
template literals, and a set of recursive-descent helpers on top of it.
Expressions the helpers do not understand are kept as :class:`Opaque` source
text instead of failing.
"""

import dataclasses
import re
from typing import Any

__all__ = [
    'ArrowFunction',
    'ClassMethod',
    'MethodParameter',
    'NamedImport',
    'Opaque',
    'Token',
    'TypeMember',
    'find_type_members',
    'find_variable_annotation',
    'find_variable_initializer',
    'has_variable',
    'parse_class_methods',
    'parse_named_imports',
    'split_type_arguments',
    'split_union',
    'tokenize',
]

_IDENT_START = re.compile(r'[A-Za-z_$]')
_IDENT = re.compile(r'[A-Za-z0-9_$]*')
_NUMBER = re.compile(r'0[xXbBoO][0-9a-fA-F_]+|[0-9][0-9_]*(\.[0-9_]+)?([eE][+-]?[0-9]+)?')
_PUNCTUATORS = (
    '...', '===', '!==', '=>', '==', '!=', '<=', '>=', '&&', '||', '??', '?.',
)
_ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', 'b': '\b', 'f': '\f', 'v': '\v', '0': '\0'}

_OPENERS = {'{': '}', '[': ']', '(': ')'}
_CLOSERS = {'}', ']', ')'}
_MODIFIERS = frozenset(
    {'public', 'private', 'protected', 'static', 'readonly', 'async', 'abstract', 'override', 'declare'}
)


@dataclasses.dataclass(frozen=True)
class Token:
    kind: str  # 'ident', 'string', 'template', 'number' or 'punct'
    value: str
    start: int
    end: int
    newline_before: bool = False
    has_substitution: bool = False

    def is_punct(self, *values: str) -> bool:
        return self.kind == 'punct' and self.value in values

    def is_ident(self, *values: str) -> bool:
        return self.kind == 'ident' and (not values or self.value in values)


@dataclasses.dataclass(frozen=True)
class Opaque:
    """Source text of an expression the scanner does not interpret."""

    text: str


@dataclasses.dataclass(frozen=True)
class ArrowFunction:
    """An arrow function; ``body`` is the returned value when it is a literal."""

    params: str
    body: Any
    text: str


@dataclasses.dataclass(frozen=True)
class TypeMember:
    name: str
    type_text: str
    optional: bool = False


@dataclasses.dataclass(frozen=True)
class MethodParameter:
    name: str
    type_text: str | None


@dataclasses.dataclass(frozen=True)
class ClassMethod:
    name: str
    parameters: tuple[MethodParameter, ...]
    return_type: str | None


@dataclasses.dataclass(frozen=True)
class NamedImport:
    name: str
    module: str
    type_only: bool = False


def tokenize(source: str) -> list[Token]:
    """Split TypeScript source into tokens, dropping whitespace and comments."""
    tokens: list[Token] = []
    pos = 0
    length = len(source)
    newline = True

    while pos < length:
        char = source[pos]

        if char in ' \t\r\f\v':
            pos += 1
            continue
        if char == '\n':
            newline = True
            pos += 1
            continue
        if source.startswith('//', pos):
            end = source.find('\n', pos)
            pos = length if end == -1 else end
            continue
        if source.startswith('/*', pos):
            end = source.find('*/', pos + 2)
            if end == -1:
                end = length
            if '\n' in source[pos:end]:
                newline = True
            pos = end + 2
            continue

        if char in '\'"':
            value, end = _read_string(source, pos)
            tokens.append(Token('string', value, pos, end, newline))
        elif char == '`':
            value, end, substituted = _read_template(source, pos)
            tokens.append(Token('template', value, pos, end, newline, substituted))
        elif _IDENT_START.match(char):
            end = _IDENT.match(source, pos + 1).end()
            tokens.append(Token('ident', source[pos:end], pos, end, newline))
        elif char.isdigit():
            end = _NUMBER.match(source, pos).end()
            tokens.append(Token('number', source[pos:end], pos, end, newline))
        else:
            for punct in _PUNCTUATORS:
                if source.startswith(punct, pos):
                    break
            else:
                punct = char
            end = pos + len(punct)
            tokens.append(Token('punct', punct, pos, end, newline))

        pos = end
        newline = False

    return tokens


def _read_string(source: str, pos: int) -> tuple[str, int]:
    quote = source[pos]
    chars = []
    i = pos + 1
    while i < len(source):
        char = source[i]
        if char == '\\' and i + 1 < len(source):
            nxt = source[i + 1]
            if nxt == '\n':
                i += 2
                continue
            chars.append(_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        if char == quote:
            return ''.join(chars), i + 1
        if char == '\n':
            break
        chars.append(char)
        i += 1
    return ''.join(chars), i


def _read_template(source: str, pos: int) -> tuple[str, int, bool]:
    chars = []
    substituted = False
    i = pos + 1
    while i < len(source):
        char = source[i]
        if char == '\\' and i + 1 < len(source):
            nxt = source[i + 1]
            chars.append(_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        if char == '`':
            return ''.join(chars), i + 1, substituted
        if source.startswith('${', i):
            substituted = True
            depth = 0
            start = i
            i += 2
            while i < len(source):
                if source[i] == '{':
                    depth += 1
                elif source[i] == '}':
                    if depth == 0:
                        break
                    depth -= 1
                elif source[i] in '\'"':
                    _, i = _read_string(source, i)
                    continue
                elif source[i] == '`':
                    _, i, _ = _read_template(source, i)
                    continue
                i += 1
            chars.append(source[start : i + 1])
            i += 1
            continue
        chars.append(char)
        i += 1
    return ''.join(chars), i, substituted


class _Parser:
    """Recursive-descent reader over a token list."""

    def __init__(self, source: str, tokens: list[Token] | None = None):
        self.source = source
        self.tokens = tokens if tokens is not None else tokenize(source)
        self.pos = 0

    def peek(self, offset: int = 0) -> Token | None:
        index = self.pos + offset
        if 0 <= index < len(self.tokens):
            return self.tokens[index]
        return None

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def text(self, start: int, end: int) -> str:
        """Source text covered by tokens ``start`` (inclusive) to ``end`` (exclusive)."""
        if end <= start or start >= len(self.tokens):
            return ''
        last = min(end, len(self.tokens)) - 1
        return self.source[self.tokens[start].start : self.tokens[last].end]

    def matching(self, index: int, angle: bool = False) -> int:
        """Index of the token closing the bracket opened at ``index``."""
        depth = 0
        for i in range(index, len(self.tokens)):
            token = self.tokens[i]
            if token.kind != 'punct':
                continue
            if token.value in _OPENERS or (angle and token.value == '<'):
                depth += 1
            elif token.value in _CLOSERS or (angle and token.value == '>'):
                depth -= 1
                if depth == 0:
                    return i
        return len(self.tokens) - 1

    def skip_until(self, stops: tuple[str, ...], angle: bool = False) -> int:
        """Advance to the first depth-0 punctuator in ``stops`` and return its index."""
        depth = 0
        while not self.at_end():
            token = self.tokens[self.pos]
            if token.kind == 'punct':
                if depth == 0 and token.value in stops:
                    return self.pos
                if token.value in _OPENERS or (angle and token.value == '<'):
                    depth += 1
                elif token.value in _CLOSERS or (angle and token.value == '>'):
                    if depth == 0:
                        return self.pos
                    depth -= 1
            self.pos += 1
        return self.pos

    # -- expressions ---------------------------------------------------------

    def parse_expression(self) -> Any:
        start = self.pos
        value = self._parse_primary()
        if value is not _UNKNOWN:
            self._skip_type_assertion()
            token = self.peek()
            if token is None or token.is_punct(',', ';', '}', ']', ')'):
                return value
        self.pos = start
        end = self.skip_until((',', ';'))
        return Opaque(self.text(start, end))

    def _skip_type_assertion(self) -> None:
        token = self.peek()
        while token is not None and token.is_ident('as', 'satisfies'):
            self.pos += 1
            self.skip_until((',', ';'), angle=True)
            token = self.peek()

    def _parse_primary(self) -> Any:
        token = self.peek()
        if token is None:
            return _UNKNOWN

        if token.kind == 'string':
            self.pos += 1
            return token.value
        if token.kind == 'template':
            self.pos += 1
            if token.has_substitution:
                return _UNKNOWN
            return token.value
        if token.kind == 'number':
            self.pos += 1
            return _parse_number(token.value)
        if token.is_punct('-') and (nxt := self.peek(1)) and nxt.kind == 'number':
            self.pos += 2
            return -_parse_number(nxt.value)
        if token.is_punct('{'):
            return self._parse_object()
        if token.is_punct('['):
            return self._parse_array()
        if token.is_punct('('):
            return self._parse_parenthesized()
        if token.is_ident():
            if token.value in ('true', 'false'):
                self.pos += 1
                return token.value == 'true'
            if token.value in ('null', 'undefined'):
                self.pos += 1
                return None
            if token.value == 'async' and (nxt := self.peek(1)) and (
                nxt.is_punct('(') or nxt.kind == 'ident'
            ):
                start = self.pos
                self.pos += 1
                arrow = self._parse_arrow(start)
                if arrow is not None:
                    return arrow
                self.pos = start
                return _UNKNOWN
            if (nxt := self.peek(1)) and nxt.is_punct('=>'):
                return self._parse_arrow(self.pos)
        return _UNKNOWN

    def _parse_object(self) -> dict[str, Any] | object:
        self.pos += 1
        result: dict[str, Any] = {}
        while not self.at_end():
            token = self.peek()
            if token.is_punct('}'):
                self.pos += 1
                return result
            if token.is_punct(','):
                self.pos += 1
                continue
            if token.is_punct('...') or token.is_punct('['):
                self.skip_until((',',))
                continue

            if token.kind in ('ident', 'string', 'number'):
                key = token.value
                self.pos += 1
                nxt = self.peek()
                if nxt is not None and nxt.is_punct('?'):
                    self.pos += 1
                    nxt = self.peek()
                if nxt is not None and nxt.is_punct(':'):
                    self.pos += 1
                    result[key] = self.parse_expression()
                    continue
                if nxt is not None and (nxt.is_punct('(') or nxt.is_punct('<')):
                    start = self.pos - 1
                    self.skip_until(('{',), angle=True)
                    body_end = self.matching(self.pos)
                    self.pos = body_end + 1
                    result[key] = Opaque(self.text(start, self.pos))
                    continue
                result[key] = Opaque(key)
                continue

            before = self.pos
            self.skip_until((',',))
            if self.pos == before:
                self.pos += 1
        return result

    def _parse_array(self) -> list[Any]:
        self.pos += 1
        items = []
        while not self.at_end():
            token = self.peek()
            if token.is_punct(']'):
                self.pos += 1
                return items
            if token.is_punct(','):
                self.pos += 1
                continue
            if token.is_punct(')', '}', ';'):
                return items
            items.append(self.parse_expression())
        return items

    def _parse_parenthesized(self) -> Any:
        start = self.pos
        close = self.matching(self.pos)
        after = self.tokens[close + 1] if close + 1 < len(self.tokens) else None
        if after is not None and (after.is_punct('=>') or after.is_punct(':')):
            arrow = self._parse_arrow(start)
            if arrow is not None:
                return arrow
            self.pos = start
            return _UNKNOWN

        self.pos += 1
        value = self.parse_expression()
        token = self.peek()
        if token is not None and token.is_punct(')'):
            self.pos += 1
            return value
        self.pos = start
        return _UNKNOWN

    def _parse_arrow(self, start: int) -> ArrowFunction | None:
        token = self.peek()
        if token is None:
            return None
        if token.is_punct('('):
            close = self.matching(self.pos)
            params = self.text(self.pos + 1, close)
            self.pos = close + 1
        elif token.kind == 'ident':
            params = token.value
            self.pos += 1
        else:
            return None

        token = self.peek()
        if token is not None and token.is_punct(':'):
            self.pos += 1
            self.skip_until(('=>',), angle=True)
            token = self.peek()
        if token is None or not token.is_punct('=>'):
            return None
        self.pos += 1

        token = self.peek()
        if token is not None and token.is_punct('{'):
            close = self.matching(self.pos)
            body = self._returned_value(self.pos + 1, close)
            self.pos = close + 1
        else:
            body = self.parse_expression()
        return ArrowFunction(params=params, body=body, text=self.text(start, self.pos))

    def _returned_value(self, start: int, end: int) -> Any:
        depth = 0
        for i in range(start, end):
            token = self.tokens[i]
            if token.kind == 'punct':
                if token.value in _OPENERS:
                    depth += 1
                elif token.value in _CLOSERS:
                    depth -= 1
            elif depth == 0 and token.is_ident('return'):
                saved = self.pos
                self.pos = i + 1
                value = self.parse_expression()
                self.pos = saved
                return value
        return None

    # -- declarations --------------------------------------------------------

    def find_variable(self, name: str) -> int | None:
        """Index of the name token of ``const|let|var <name>``, preferring exports."""
        fallback = None
        for i, token in enumerate(self.tokens[:-1]):
            if token.is_ident('const', 'let', 'var') and self.tokens[i + 1].is_ident(name):
                exported = i > 0 and self.tokens[i - 1].is_ident('export')
                if exported:
                    return i + 1
                if fallback is None:
                    fallback = i + 1
        return fallback


_UNKNOWN = object()


def _parse_number(text: str) -> int | float:
    cleaned = text.replace('_', '')
    try:
        return int(cleaned, 0)
    except ValueError:
        return float(cleaned)


def find_variable_annotation(source: str, name: str) -> str | None:
    """Return the type annotation text of a variable declaration, if any."""
    parser = _Parser(source)
    index = parser.find_variable(name)
    if index is None:
        return None
    token = parser.peek(index + 1)
    if token is None or not token.is_punct(':'):
        return None
    parser.pos = index + 2
    end = parser.skip_until(('=', ';'), angle=True)
    return ' '.join(parser.text(index + 2, end).split()) or None


def find_variable_initializer(source: str, name: str) -> Any:
    """Parse the initializer of ``const <name> = ...``.

    Returns:
        The parsed value (dict, list, str, number, bool, ArrowFunction or
        Opaque). ``None`` is returned both for a missing variable and for a
        ``null`` initializer; use :func:`has_variable` to tell them apart.
    """
    parser = _Parser(source)
    index = parser.find_variable(name)
    if index is None:
        return None
    parser.pos = index + 1
    token = parser.peek()
    if token is not None and token.is_punct(':'):
        parser.pos += 1
        parser.skip_until(('=', ';'), angle=True)
        token = parser.peek()
    if token is None or not token.is_punct('='):
        return None
    parser.pos += 1
    start = parser.pos
    value = parser._parse_primary()
    if value is _UNKNOWN:
        parser.pos = start
        end = parser.skip_until((';',))
        return Opaque(parser.text(start, end))
    return value


def has_variable(source: str, name: str) -> bool:
    return _Parser(source).find_variable(name) is not None


def _nesting_delta(text: str, i: int) -> int:
    char = text[i]
    if char in '<({[':
        return 1
    if char in ')}]':
        return -1
    if char == '>' and (i == 0 or text[i - 1] != '='):
        return -1
    return 0


def split_type_arguments(text: str) -> list[str]:
    """Split ``A, B<C, D>, { e: F }`` into top-level type arguments."""
    args = []
    depth = 0
    current = []
    for i, char in enumerate(text):
        depth += _nesting_delta(text, i)
        if char == ',' and depth == 0:
            args.append(''.join(current).strip())
            current = []
            continue
        current.append(char)
    tail = ''.join(current).strip()
    if tail:
        args.append(tail)
    return args


def find_type_members(source: str, type_name: str) -> list[TypeMember] | None:
    """Read the property members of an interface, object type alias or class.

    Returns ``None`` when no declaration of ``type_name`` with an object body
    exists in ``source``. Method members and index signatures are skipped.
    """
    parser = _Parser(source)
    tokens = parser.tokens
    for i, token in enumerate(tokens[:-1]):
        if not token.is_ident('interface', 'type', 'class'):
            continue
        if not tokens[i + 1].is_ident(type_name):
            continue
        parser.pos = i + 2
        nxt = parser.peek()
        if nxt is not None and nxt.is_punct('<'):
            parser.pos = parser.matching(parser.pos, angle=True) + 1
            nxt = parser.peek()
        if token.value == 'type':
            if nxt is None or not nxt.is_punct('='):
                continue
            parser.pos += 1
        else:
            parser.skip_until(('{',), angle=True)
        nxt = parser.peek()
        if nxt is None or not nxt.is_punct('{'):
            continue
        close = parser.matching(parser.pos)
        return [
            TypeMember(m.name, m.type_text, m.optional)
            for m in _read_members(parser, parser.pos + 1, close)
            if isinstance(m, TypeMember)
        ]
    return None


def _member_start(tokens: list[Token], index: int) -> bool:
    """Whether the token at ``index`` starts a new member on a fresh line."""
    token = tokens[index]
    if not token.newline_before or token.kind not in ('ident', 'string'):
        return False
    if token.is_ident(*_MODIFIERS):
        return True
    nxt = tokens[index + 1] if index + 1 < len(tokens) else None
    return nxt is not None and nxt.is_punct(':', '?', '(', '<')


_CONTINUATIONS = ('|', '&', ':', '=>', '=', '?', ',', '<', '(')


def _member_end(parser: _Parser, start: int, close: int) -> int:
    """Index of the token ending a member whose remainder starts at ``start``."""
    tokens = parser.tokens
    depth = 0
    for i in range(start, close):
        token = tokens[i]
        if (
            depth == 0
            and i > start
            and _member_start(tokens, i)
            and not tokens[i - 1].is_punct(*_CONTINUATIONS)
        ):
            return i
        if token.kind == 'punct':
            if token.value in _OPENERS or token.value == '<':
                depth += 1
            elif token.value in _CLOSERS or token.value == '>':
                depth -= 1
            elif depth == 0 and token.value in (';', ','):
                return i
    return close


def _signature_span(parser: _Parser, k: int, close: int) -> tuple[int, int]:
    """Find where a method's return type and the whole member end.

    ``k`` is the index just after the closing parenthesis of the parameter
    list. Returns ``(type_end, member_end)``; the return type text is the
    tokens between the colon at ``k`` and ``type_end``.
    """
    tokens = parser.tokens
    type_end = k
    if k < close and tokens[k].is_punct(':'):
        depth = 0
        j = k + 1
        while j < close:
            token = tokens[j]
            if depth == 0 and j > k + 1 and _member_start(tokens, j) and not tokens[j - 1].is_punct(*_CONTINUATIONS):
                break
            if token.kind == 'punct':
                if token.value == '{' and depth == 0 and not tokens[j - 1].is_punct(*_CONTINUATIONS):
                    break
                if token.value in _OPENERS or token.value == '<':
                    depth += 1
                elif token.value in _CLOSERS or token.value == '>':
                    depth -= 1
                elif depth == 0 and token.value in (';', ','):
                    break
            j += 1
        type_end = j
    if type_end < close and tokens[type_end].is_punct('{'):
        return type_end, parser.matching(type_end) + 1
    return type_end, type_end


def _read_members(parser: _Parser, start: int, close: int) -> list[TypeMember | ClassMethod]:
    """Read the members of a ``{ ... }`` body between ``start`` and ``close``."""
    tokens = parser.tokens
    members: list[TypeMember | ClassMethod] = []
    i = start
    while i < close:
        token = tokens[i]
        if token.is_punct(';', ','):
            i += 1
            continue
        if token.kind == 'punct' and token.value in _OPENERS:
            # index signature or computed key
            i = max(_member_end(parser, parser.matching(i) + 1, close), i + 1)
            continue
        while (
            token.is_ident(*_MODIFIERS)
            and i + 1 < close
            and tokens[i + 1].kind in ('ident', 'string')
        ):
            i += 1
            token = tokens[i]
        if token.kind not in ('ident', 'string'):
            i = max(_member_end(parser, i + 1, close), i + 1)
            continue

        j = i + 1
        optional = False
        if j < close and tokens[j].is_punct('?'):
            optional = True
            j += 1

        if j < close and tokens[j].is_punct('(', '<'):
            paren = j
            if tokens[paren].is_punct('<'):
                paren = parser.matching(paren, angle=True) + 1
            params_close = parser.matching(paren)
            type_end, end = _signature_span(parser, params_close + 1, close)
            return_type = None
            if tokens[params_close + 1].is_punct(':') and type_end > params_close + 2:
                return_type = ' '.join(parser.text(params_close + 2, type_end).split())
            members.append(
                ClassMethod(
                    token.value,
                    tuple(_read_parameters(parser, paren + 1, params_close)),
                    return_type,
                )
            )
            i = max(end, i + 1)
            continue

        end = _member_end(parser, j, close)
        if j < close and tokens[j].is_punct(':'):
            type_text = ' '.join(parser.text(j + 1, end).split())
            members.append(TypeMember(token.value, type_text, optional))
        i = max(end, i + 1)
    return members


def parse_class_methods(source: str, class_name: str) -> list[ClassMethod] | None:
    """Collect the method signatures of ``class <class_name>``.

    The constructor is skipped. Returns ``None`` when the class is not declared
    in ``source``.
    """
    parser = _Parser(source)
    tokens = parser.tokens
    for i, token in enumerate(tokens[:-1]):
        if token.is_ident('class') and tokens[i + 1].is_ident(class_name):
            parser.pos = i + 2
            parser.skip_until(('{',), angle=True)
            token = parser.peek()
            if token is None or not token.is_punct('{'):
                return None
            close = parser.matching(parser.pos)
            return [
                member
                for member in _read_members(parser, parser.pos + 1, close)
                if isinstance(member, ClassMethod) and member.name != 'constructor'
            ]
    return None


def _read_parameters(parser: _Parser, start: int, end: int) -> list[MethodParameter]:
    parameters = []
    for chunk in split_type_arguments(parser.text(start, end)):
        words = chunk.split()
        while len(words) > 1 and words[0] in _MODIFIERS:
            words.pop(0)
        chunk = ' '.join(words)
        name, sep, rest = _split_top_level(chunk, ':')
        type_text = None
        if sep:
            type_text = ' '.join(_split_top_level(rest, '=')[0].split())
        else:
            name = _split_top_level(name, '=')[0]
        parameters.append(MethodParameter(name.strip().rstrip('?').strip(), type_text))
    return parameters


def _split_top_level(text: str, separator: str) -> tuple[str, str, str]:
    """Partition ``text`` at the first depth-0 ``separator`` (``=>`` never matches ``=``)."""
    depth = 0
    for i, char in enumerate(text):
        depth += _nesting_delta(text, i)
        if char == separator and depth == 0 and text[i + 1 : i + 2] != '>':
            return text[:i].strip(), separator, text[i + 1 :].strip()
    return text.strip(), '', ''


def parse_named_imports(source: str) -> list[NamedImport]:
    """Collect ``import { A, B as C } from 'module'`` bindings in source order."""
    parser = _Parser(source)
    tokens = parser.tokens
    imports: list[NamedImport] = []
    for i, token in enumerate(tokens):
        if not token.is_ident('import') or (i > 0 and tokens[i - 1].is_punct('.')):
            continue
        j = i + 1
        type_only = False
        if j < len(tokens) and tokens[j].is_ident('type'):
            type_only = True
            j += 1
        if j + 1 < len(tokens) and tokens[j].kind == 'ident' and tokens[j + 1].is_punct(','):
            j += 2
        if j >= len(tokens) or not tokens[j].is_punct('{'):
            continue
        close = parser.matching(j)
        if not (
            close + 2 < len(tokens)
            and tokens[close + 1].is_ident('from')
            and tokens[close + 2].kind == 'string'
        ):
            continue
        module = tokens[close + 2].value
        for chunk in parser.text(j + 1, close).split(','):
            words = chunk.split()
            if not words:
                continue
            member_type_only = type_only
            if words[0] == 'type' and len(words) > 1:
                member_type_only = True
                words = words[1:]
            local = words[2] if len(words) == 3 and words[1] == 'as' else words[0]
            imports.append(NamedImport(local, module, member_type_only))
    return imports


def split_union(text: str) -> list[str]:
    """Split a union type ``A | B<C | D>`` into its top-level members."""
    members = []
    depth = 0
    current = []
    for i, char in enumerate(text):
        depth += _nesting_delta(text, i)
        if char == '|' and depth == 0:
            members.append(''.join(current).strip())
            current = []
            continue
        current.append(char)
    members.append(''.join(current).strip())
    return [member for member in members if member]

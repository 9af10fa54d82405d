"""
Reggae Programming Language Parser
Tokenizer for the executor, plus a strict statement grammar for checking scripts
"""

from typing import List, Dict, Any, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum
import re

from pyparsing import (
    Regex, QuotedString, Keyword, Literal, Suppress, ZeroOrMore, StringEnd, ParserElement,
    ParseBaseException, lineno, col
)

from error_handling import UnterminatedStringError, ReggaeParseError, ReggaeErrorHandler


class TokenKind(Enum):
    """Closed set of token kinds"""
    LEFT_PAREN = "LeftParen"
    RIGHT_PAREN = "RightParen"
    SEMICOLON = "Semicolon"
    IDENTIFIER = "Identifier"
    KEYWORD = "Keyword"  # reserved, the tokenizer never produces it
    EQUALS_OPERATOR = "EqualsOperator"
    STRING_LITERAL = "StringLiteral"


# How each kind is named in error messages
KIND_DESCRIPTIONS: Dict[TokenKind, str] = {
    TokenKind.LEFT_PAREN: "'('",
    TokenKind.RIGHT_PAREN: "')'",
    TokenKind.SEMICOLON: "';'",
    TokenKind.IDENTIFIER: "identifier",
    TokenKind.KEYWORD: "keyword",
    TokenKind.EQUALS_OPERATOR: "'='",
    TokenKind.STRING_LITERAL: "string literal",
}


@dataclass(frozen=True)
class Token:
    """Reggae token: a kind and its literal text"""
    kind: TokenKind
    text: str

    def __str__(self) -> str:
        return f"{self.kind.value}({self.text!r})"


@dataclass(frozen=True)
class SourceSpan:
    """Start location of a checked statement"""
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


@dataclass(frozen=True)
class CSTNode:
    """Statement node produced by the grammar checker"""
    type: str
    value: Any
    children: List['CSTNode'] = field(default_factory=list)
    span: Optional[SourceSpan] = None

    def __str__(self) -> str:
        if self.children:
            children_str = ", ".join(str(child) for child in self.children)
            return f"{self.type}({self.value}, [{children_str}])"
        return f"{self.type}({self.value})"


# ============================================================================
# TOKENIZER
# ============================================================================

class ReggaeTokenizer:
    """Single forward scan from source text to a flat token list"""

    def __init__(self, filename: str = "<input>", debug: bool = False):
        self.filename = filename
        self.debug = debug
        # Offset of the character that stopped the last scan, None if it ran to the end
        self.stop_position: Optional[int] = None
        self._setup_token_patterns()

    def _setup_token_patterns(self):
        """Setup all token patterns for Reggae"""
        self.symbols = {
            '(': TokenKind.LEFT_PAREN,
            ')': TokenKind.RIGHT_PAREN,
            ';': TokenKind.SEMICOLON,
            '=': TokenKind.EQUALS_OPERATOR,
        }
        self.identifier_pattern = re.compile(r'[A-Za-z][A-Za-z0-9_]*')

    def tokenize(self, text: str) -> List[Token]:
        """Tokenize Reggae source, stopping quietly at the first unknown character"""
        tokens = []
        self.stop_position = None
        pos = 0

        while pos < len(text):
            if text[pos].isspace():
                pos += 1
                continue

            match = self._match_token_at_position(text, pos)
            if match is None:
                self.stop_position = pos
                if self.debug:
                    print(f"Tokenizer stopped at offset {pos} on {text[pos]!r}")
                break

            token, pos = match
            if self.debug:
                print(f"Token: {token}")
            tokens.append(token)

        return tokens

    def _match_token_at_position(self, text: str, pos: int) -> Optional[Tuple[Token, int]]:
        """Match a token at pos, returning it with the offset just past it"""
        char = text[pos]

        if char in self.symbols:
            return Token(self.symbols[char], char), pos + 1

        if char == '"':
            end = text.find('"', pos + 1)
            if end == -1:
                line, column = self._line_and_column(text, pos)
                raise UnterminatedStringError(self.filename, line, column)
            return Token(TokenKind.STRING_LITERAL, text[pos + 1:end]), end + 1

        id_match = self.identifier_pattern.match(text, pos)
        if id_match:
            return Token(TokenKind.IDENTIFIER, id_match.group(0)), id_match.end()

        return None

    @staticmethod
    def _line_and_column(text: str, pos: int) -> Tuple[int, int]:
        line = text.count('\n', 0, pos) + 1
        column = pos - (text.rfind('\n', 0, pos) + 1) + 1
        return line, column


def tokenize(source: str, filename: str = "<input>", debug: bool = False) -> List[Token]:
    """Tokenize source text with a fresh tokenizer"""
    return ReggaeTokenizer(filename, debug).tokenize(source)


# ============================================================================
# STATEMENT GRAMMAR
# ============================================================================

# Every character str.isspace accepts (all of them sit below U+3001), so the
# grammar skips exactly what the tokenizer skips
WHITESPACE_CHARS = ''.join(chr(c) for c in range(0x3001) if chr(c).isspace())


def _skip_whitespace(element: ParserElement) -> ParserElement:
    """Make a grammar element skip the tokenizer's whitespace instead of pyparsing's default"""
    return element.set_whitespace_chars(WHITESPACE_CHARS, copy_defaults=False)


def _symbol(char: str) -> ParserElement:
    return _skip_whitespace(Suppress(_skip_whitespace(Literal(char))))


class ReggaeGrammar:
    """Strict Reggae statement grammar using pyparsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._setup_grammar()

    def _setup_grammar(self):
        """Setup the statement grammar"""
        roots_kw = _skip_whitespace(Suppress(_skip_whitespace(Keyword("roots"))))

        identifier_base = _skip_whitespace(Regex(r'[A-Za-z][A-Za-z0-9_]*').set_name("identifier"))
        # No escape sequences: the text between the quotes is taken as is
        string_literal = _skip_whitespace(
            QuotedString('"', multiline=True, convert_whitespace_escapes=False).set_name("string literal")
        )
        string_literal.set_parse_action(lambda t: ("STRING", t[0]))

        value_identifier = identifier_base.copy().set_parse_action(lambda t: ("IDENTIFIER", t[0]))
        value = _skip_whitespace((string_literal | value_identifier).set_name("value"))
        callee = identifier_base.copy().add_condition(lambda t: t[0] != "roots")

        # '-' makes a failure after the statement's opening token fatal
        assignment = _skip_whitespace(
            roots_kw - identifier_base.copy() - _symbol("=") - value - _symbol(";")
        ).set_parse_action(lambda s, loc, t: ("ASSIGNMENT", t[0], t[1], loc))

        call = _skip_whitespace(
            callee + _symbol("(") - value - _symbol(")") - _symbol(";")
        ).set_parse_action(lambda s, loc, t: ("CALL", t[0], t[1], loc))

        statement = _skip_whitespace((assignment | call).set_name("statement"))
        # Tabs stay tabs, both inside strings and for statement columns
        program = _skip_whitespace(
            _skip_whitespace(ZeroOrMore(statement)) + _skip_whitespace(StringEnd())
        ).parse_with_tabs()

        self.program = program
        self.statement = statement
        self.assignment = assignment
        self.call = call
        self.value = value

    def parse_program(self, text: str, filename: str = "<input>") -> List[CSTNode]:
        """Check a complete Reggae program"""
        if self.debug:
            print(f"Checking {filename} ({len(text)} characters)")
        try:
            result = self.program.parse_string(text, parse_all=True)
        except ParseBaseException as e:
            raise ReggaeErrorHandler(text, filename).enhance_parse_exception(e) from e
        return self._convert_to_cst(result, text, filename)

    def _convert_to_cst(self, parse_result: Any, text: str, filename: str) -> List[CSTNode]:
        """Convert pyparsing results to CST nodes"""
        nodes = []
        for node_type, name, (value_type, value), loc in parse_result:
            span = SourceSpan(filename, lineno(loc, text), col(loc, text))
            node = CSTNode(node_type, name, [CSTNode(value_type, value)], span)
            if self.debug:
                print(f"Statement at {span}: {node}")
            nodes.append(node)
        return nodes


class ReggaeParser:
    """Front end combining the tokenizer and the statement grammar"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = ReggaeGrammar(debug)

    def parse_file(self, filepath: str) -> List[CSTNode]:
        """Check a Reggae source file"""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                content = f.read()
        except UnicodeDecodeError as e:
            raise ReggaeParseError(f"Cannot decode file {filepath}: {e}")
        return self.grammar.parse_program(content, filepath)

    def parse_string(self, text: str, filename: str = "<input>") -> List[CSTNode]:
        """Check Reggae source code from string"""
        return self.grammar.parse_program(text, filename)

    def tokenize(self, text: str, filename: str = "<input>") -> List[Token]:
        """Tokenize Reggae source code"""
        return tokenize(text, filename, self.debug)


def create_parser(debug: bool = False) -> ReggaeParser:
    """Create a Reggae parser"""
    return ReggaeParser(debug=debug)


def create_debug_parser() -> ReggaeParser:
    """Create a Reggae parser with debug enabled"""
    return ReggaeParser(debug=True)


def pretty_print_cst(cst: CSTNode, indent: int = 0) -> str:
    """Pretty print a CST node for debugging"""
    result = "  " * indent + f"{cst.type}"
    if cst.value is not None:
        result += f"({repr(cst.value)})"
    if cst.span is not None:
        result += f"  @ {cst.span}"
    result += "\n"

    for child in cst.children:
        result += pretty_print_cst(child, indent + 1)

    return result

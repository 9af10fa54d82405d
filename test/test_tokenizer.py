"""
Tokenizer tests for Reggae
"""

import pytest
from parsing import ReggaeTokenizer, Token, TokenKind, tokenize
from error_handling import UnterminatedStringError, ReggaeTokenizerError


def ident(text):
  return Token(TokenKind.IDENTIFIER, text)


def string(text):
  return Token(TokenKind.STRING_LITERAL, text)


LPAREN = Token(TokenKind.LEFT_PAREN, '(')
RPAREN = Token(TokenKind.RIGHT_PAREN, ')')
SEMI = Token(TokenKind.SEMICOLON, ';')
EQUALS = Token(TokenKind.EQUALS_OPERATOR, '=')


class TestBasicTokens:
  """Single-character tokens, identifiers and strings"""

  def test_assignment_statement(self):
    assert tokenize('roots x = "hi";') == [ident('roots'), ident('x'), EQUALS, string('hi'), SEMI]

  def test_call_statement(self):
    assert tokenize('sound(x);') == [ident('sound'), LPAREN, ident('x'), RPAREN, SEMI]

  def test_identifier_characters(self):
    """Letters first, then letters, digits and underscores"""
    assert tokenize('a1_b2 Z_') == [ident('a1_b2'), ident('Z_')]

  def test_keywords_are_plain_identifiers(self):
    tokens = tokenize('roots sound')
    assert [t.kind for t in tokens] == [TokenKind.IDENTIFIER, TokenKind.IDENTIFIER]
    assert TokenKind.KEYWORD not in {t.kind for t in tokenize('roots x = y; sound(x);')}

  def test_string_literal_excludes_quotes(self):
    assert tokenize('"hello world"') == [string('hello world')]

  def test_empty_string_literal(self):
    assert tokenize('""') == [string('')]

  def test_string_literal_keeps_special_characters(self):
    assert tokenize('"a;(=)1 #"') == [string('a;(=)1 #')]

  def test_string_literal_spans_lines(self):
    assert tokenize('"one\ntwo"') == [string('one\ntwo')]

  def test_no_escape_processing(self):
    """A backslash does not escape the closing quote"""
    assert tokenize('sound("a\\");') == [ident('sound'), LPAREN, string('a\\'), RPAREN, SEMI]

  def test_adjacent_tokens_without_whitespace(self):
    assert tokenize('roots x="v";sound(x);') == [
        ident('roots'), ident('x'), EQUALS, string('v'), SEMI,
        ident('sound'), LPAREN, ident('x'), RPAREN, SEMI
    ]

  def test_token_str(self):
    assert str(ident('x')) == "Identifier('x')"


class TestWhitespace:
  """Whitespace separates tokens and is otherwise ignored"""

  def test_empty_input(self):
    assert tokenize('') == []

  def test_whitespace_only(self):
    tokenizer = ReggaeTokenizer()
    assert tokenizer.tokenize(' \t\n\r\f\v ') == []
    assert tokenizer.stop_position is None

  def test_mixed_whitespace(self):
    assert tokenize('\n\troots\n  x\t=\r\n"v"  ;\n') == [ident('roots'), ident('x'), EQUALS, string('v'), SEMI]

  def test_whitespace_normalized_round_trip(self):
    source = 'roots   x =\n y ;\n\tsound ( x ) ;'
    tokens = tokenize(source)
    assert ' '.join(t.text for t in tokens) == ' '.join(source.split())

  def test_tokenizing_is_repeatable(self):
    source = 'roots x = "a"; sound(x); unknown("b");'
    assert tokenize(source) == tokenize(source)


class TestSilentStop:
  """Unrecognized characters end tokenization without an error"""

  def test_digit_stops_tokenization(self):
    tokenizer = ReggaeTokenizer()
    assert tokenizer.tokenize('roots x = 1;') == [ident('roots'), ident('x'), EQUALS]
    assert tokenizer.stop_position == 10

  def test_everything_after_the_stop_is_dropped(self):
    tokens = tokenize('sound("a"); 9 sound("b");')
    assert tokens == [ident('sound'), LPAREN, string('a'), RPAREN, SEMI]

  def test_punctuation_stops_tokenization(self):
    assert tokenize('a-b') == [ident('a')]
    assert tokenize('x, y') == [ident('x')]

  def test_non_ascii_letter_stops_tokenization(self):
    assert tokenize('abc é def') == [ident('abc')]

  def test_unterminated_string_after_stop_is_not_seen(self):
    """Once stopped, nothing later can fail"""
    assert tokenize('x # "open') == [ident('x')]

  def test_stop_position_resets_between_calls(self):
    tokenizer = ReggaeTokenizer()
    tokenizer.tokenize('x 1')
    assert tokenizer.stop_position == 2
    tokenizer.tokenize('x y')
    assert tokenizer.stop_position is None


class TestUnterminatedString:
  """Strings with no closing quote fail"""

  def test_unterminated_string(self):
    with pytest.raises(UnterminatedStringError) as exc_info:
      tokenize('roots x = "unterminated')
    assert exc_info.value.line == 1
    assert exc_info.value.column == 11

  def test_location_on_later_line(self):
    with pytest.raises(UnterminatedStringError) as exc_info:
      tokenize('sound("a");\nroots y = "oops', filename='song.rg')
    error = exc_info.value
    assert (error.filename, error.line, error.column) == ('song.rg', 2, 11)
    assert 'song.rg:2:11' in str(error)

  def test_is_a_tokenizer_error(self):
    with pytest.raises(ReggaeTokenizerError):
      tokenize('"')


class TestDebugOutput:
  """Debug mode traces each token"""

  def test_debug_trace(self, capsys):
    ReggaeTokenizer(debug=True).tokenize('x 1')
    out = capsys.readouterr().out
    assert "Token: Identifier('x')" in out
    assert "stopped at offset 2" in out

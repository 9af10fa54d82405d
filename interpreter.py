"""
Reggae Interpreter
Cursor-driven, single-pass executor over the token list: no AST is built,
each statement is interpreted as soon as its tokens are read
"""

from typing import Dict, List, Optional
import pykka

from parsing import Token, TokenKind, KIND_DESCRIPTIONS, tokenize
from stdlib import OutputSink, StreamSink, BufferSink, get_builtin_function
from error_handling import UnexpectedEndOfInputError, UnexpectedTokenError


# ============================================================================
# TOKEN CURSOR
# ============================================================================

class TokenCursor:
  """Index into a token list; reading past the end gives None"""

  def __init__(self, tokens: List[Token]):
    self.tokens = tokens
    self.position = 0

  def peek(self) -> Optional[Token]:
    if self.position >= len(self.tokens):
      return None
    return self.tokens[self.position]

  def next(self) -> Optional[Token]:
    token = self.peek()
    if token is not None:
      self.position += 1
    return token

  def take(self, expected: str) -> Token:
    """Read the next token of any kind, failing if there is none"""
    token = self.next()
    if token is None:
      raise UnexpectedEndOfInputError(expected, self.position)
    return token

  def expect(self, kind: TokenKind) -> Token:
    """Read the next token and require it to be of the given kind"""
    expected = KIND_DESCRIPTIONS[kind]
    position = self.position
    token = self.take(expected)
    if token.kind != kind:
      raise UnexpectedTokenError(expected, token, position)
    return token


# ============================================================================
# STATEMENTS
# ============================================================================

def execute_assignment(cursor: TokenCursor, variables: Dict[str, str], debug: bool = False) -> None:
  """roots NAME = VALUE; with the 'roots' identifier already consumed"""
  name = cursor.take("a variable name")
  cursor.expect(TokenKind.EQUALS_OPERATOR)
  value = cursor.take("a value")
  cursor.expect(TokenKind.SEMICOLON)

  variables[name.text] = value.text
  if debug:
    print(f"Assigned {name.text} = {value.text!r}")


def execute_call(cursor: TokenCursor, callee: str, variables: Dict[str, str],
                 sink: OutputSink, debug: bool = False) -> None:
  """CALLEE ( ARG ) ; with the callee consumed and the '(' still pending"""
  cursor.expect(TokenKind.LEFT_PAREN)
  argument = cursor.take("an argument")
  cursor.expect(TokenKind.RIGHT_PAREN)
  cursor.expect(TokenKind.SEMICOLON)

  builtin = get_builtin_function(callee)
  if builtin is None:
    if debug:
      print(f"Ignoring call to unknown function '{callee}'")
    return

  if debug:
    print(f"Calling {callee}({argument})")
  builtin['func'](argument, variables, sink)


def execute_identifier(cursor: TokenCursor, identifier: Token, variables: Dict[str, str],
                       sink: OutputSink, debug: bool = False) -> None:
  """Dispatch the statement that starts at an identifier"""
  if identifier.text == 'roots':
    execute_assignment(cursor, variables, debug)
    return

  following = cursor.peek()
  if following is not None and following.kind == TokenKind.LEFT_PAREN:
    execute_call(cursor, identifier.text, variables, sink, debug)
  elif debug:
    print(f"Skipping identifier '{identifier.text}'")


def execute_tokens(tokens: List[Token], sink: OutputSink,
                   variables: Optional[Dict[str, str]] = None,
                   debug: bool = False) -> Dict[str, str]:
  """
  Walk the tokens once, left to right, running each statement as it is met.
  Tokens that cannot start a statement are skipped. Returns the variable table,
  which is updated in place when one is passed in.
  """
  if variables is None:
    variables = {}

  cursor = TokenCursor(tokens)
  token = cursor.next()
  while token is not None:
    if token.kind == TokenKind.IDENTIFIER:
      execute_identifier(cursor, token, variables, sink, debug)
    elif debug:
      print(f"Skipping token {token}")
    token = cursor.next()

  return variables


# ============================================================================
# INTERPRETER
# ============================================================================

class ReggaeInterpreter:
  """Runs Reggae source against one output sink; every run starts from scratch"""

  def __init__(self, sink: OutputSink, filename: str = "<input>", debug: bool = False):
    self.sink = sink
    self.filename = filename
    self.debug = debug
    self._tokens: List[Token] = []
    self._variables: Dict[str, str] = {}

  @property
  def tokens(self) -> List[Token]:
    return list(self._tokens)

  @property
  def variables(self) -> Dict[str, str]:
    return dict(self._variables)

  def clear(self) -> None:
    """Drop the previous run's tokens and variables and empty the sink"""
    self._tokens = []
    self._variables = {}
    self.sink.clear()

  def run(self, source: str) -> None:
    """Reset, tokenize and execute; errors propagate and earlier output stays"""
    self.clear()
    self._tokens = tokenize(source, self.filename, self.debug)
    if self.debug:
      print(f"Executing {len(self._tokens)} tokens")
    execute_tokens(self._tokens, self.sink, self._variables, self.debug)


def create_interpreter(sink: Optional[OutputSink] = None, debug: bool = False,
                       filename: str = "<input>") -> ReggaeInterpreter:
  """Factory function returning an interpreter writing to sink (stdout by default)"""
  return ReggaeInterpreter(sink if sink is not None else StreamSink(), filename, debug)


def create_debug_interpreter(sink: Optional[OutputSink] = None) -> ReggaeInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(sink, debug=True)


# ============================================================================
# SESSION ACTOR (Using Pykka)
# ============================================================================

class InterpreterActor(pykka.ThreadingActor):
  """Actor owning one interpreter, so runs from different threads never interleave"""

  def __init__(self, sink: OutputSink, debug: bool = False):
    super().__init__()
    self.interpreter = create_interpreter(sink, debug)

  def run(self, source: str) -> None:
    self.interpreter.run(source)

  def variables(self) -> Dict[str, str]:
    return self.interpreter.variables


def start_session(sink: Optional[OutputSink] = None, debug: bool = False) -> pykka.ActorRef:
  """Start an interpreter actor; output goes to a BufferSink unless a sink is given"""
  return InterpreterActor.start(sink if sink is not None else BufferSink(), debug)


def run_in_session(actor_ref: pykka.ActorRef, source: str) -> None:
  """Run source in the session, blocking until done; the run's error is re-raised here"""
  actor_ref.proxy().run(source).get()


def session_variables(actor_ref: pykka.ActorRef) -> Dict[str, str]:
  """Variable table left by the session's last run"""
  return actor_ref.proxy().variables().get()


def stop_session(actor_ref: pykka.ActorRef) -> None:
  """Stop the session actor"""
  actor_ref.stop()

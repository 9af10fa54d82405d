"""
Reggae Standard Library
Output sinks and the built-in functions callable from a call statement
"""

from typing import Dict, Callable, List, Optional, TextIO
import sys

from parsing import Token, TokenKind


# ============================================================================
# OUTPUT SINKS
# ============================================================================

class OutputSink:
  """Append-only text output with a full reset; the interpreter never reads it back"""

  def write(self, text: str) -> None:
    raise NotImplementedError

  def clear(self) -> None:
    raise NotImplementedError


class StreamSink(OutputSink):
  """Sink writing to a text stream (stdout by default)"""

  def __init__(self, stream: Optional[TextIO] = None):
    self.stream = stream if stream is not None else sys.stdout

  def write(self, text: str) -> None:
    self.stream.write(text)

  def clear(self) -> None:
    # Text already sent to a stream cannot be taken back
    self.stream.flush()


class BufferSink(OutputSink):
  """Sink keeping everything written since the last clear in memory"""

  def __init__(self):
    self._parts: List[str] = []

  def write(self, text: str) -> None:
    self._parts.append(text)

  def clear(self) -> None:
    self._parts = []

  def getvalue(self) -> str:
    return ''.join(self._parts)


# ============================================================================
# BUILT-IN FUNCTIONS
# ============================================================================

def reggae_sound(argument: Token, variables: Dict[str, str], sink: OutputSink) -> None:
  """Write a variable's value or a string literal, then a newline"""
  if argument.kind == TokenKind.IDENTIFIER:
    sink.write(variables.get(argument.text, ''))
  elif argument.kind == TokenKind.STRING_LITERAL:
    sink.write(argument.text)
  sink.write('\n')


def make_builtin_function(name: str, func: Callable, signature: str = "") -> Dict:
  """Create a built-in function value"""
  return {
      'type': 'builtin_function',
      'name': name,
      'func': func,
      'signature': signature
  }


# Built-in function registry, keyed by callee name
BUILTIN_FUNCTIONS: Dict[str, Dict] = {
    "sound": make_builtin_function("sound", reggae_sound, "sound(identifier | string);"),
}


def get_builtin_function(name: str) -> Optional[Dict]:
  """Get a built-in function by name, None for unknown names"""
  return BUILTIN_FUNCTIONS.get(name)


def list_builtin_functions() -> List[str]:
  """List all available built-in functions"""
  return list(BUILTIN_FUNCTIONS.keys())

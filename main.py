"""
Reggae Programming Language - Main Entry Point
roots to assign, sound to play
"""

import sys
import argparse
from pathlib import Path
from typing import List, Optional
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from parsing import create_parser, create_debug_parser, pretty_print_cst, ReggaeTokenizer
from interpreter import create_interpreter, start_session, run_in_session, session_variables, stop_session
from stdlib import StreamSink, list_builtin_functions
from error_handling import ReggaeTokenizerError, ReggaeRuntimeError, ReggaeParseError

VERSION = 'Reggae v0.1.0'


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='reggae',
      description='Reggae - a tiny language of roots and sound',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.rg             # Run a Reggae script
  %(prog)s -i                    # Interactive mode
  %(prog)s --tokens script.rg    # Show the token sequence
  %(prog)s --parse script.rg     # Check statements against the grammar
  %(prog)s --debug script.rg     # Run with debug output
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Reggae script file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--tokens',
      action='store_true',
      help='Tokenize file and show tokens (for debugging)'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Check file against the statement grammar and show statements'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def read_script(script_path: str) -> str:
  """Read a script, exiting with a hint when it cannot be read"""
  try:
    with open(script_path, 'r', encoding='utf-8') as f:
      return f.read()
  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found")
    print("  Hint: Check the file path and make sure the file exists")
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'")
    print("  Hint: Make sure you have read permissions for this file")
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}")
    print("  Hint: Make sure the file is a text file with UTF-8 encoding")
  sys.exit(1)


def show_tokens(script_path: str, debug: bool = False) -> None:
  """Tokenize a Reggae script file and show the tokens"""
  source = read_script(script_path)
  tokenizer = ReggaeTokenizer(script_path, debug)
  try:
    tokens = tokenizer.tokenize(source)
  except ReggaeTokenizerError as e:
    print(f"Tokenizer error: {e}")
    sys.exit(1)

  print(f"{len(tokens)} tokens:")
  for i, token in enumerate(tokens):
    print(f"  {i:4d}  {token}")

  if tokenizer.stop_position is not None:
    print(f"Tokenizer stopped at offset {tokenizer.stop_position} "
          f"on {source[tokenizer.stop_position]!r}; the rest of the input is ignored")


def parse_file(script_path: str, debug: bool = False) -> None:
  """Check a Reggae script file against the grammar and show its statements"""
  parser = create_debug_parser() if debug else create_parser()
  source = read_script(script_path)

  try:
    nodes = parser.parse_string(source, script_path)
  except ReggaeParseError as e:
    print(f"Parse error in '{script_path}':\n{e}")
    sys.exit(1)

  print(f"Parsed {len(nodes)} statements:")
  print("=" * 50)
  for node in nodes:
    print(pretty_print_cst(node), end='')


def run_script_file(script_path: str, debug: bool = False) -> None:
  """Run a Reggae script file, sound output going to stdout"""
  source = read_script(script_path)
  interpreter = create_interpreter(StreamSink(sys.stdout), debug, script_path)

  try:
    interpreter.run(source)
  except ReggaeTokenizerError as e:
    print(f"Tokenizer error: {e}")
    sys.exit(1)
  except ReggaeRuntimeError as e:
    print(f"\n{'='*70}")
    print(f"Runtime Error in '{script_path}'")
    print(f"{'='*70}")
    print(f"\nError: {e.message}")

    if debug:
      variables = interpreter.variables
      print("\nVariables at error:")
      if variables:
        for name, value in variables.items():
          print(f"  {name} = {value!r}")
      else:
        print("  (none)")

    print(f"\n{'='*70}\n")
    sys.exit(1)

  if debug:
    print(f"\nFinal variables ({len(interpreter.variables)} bindings):")
    for name, value in interpreter.variables.items():
      print(f"  {name} = {value!r}")


def setup_readline():
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser("~/.reggae_history")
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet, or permission denied

  readline.set_history_length(1000)

  completions = [
      "roots",
      *list_builtin_functions(),
      # REPL commands
      ":run", ":tokens", ":parse", ":env", ":clear", ":help", "exit."
  ]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(save_history, history_file)


def save_history(history_file: str) -> None:
  try:
    readline.write_history_file(history_file)
  except OSError as e:
    print(f"Could not save history to {history_file}: {e}")


def print_repl_help() -> None:
  print("REPL Commands:")
  print("  :run      - Run the whole buffer (output is reset first)")
  print("  :tokens   - Show the buffer's tokens")
  print("  :parse    - Check the buffer against the grammar")
  print("  :env      - Show variables left by the last run")
  print("  :clear    - Empty the buffer")
  print("  :help     - Show this help")
  print("  exit.     - Exit REPL")
  print()
  print("Language:")
  print('  roots x = "hello";   - Assign a variable')
  print('  sound(x);            - Print a variable')
  print('  sound("direct");     - Print a string')


def run_interactive_mode(debug: bool = False) -> None:
  """Run Reggae in interactive mode: lines build a buffer, :run plays it"""
  print(f"{VERSION} - Interactive Mode")
  print("Type lines of code, ':run' to run them, 'exit.' to quit, ':help' for commands")
  if READLINE_AVAILABLE:
    print("Readline enabled: Use ↑/↓ for history, Tab for completion")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()

  parser = create_debug_parser() if debug else create_parser()
  session = start_session(StreamSink(sys.stdout), debug)
  buffer: List[str] = []

  try:
    while True:
      try:
        line = input("reggae> ")
      except (KeyboardInterrupt, EOFError):
        print("\nGoodbye!")
        break

      command = line.strip()
      if command == "exit.":
        break

      if command == ":help":
        print_repl_help()
      elif command == ":clear":
        buffer = []
        print("Buffer cleared")
      elif command == ":env":
        variables = session_variables(session)
        if variables:
          for name, value in variables.items():
            print(f"  {name} = {value!r}")
        else:
          print("  (no variables)")
      elif command == ":tokens":
        try:
          for token in parser.tokenize('\n'.join(buffer)):
            print(f"  {token}")
        except ReggaeTokenizerError as e:
          print(f"Tokenizer error: {e}")
      elif command == ":parse":
        try:
          for node in parser.parse_string('\n'.join(buffer)):
            print(pretty_print_cst(node), end='')
        except ReggaeParseError as e:
          print(e)
      elif command == ":run":
        try:
          run_in_session(session, '\n'.join(buffer))
        except ReggaeTokenizerError as e:
          print(f"Tokenizer error: {e}")
        except ReggaeRuntimeError as e:
          print(f"\nRuntime Error:\n  {e.message}\n")
      elif command:
        buffer.append(line)
  finally:
    stop_session(session)


def show_language_info() -> None:
  """Show Reggae language information"""
  print("Reggae Programming Language")
  print("=" * 50)
  print("A tiny command language with:")
  print("• roots NAME = VALUE;  assignments")
  print("• sound(ARG);          output")
  print()


def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for Reggae"""
  if argv is None:
    argv = sys.argv[1:]

  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if not argv:
    show_language_info()
    print("Starting interactive mode...")
    print("Use 'reggae --help' for command line options")
    print()
    run_interactive_mode(debug=False)
    return

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)

    if args.tokens:
      show_tokens(args.script, debug=args.debug)
    elif args.parse:
      parse_file(args.script, debug=args.debug)
    else:
      run_script_file(args.script, debug=args.debug)

  elif args.interactive:
    run_interactive_mode(debug=args.debug)

  else:
    arg_parser.print_help()
    print()
    show_language_info()


if __name__ == "__main__":
  main()

"""
Error handling for the Reggae interpreter
Exception hierarchy plus enhanced messages for grammar check failures
"""

from typing import List, Optional, Dict, TYPE_CHECKING
from pyparsing import ParseBaseException
import re

if TYPE_CHECKING:
    from parsing import Token


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_parse_error(
    message: str,
    location: int,
    line: int,
    column: int,
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable parse error structure"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'expected': expected or [],
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


def format_parse_error(error: Dict) -> str:
    """Format parse error as string"""
    error_msg = f"Parse error at line {error['line']}, column {error['column']}:\n"
    error_msg += f"  {error['message']}\n"

    if error['expected']:
        error_msg += f"  Expected: {', '.join(error['expected'])}\n"

    if error['got']:
        error_msg += f"  Got: {error['got']}\n"

    if error['context']:
        error_msg += f"  Context:\n{error['context']}\n"

    if error['suggestions']:
        error_msg += "  Suggestions:\n"
        for suggestion in error['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")

    return '\n'.join(context_parts)


def extract_expected(exc: ParseBaseException) -> List[str]:
    """Extract expected tokens from exception"""
    expected = []

    # pyparsing only reports this in the message text
    msg = str(exc)
    if "Expected" in msg:
        expected_match = re.search(r"Expected\s+(.+?)(?:,\s+found|\s+\(at|$)", msg)
        if expected_match:
            expected.append(expected_match.group(1))

    return expected if expected else ["a statement"]


def extract_got(source_text: str, line_num: int, col_num: int) -> str:
    """Extract what was actually found at the error location"""
    lines = source_text.split('\n')

    if 1 <= line_num <= len(lines):
        error_line = lines[line_num - 1]
        if col_num <= len(error_line):
            start = max(0, col_num - 1)
            end = min(len(error_line), col_num + 10)
            got_text = error_line[start:end].strip()
            if got_text:
                return f"'{got_text}'"
        if line_num == len(lines):
            return "end of input"
        return "end of line"
    return "end of input"


def generate_suggestions(exc: ParseBaseException, got: str, expected: List[str]) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []
    expected_text = str(expected)

    if "';'" in expected_text:
        suggestions.append("Every statement ends with a semicolon")

    if "')'" in expected_text:
        suggestions.append("Calls take exactly one argument: sound(x);")

    if "'='" in expected_text:
        suggestions.append("Assignments look like: roots name = value;")

    if got.startswith("'") and got[1:2].isdigit():
        suggestions.append("Numbers are not supported - quote the value as a string")

    if "'" in got[1:-1]:
        suggestions.append("Strings use double quotes")

    return suggestions


def enhance_parse_exception_dict(exc: ParseBaseException, source_text: str) -> Dict:
    """Convert pyparsing exception to enhanced Reggae error dict"""
    line_num = exc.lineno
    col_num = exc.column

    context = get_context_lines(source_text, line_num, col_num)
    expected = extract_expected(exc)
    got = extract_got(source_text, line_num, col_num)
    suggestions = generate_suggestions(exc, got, expected)

    return make_parse_error(
        message=exc.msg,
        location=exc.loc,
        line=line_num,
        column=col_num,
        expected=expected,
        got=got,
        context=context,
        suggestions=suggestions
    )


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class ReggaeError(Exception):
    """Base class for every error raised by the interpreter"""
    pass


class ReggaeTokenizerError(ReggaeError):
    """Reggae tokenization error"""
    pass


class UnterminatedStringError(ReggaeTokenizerError):
    """A string literal was still open when the input ended"""

    def __init__(self, filename: str = "<input>", line: int = 0, column: int = 0):
        self.filename = filename
        self.line = line
        self.column = column
        super().__init__(f"Unterminated string literal starting at {filename}:{line}:{column}")


class ReggaeRuntimeError(ReggaeError):
    """Error raised while executing a token sequence"""

    def __init__(self, message: str, position: int = 0):
        self.message = message
        self.position = position
        super().__init__(message)


class UnexpectedEndOfInputError(ReggaeRuntimeError):
    """A statement needed another token but none remained"""

    def __init__(self, expected: str, position: int = 0):
        self.expected = expected
        super().__init__(f"Unexpected end of input: expected {expected}", position)


class UnexpectedTokenError(ReggaeRuntimeError):
    """A statement needed a token of one kind and found another"""

    def __init__(self, expected: str, token: 'Token', position: int = 0):
        self.expected = expected
        self.token = token
        super().__init__(
            f"Unexpected token '{token.text}' at token {position}: expected {expected}",
            position
        )


class ReggaeParseError(ReggaeError):
    """Grammar check failure with detailed context"""
    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0,
                 expected: Optional[List[str]] = None, got: Optional[str] = None,
                 context: Optional[str] = None, suggestions: Optional[List[str]] = None):
        self.message = message
        self.location = location
        self.line = line
        self.column = column
        self.expected = expected or []
        self.got = got
        self.context = context
        self.suggestions = suggestions or []
        super().__init__(message)

    def __str__(self) -> str:
        error_dict = make_parse_error(
            self.message, self.location, self.line, self.column,
            self.expected, self.got, self.context, self.suggestions
        )
        return format_parse_error(error_dict)


class ReggaeErrorHandler:
    """Turns pyparsing exceptions into ReggaeParseError for one source text"""
    def __init__(self, source_text: str, filename: str = "<input>"):
        self.source_text = source_text
        self.filename = filename

    def enhance_parse_exception(self, exc: ParseBaseException) -> ReggaeParseError:
        """Convert pyparsing exception to enhanced Reggae error"""
        error_dict = enhance_parse_exception_dict(exc, self.source_text)
        return ReggaeParseError(
            message=f"{self.filename}: {error_dict['message']}",
            location=error_dict['location'],
            line=error_dict['line'],
            column=error_dict['column'],
            expected=error_dict['expected'],
            got=error_dict['got'],
            context=error_dict['context'],
            suggestions=error_dict['suggestions']
        )

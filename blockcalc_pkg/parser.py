"""Input parsing module.

This module handles:
- Tokenizing a header line into word and symbol tokens
- Line sources (text streams, the interactive console)
- Assembling lines into blocks (single lines or marked multi-line blocks)
- Parsing integer and real literals into values
"""

from __future__ import annotations

import sys
from typing import Callable, Optional, TextIO

from . import config
from .logging_config import get_logger
from .types import ParseError

logger = get_logger("parser")

# A line source takes the prompt to show and returns the next line without
# its line terminator, or None once the input is exhausted.
LineSource = Callable[[str], Optional[str]]


def tokenize(line: str) -> list[str]:
    """Split a line into tokens.

    Whitespace separates tokens, and every symbol character (anything that is
    neither whitespace nor an ASCII word character) is a token of its own.

    Args:
        line: One line of text (e.g., "+ 45", "store x")

    Returns:
        List of tokens (e.g., ["+", "45"]); an empty or blank line gives [""]
    """
    tokens = config.TOKEN_SPLIT_REGEX.sub(r" \1 ", line).split()
    return tokens or [""]


def stream_source(
    stream: TextIO, out: TextIO | None = None, prompts: bool = True
) -> LineSource:
    """Build a line source reading from a text stream.

    Args:
        stream: Stream to read from (stdin, an open file, a StringIO)
        out: Where prompts are written (default: stdout at call time)
        prompts: Whether to write prompts at all
    """

    def read_line(prompt: str) -> str | None:
        if prompts:
            target = out or sys.stdout
            target.write(prompt)
            target.flush()
        line = stream.readline()
        if line == "":
            return None
        return line.rstrip("\r\n")

    return read_line


def console_source() -> LineSource:
    """Build a line source reading from the terminal via input()."""
    try:
        import readline  # noqa: F401
    except (ImportError, ModuleNotFoundError):
        # readline not available on Windows - that's fine
        pass

    def read_line(prompt: str) -> str | None:
        try:
            return input(prompt)
        except EOFError:
            return None

    return read_line


class BlockReader:
    """Assembles lines from a line source into blocks.

    A block is either a single line, or a header line ending in the block
    marker followed by tab-indented continuation lines::

        add :
        <TAB>1 2
        <TAB>3 4
        <blank line>

    The returned block holds the header without its marker (and without the
    whitespace around the marker), followed by the continuation lines with
    exactly one leading tab removed.
    """

    def __init__(self, source: LineSource, err: TextIO | None = None):
        self.source = source
        self.err = err

    def _warn(self, message: str) -> None:
        print(message, file=self.err or sys.stderr)

    def read_header(self) -> str | None:
        line = self.source(config.PROMPT)
        if line is not None and line.startswith(config.CONTINUATION_PREFIX):
            self._warn(f"Unexpected TAB is found: {line}")
            return ""
        return line

    def next_block(self) -> list[str] | None:
        """Read the next block.

        Returns:
            The block's lines, or None if the input was exhausted before a
            header line could be read
        """
        line = self.read_header()
        if line is None:
            return None

        header = line.rstrip()
        if not header.endswith(config.BLOCK_MARKER):
            return [line]

        block = [header[: -len(config.BLOCK_MARKER)].rstrip()]
        while True:
            line = self.source(config.CONTINUATION_PROMPT)
            if line is None:
                logger.debug("Input ended inside block %r", block[0])
                break
            if not line.startswith(config.CONTINUATION_PREFIX):
                if line:
                    self._warn(f"Warn: ignoring extra line: {line}")
                break
            block.append(line[len(config.CONTINUATION_PREFIX):])
        return block

    def __iter__(self):
        while True:
            block = self.next_block()
            if block is None:
                return
            yield block


def parse_int(text: str) -> int:
    """Parse a decimal integer literal of any size.

    Raises:
        ParseError: If text is not an optionally signed run of digits
    """
    if not config.INT_LITERAL_RE.match(text):
        raise ParseError(f"Invalid integer literal: {text!r}")
    return int(text)


def parse_real(text: str) -> float:
    """Parse a real number literal.

    Raises:
        ParseError: If text is not a valid floating point literal
    """
    try:
        return float(text)
    except ValueError:
        raise ParseError(f"Invalid number: {text!r}") from None

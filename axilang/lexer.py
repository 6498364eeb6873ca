# coding=utf-8
# lexer.py
# Part of AxiLang, a scripting language for the AxiDraw
#
# Copyright 2026 The AxiLang Authors
#
# The MIT License (MIT)
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
lexer.py

Convert AxiLang source text into positioned tokens.

Tokens are runs of non-whitespace characters. "%" starts a comment that
runs to the end of the line, and "%= ... =%" is a block comment that may
span several lines. Comment markers are only recognized where a token
would begin.

Two ways of use:
    Streaming: Lexer(lines) reads lines from any iterable (such as an open
        file) as they are needed; next_token() returns END_OF_FILE once
        the lines run out.
    Single-line: Lexer().lex_line(text) tokenizes one line of interactive
        input. An open block comment carries over to the next call.
"""

import logging
import string

from axilang.tokens import KEYWORDS, Position, PositionedToken, Token, TokenType
from axilang.diagnostics import CommandError, warn

logger = logging.getLogger(__name__)

LINE_COMMENT = '%'
BLOCK_COMMENT_START = '%='
BLOCK_COMMENT_END = '=%'
QUOTE = '"'


def classify(text):
    '''Return the Token for a run of non-whitespace text'''
    token_type = KEYWORDS.get(text)
    if token_type is not None:
        return Token(token_type, text)
    if all(char in string.digits for char in text):
        return Token(TokenType.NUMBER, text)
    if text.startswith(QUOTE):
        if len(text) > 1 and text.endswith(QUOTE):
            return Token(TokenType.STRING, text[1:-1])
        return Token(TokenType.STRING, text[1:])
    return Token(TokenType.UNKNOWN, text)


class Lexer:
    """
    Lexer: produce PositionedTokens from lines of AxiLang source.

    Unknown tokens are returned as UNKNOWN and also recorded, as
    CommandError objects, in `diagnostics`. Callers decide whether
    those are fatal.
    """

    def __init__(self, lines=None, source_name=None):
        self.lines = None if lines is None else iter(lines)
        self.source_name = source_name
        self.line = ""
        self.line_number = 0
        self.line_pos = 0
        self.in_comment = False # Inside a block comment
        self.comment_token = None # Where the open block comment began
        self.finished = False
        self.diagnostics = []

    def next_token(self):
        '''Return the next PositionedToken; END_OF_FILE once the input is used up'''
        while True:
            if self.line_pos >= len(self.line):
                if self.finished or not self._read_line():
                    return self._end_of_file()
                continue

            if self.in_comment:
                close = self.line.find(BLOCK_COMMENT_END, self.line_pos)
                if close < 0:
                    self.line_pos = len(self.line)
                else:
                    self.line_pos = close + len(BLOCK_COMMENT_END)
                    self.in_comment = False
                    self.comment_token = None
                continue

            char = self.line[self.line_pos]
            if char.isspace():
                self.line_pos += 1
                continue

            if self.line.startswith(BLOCK_COMMENT_START, self.line_pos):
                self.comment_token = self._positioned(Token(TokenType.UNKNOWN, BLOCK_COMMENT_START),
                                                      self.line_pos, self.line_pos + 2)
                self.in_comment = True
                self.line_pos += len(BLOCK_COMMENT_START)
                continue

            if char == LINE_COMMENT:
                self.line_pos = len(self.line)
                continue

            start = self.line_pos
            while self.line_pos < len(self.line) and not self.line[self.line_pos].isspace():
                self.line_pos += 1
            return self._make_token(self.line[start:self.line_pos], start)

    def tokens(self):
        '''Iterate over all remaining tokens, ending with (and including) END_OF_FILE'''
        while True:
            positioned_token = self.next_token()
            yield positioned_token
            if positioned_token.type is TokenType.END_OF_FILE:
                return

    def lex_line(self, text, line_number=None):
        '''
        Tokenize one line of input, never reading beyond it.
        Returns a list of PositionedTokens ending with END_OF_FILE.
        Line numbers count up from 1 on each call unless `line_number` is given.
        '''
        if self.lines is not None:
            raise ValueError("lex_line() is only available on a single-line lexer")
        self.line = text.rstrip("\r\n")
        self.line_number = self.line_number + 1 if line_number is None else line_number
        self.line_pos = 0
        self.finished = False
        diagnostic_count = len(self.diagnostics)

        result = list(self.tokens())
        for error in self.diagnostics[diagnostic_count:]:
            logger.debug(error.describe())
        return result

    def _read_line(self):
        '''Load the next source line. Returns False if there is none.'''
        if self.lines is None:
            return False
        raw_line = next(self.lines, None)
        if raw_line is None:
            return False
        self.line = raw_line.rstrip("\r\n")
        self.line_number += 1
        self.line_pos = 0
        return True

    def _end_of_file(self):
        if self.in_comment and self.lines is not None and not self.finished:
            warn("Block comment is never closed with '=%'.", self.comment_token, logger)
        self.finished = True
        return self._positioned(Token(TokenType.END_OF_FILE, ""), len(self.line), len(self.line))

    def _make_token(self, text, start):
        positioned_token = self._positioned(classify(text), start, self.line_pos)
        if positioned_token.type is TokenType.UNKNOWN:
            self.diagnostics.append(CommandError(f"Unknown token '{text}'.", positioned_token))
        return positioned_token

    def _positioned(self, token, start, end):
        position = Position(self.line, self.line_number, start, end, self.source_name)
        return PositionedToken(token, position)

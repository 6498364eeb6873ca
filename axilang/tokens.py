# coding=utf-8
# tokens.py
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
tokens.py

Token types, positioned tokens and the token stream used by the
AxiLang lexer and dispatcher.
"""

import enum
from dataclasses import dataclass


class TokenType(enum.Enum):
    """ Every kind of token the lexer can produce """

    # General commands
    MODE = enum.auto()
    OPTS = enum.auto()
    END_OPTS = enum.auto()
    UOPTS = enum.auto()
    END_UOPTS = enum.auto()

    # Modes
    PLOT_MODE = enum.auto()
    INTERACTIVE_MODE = enum.auto()

    # General options
    ACCELERATION = enum.auto()
    PEN_UP_POSITION = enum.auto()
    PEN_DOWN_POSITION = enum.auto()
    PEN_UP_DELAY = enum.auto()
    PEN_DOWN_DELAY = enum.auto()
    PEN_UP_SPEED = enum.auto()
    PEN_DOWN_SPEED = enum.auto()
    PEN_UP_RATE = enum.auto()
    PEN_DOWN_RATE = enum.auto()
    MODEL = enum.auto()
    PORT = enum.auto()

    # Interactive options
    UNITS = enum.auto()

    # Interactive commands
    CONNECT = enum.auto()
    DISCONNECT = enum.auto()
    PEN_UP = enum.auto()
    PEN_DOWN = enum.auto()
    PEN_TOGGLE = enum.auto()
    HOME = enum.auto()
    GO_TO = enum.auto()
    GO_TO_RELATIVE = enum.auto()
    DRAW = enum.auto()
    WAIT = enum.auto()
    GET_POSITION = enum.auto()
    GET_PEN = enum.auto()

    # Plot commands
    SET_PLOT = enum.auto()
    PLOT = enum.auto()

    # Data types
    NUMBER = enum.auto()
    STRING = enum.auto()

    # Other
    UNKNOWN = enum.auto()
    END_OF_FILE = enum.auto()


KEYWORDS = {
    'MODE':       TokenType.MODE,
    'OPTS':       TokenType.OPTS,
    'END_OPTS':   TokenType.END_OPTS,
    'UOPTS':      TokenType.UOPTS,
    'END_UOPTS':  TokenType.END_UOPTS,
    'P':          TokenType.PLOT_MODE,
    'I':          TokenType.INTERACTIVE_MODE,
    'ACCEL':      TokenType.ACCELERATION,
    'PENU_POS':   TokenType.PEN_UP_POSITION,
    'PEND_POS':   TokenType.PEN_DOWN_POSITION,
    'PENU_DELAY': TokenType.PEN_UP_DELAY,
    'PEND_DELAY': TokenType.PEN_DOWN_DELAY,
    'PENU_SPEED': TokenType.PEN_UP_SPEED,
    'PEND_SPEED': TokenType.PEN_DOWN_SPEED,
    'PENU_RATE':  TokenType.PEN_UP_RATE,
    'PEND_RATE':  TokenType.PEN_DOWN_RATE,
    'MODEL':      TokenType.MODEL,
    'PORT':       TokenType.PORT,
    'UNITS':      TokenType.UNITS,
    'CONNECT':    TokenType.CONNECT,
    'DISCONNECT': TokenType.DISCONNECT,
    'PENUP':      TokenType.PEN_UP,
    'PENDOWN':    TokenType.PEN_DOWN,
    'PENTOGGLE':  TokenType.PEN_TOGGLE,
    'HOME':       TokenType.HOME,
    'GOTO':       TokenType.GO_TO,
    'GOTO_REL':   TokenType.GO_TO_RELATIVE,
    'DRAW':       TokenType.DRAW,
    'WAIT':       TokenType.WAIT,
    'GETPOS':     TokenType.GET_POSITION,
    'GETPEN':     TokenType.GET_PEN,
    'SETPLOT':    TokenType.SET_PLOT,
    'PLOT':       TokenType.PLOT,
}


@dataclass(frozen=True)
class Token:
    ''' A token type and its text. String tokens hold the text without quotes. '''
    type: TokenType
    text: str

    @property
    def type_name(self):
        return self.type.name


@dataclass(frozen=True)
class Position:
    '''
    Where a token came from: the full source line, its line number, and
    the column span [start, end) of the token within that line.
    '''
    line: str
    line_number: int
    start: int
    end: int
    source: str = None  # File name; None for interactive input

    @property
    def width(self):
        return self.end - self.start


@dataclass(frozen=True)
class PositionedToken:
    ''' A token together with its own position record '''
    token: Token
    position: Position

    @property
    def type(self):
        return self.token.type

    @property
    def text(self):
        return self.token.text

    def same_line(self, other):
        ''' True if both tokens were lexed from the same source line '''
        return self.position.source == other.position.source and\
            self.position.line_number == other.position.line_number and\
            self.position.line == other.position.line


class FileState:
    """
    FileState: the ordered stream of positioned tokens handed to the dispatcher.

    The stream grows as lines are lexed. End-of-file tokens are not stored;
    appending one marks the stream as ended, after which nothing more may be
    appended. An interactive session never ends its stream.
    """

    def __init__(self, tokens=None):
        self.entries = []
        self.ended = False
        if tokens is not None:
            self.extend(tokens)

    def append(self, positioned_token):
        '''Add one token to the end of the stream'''
        if self.ended:
            raise ValueError("Cannot append tokens after the end of file.")
        if positioned_token.type is TokenType.END_OF_FILE:
            self.ended = True
            return
        self.entries.append(positioned_token)

    def extend(self, positioned_tokens):
        for positioned_token in positioned_tokens:
            self.append(positioned_token)

    def __len__(self):
        return len(self.entries)

    def __getitem__(self, index):
        return self.entries[index]

    def __iter__(self):
        return iter(self.entries)

    @property
    def tokens(self):
        return [entry.token for entry in self.entries]

    @property
    def lines(self):
        return [entry.position.line for entry in self.entries]

    @property
    def line_numbers(self):
        return [entry.position.line_number for entry in self.entries]

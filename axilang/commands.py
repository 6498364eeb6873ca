# coding=utf-8
# commands.py
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
commands.py

The AxiLang command set. Each command is a frozen dataclass holding its
already-validated arguments and the token it was read from (`anchor`),
which is used to point at the command in diagnostics.

Also defines the option names accepted within OPTS and UOPTS blocks.
"""

from dataclasses import dataclass
from typing import Tuple

from axilang.driver import Mode
from axilang.tokens import PositionedToken, TokenType


@dataclass(frozen=True)
class OptionSpec:
    ''' One option name, the Driver setter it maps to, and its argument '''
    keyword: str
    setter: str
    description: str # Used in "Invalid ... specified." messages
    value_type: TokenType = TokenType.NUMBER
    interactive_only: bool = False
    value_range: Tuple[int, int] = None # Inclusive limits, if any

    @property
    def usage(self):
        if self.value_type is TokenType.STRING:
            return f'{self.keyword} "<VALUE>"'
        return f"{self.keyword} <VALUE>"


OPTIONS = {
    TokenType.ACCELERATION:
        OptionSpec('ACCEL', 'set_acceleration', 'acceleration'),
    TokenType.PEN_UP_POSITION:
        OptionSpec('PENU_POS', 'set_pen_up_position', 'raised pen position'),
    TokenType.PEN_DOWN_POSITION:
        OptionSpec('PEND_POS', 'set_pen_down_position', 'lowered pen position'),
    TokenType.PEN_UP_DELAY:
        OptionSpec('PENU_DELAY', 'set_pen_up_delay', 'pen raise delay'),
    TokenType.PEN_DOWN_DELAY:
        OptionSpec('PEND_DELAY', 'set_pen_down_delay', 'pen lower delay'),
    TokenType.PEN_UP_SPEED:
        OptionSpec('PENU_SPEED', 'set_pen_up_speed', 'pen raise speed'),
    TokenType.PEN_DOWN_SPEED:
        OptionSpec('PEND_SPEED', 'set_pen_down_speed', 'pen lower speed'),
    TokenType.PEN_UP_RATE:
        OptionSpec('PENU_RATE', 'set_pen_up_rate', 'pen raise rate'),
    TokenType.PEN_DOWN_RATE:
        OptionSpec('PEND_RATE', 'set_pen_down_rate', 'pen lower rate'),
    TokenType.MODEL:
        OptionSpec('MODEL', 'set_model', 'model', value_range=(1, 7)),
    TokenType.PORT:
        OptionSpec('PORT', 'set_port', 'port', value_type=TokenType.STRING),
    TokenType.UNITS:
        OptionSpec('UNITS', 'set_units', 'units', interactive_only=True, value_range=(0, 2)),
}


def option_names(interactive):
    '''Comma-separated option keywords, for usage messages'''
    return ", ".join(spec.keyword for spec in OPTIONS.values()
                     if interactive or not spec.interactive_only)


@dataclass(frozen=True)
class Command:
    ''' Base class of all commands '''
    anchor: PositionedToken

    @property
    def name(self):
        return self.anchor.text


@dataclass(frozen=True)
class OptionSetting:
    spec: OptionSpec
    value: object
    token: PositionedToken # The option name


@dataclass(frozen=True)
class SetMode(Command):
    mode: Mode


@dataclass(frozen=True)
class SetOptions(Command):
    ''' An OPTS block, or a UOPTS block when `update` is True '''
    settings: Tuple[OptionSetting, ...]
    update: bool = False


@dataclass(frozen=True)
class Connect(Command):
    pass


@dataclass(frozen=True)
class Disconnect(Command):
    pass


@dataclass(frozen=True)
class PenUp(Command):
    pass


@dataclass(frozen=True)
class PenDown(Command):
    pass


@dataclass(frozen=True)
class PenToggle(Command):
    pass


@dataclass(frozen=True)
class Home(Command):
    pass


@dataclass(frozen=True)
class GoTo(Command):
    x: float
    y: float


@dataclass(frozen=True)
class GoToRelative(Command):
    x: float
    y: float


@dataclass(frozen=True)
class Draw(Command):
    ''' Path vertices; the first is moved to, the rest are drawn to '''
    path: Tuple[Tuple[float, float], ...]


@dataclass(frozen=True)
class Wait(Command):
    milliseconds: float


@dataclass(frozen=True)
class GetPosition(Command):
    pass


@dataclass(frozen=True)
class GetPen(Command):
    pass


@dataclass(frozen=True)
class SetPlot(Command):
    ''' Plot file path, or an http(s) URL to fetch the file from '''
    source: str


@dataclass(frozen=True)
class Plot(Command):
    pass


# Commands that take no arguments and require interactive mode
SIMPLE_INTERACTIVE_COMMANDS = {
    TokenType.CONNECT: Connect,
    TokenType.DISCONNECT: Disconnect,
    TokenType.PEN_UP: PenUp,
    TokenType.PEN_DOWN: PenDown,
    TokenType.PEN_TOGGLE: PenToggle,
    TokenType.HOME: Home,
    TokenType.GET_POSITION: GetPosition,
    TokenType.GET_PEN: GetPen,
}

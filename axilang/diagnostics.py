# coding=utf-8
# diagnostics.py
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
diagnostics.py

Error classes and source-anchored diagnostic messages for AxiLang.

Every Error or Warning that can be tied to a token is printed with the
source line, the line number and a row of carets under the offending token:

    [ERROR]: On line 3 of square.axi.
      GOTO 1 x
             ^
      Invalid Y coordinate specified.
      Usage: GOTO <X> <Y>

Messages without a position degrade to "[ERROR]: message".
"""

import enum
import logging

logger = logging.getLogger(__name__)


class Severity(enum.Enum):
    ''' Diagnostic levels, from most to least severe '''
    FATAL = 'FATAL'
    ERROR = 'ERROR'
    WARNING = 'WARNING'
    INFO = 'INFO'
    DEBUG = 'DEBUG'


LOG_LEVELS = {
    Severity.FATAL: logging.CRITICAL,
    Severity.ERROR: logging.ERROR,
    Severity.WARNING: logging.WARNING,
    Severity.INFO: logging.INFO,
    Severity.DEBUG: logging.DEBUG,
}


def format_diagnostic(severity, message, position=None):
    '''Return diagnostic text, with the source line and carets if a position is known'''
    if position is None:
        return f"[{severity.value}]: {message}"

    where = f"On line {position.line_number}"
    if position.source:
        where += f" of {position.source}"
    # Keep tabs in the padding so that the carets line up under the token
    padding = ''.join('\t' if char == '\t' else ' ' for char in position.line[:position.start])
    carets = '^' * max(position.width, 1)

    text_lines = [f"[{severity.value}]: {where}.", "  " + position.line, "  " + padding + carets]
    text_lines.extend("  " + message_line for message_line in message.splitlines())
    return "\n".join(text_lines)


class AxiLangError(Exception):
    """
    Base class of AxiLang errors.

    `token` is the PositionedToken the error is anchored to, if any, and
    `index` is that token's index within the dispatcher's token stream.
    """
    severity = Severity.ERROR

    def __init__(self, message, token=None, index=None):
        super().__init__(message)
        self.message = message
        self.token = token
        self.index = index

    @property
    def position(self):
        if self.token is None:
            return None
        return self.token.position

    def describe(self):
        return format_diagnostic(self.severity, self.message, self.position)


class CommandError(AxiLangError):
    ''' A malformed command, bad argument, or command used in the wrong mode '''


class FatalError(AxiLangError):
    ''' Unrecoverable failure; the program cannot continue '''
    severity = Severity.FATAL


class DriverError(AxiLangError):
    ''' A device action failed, but the session may continue '''


def report(error, log=None):
    '''Log an AxiLangError at the level matching its severity'''
    log = logger if log is None else log
    log.log(LOG_LEVELS[error.severity], error.describe())


def warn(message, token=None, log=None):
    '''Log a Warning, anchored to `token` when one is given'''
    log = logger if log is None else log
    position = None if token is None else token.position
    log.warning(format_diagnostic(Severity.WARNING, message, position))

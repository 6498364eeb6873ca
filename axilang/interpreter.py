# coding=utf-8
# interpreter.py
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
interpreter.py

The AxiLang interactive session.

One Dispatcher (in lenient mode) lives for the whole session, so the mode,
options and any half-typed OPTS block carry over from line to line. Lines
that start with a session command (help, history, clear, exit, source,
ports) are handled here and never reach the Dispatcher.
"""

import logging
import os

from axilang import __version__, messages
from axilang.diagnostics import CommandError, report, warn
from axilang.lexer import Lexer
from axilang.parser import Dispatcher
from axilang.tokens import TokenType

try:
    import readline # Line editing and history, where the platform has it
except ImportError:
    readline = None

logger = logging.getLogger(__name__)

HELP_TEXT = f'''AxiLang interpreter {__version__}

Session commands:
    help             Show this message
    history          List the lines entered so far
    clear            Clear the history
    source <PATH>    Run each line of a script file in this session
    ports            List connected AxiDraw units
    exit             Leave the interpreter (or press Ctrl-D)

AxiLang commands:
    MODE <I|P>
    OPTS <OPTION> <VALUE> ... END_OPTS
    UOPTS <OPTION> <VALUE> ... END_UOPTS     (interactive mode)
    CONNECT, DISCONNECT, PENUP, PENDOWN, PENTOGGLE, HOME,
    GOTO <X> <Y>, GOTO_REL <X> <Y>, DRAW <X> <Y> <X> <Y> ...,
    WAIT <MS>, GETPOS, GETPEN                (interactive mode)
    SETPLOT "<PATH|URL>", PLOT               (plot mode)

Options: ACCEL, PENU_POS, PEND_POS, PENU_DELAY, PEND_DELAY, PENU_SPEED,
    PEND_SPEED, PENU_RATE, PEND_RATE, MODEL, PORT "<NAME>", UNITS (interactive mode)
'''

EBB_NAME = "EiBotBoard"
EBB_HWID = "USB VID:PID=04D8:FD92"


def sanitize(text):
    '''Drop non-printable characters and surrounding whitespace'''
    return ''.join(char for char in text if char.isprintable()).strip()


def list_axidraw_ports():
    '''Return (port, description) of each serial port that looks like an AxiDraw EBB'''
    from serial.tools.list_ports import comports
    found = []
    for port in comports():
        if port[1].startswith(EBB_NAME) or port[2].startswith(EBB_HWID):
            found.append((port[0], port[1]))
    return found


class Interpreter:
    """
    Interpreter: read-eval-print loop over AxiLang input.

    `input_fun` reads one line given a prompt (the builtin input() if None);
    it signals the end of input with EOFError.
    """

    def __init__(self, driver, params=None, user_message_fun=messages.emit, input_fun=None,
                 dispatcher=None, default_logging=True):
        self.params = messages.default_params() if params is None else params
        self.driver = driver
        self.user_message_fun = user_message_fun
        self.input_fun = input if input_fun is None else input_fun
        if dispatcher is None:
            dispatcher = Dispatcher(driver, strict=False, params=self.params,
                                    user_message_fun=user_message_fun,
                                    default_logging=default_logging)
        self.dispatcher = dispatcher
        self.lexer = Lexer()
        self.history = []
        self.running = False

        self.session_commands = {
            'help': self.show_help,
            'history': self.show_history,
            'clear': self.clear_history,
            'exit': self.stop,
            'ports': self.show_ports,
        }

    def run(self):
        '''Read and execute lines until exit or end of input'''
        self.running = True
        try:
            while self.running:
                prompt = self.params.continuation_prompt if self.dispatcher.pending \
                    else self.params.prompt
                try:
                    line = self.input_fun(prompt)
                except KeyboardInterrupt:
                    self.user_message_fun("") # Abandon the partial line; prompt again
                    continue
                except EOFError:
                    self.user_message_fun("")
                    break
                try:
                    self.handle_line(line)
                except KeyboardInterrupt:
                    self.dispatcher.discard()
                    warn("Command interrupted.", log=logger)
        finally:
            self.running = False
            self.dispatcher.close()
            self.user_message_fun("Exiting interpreter.")

    def handle_line(self, text):
        '''Execute one line of user input'''
        line = sanitize(text)
        if not line:
            return

        session_command = self.session_commands.get(line.lower())
        if session_command is not None:
            session_command()
            return

        self.history.append(line)
        word, _, argument = line.partition(' ')
        if word.lower() == 'source':
            self.source(argument.strip())
            return
        self.execute(line, self.lexer, len(self.history))

    def execute(self, line, lexer, line_number):
        '''Lex one line with `lexer` and hand its tokens to the dispatcher'''
        diagnostic_count = len(lexer.diagnostics)
        tokens = [positioned_token for positioned_token in lexer.lex_line(line, line_number)
                  if positioned_token.type is not TokenType.END_OF_FILE]

        if all(positioned_token.type is TokenType.UNKNOWN for positioned_token in tokens):
            for error in lexer.diagnostics[diagnostic_count:]:
                report(error, logger)
            return

        self.dispatcher.parse(tokens)

    def source(self, path):
        '''Run the lines of a script file as if they were typed in'''
        if not path:
            report(CommandError("No file specified.\nUsage: source <PATH>"), logger)
            return
        if not os.path.exists(path):
            report(CommandError(f"File '{path}' does not exist."), logger)
            return
        if not os.path.isfile(path):
            report(CommandError(f"'{path}' is not a file."), logger)
            return

        logger.debug(f"Sourcing file '{path}'.")
        lexer = Lexer(source_name=path)
        try:
            with open(path, encoding='utf-8') as script:
                for line_number, text in enumerate(script, start=1):
                    line = sanitize(text)
                    if line:
                        self.execute(line, lexer, line_number)
        except (OSError, UnicodeDecodeError):
            report(CommandError(f"Could not open file '{path}'."), logger)

    def show_help(self):
        self.user_message_fun(HELP_TEXT)

    def show_history(self):
        for number, line in enumerate(self.history, start=1):
            self.user_message_fun(f"{number:4d}  {line}")

    def clear_history(self):
        self.history.clear()
        if readline is not None:
            readline.clear_history()

    def stop(self):
        self.running = False

    def show_ports(self):
        ports = list_axidraw_ports()
        if not ports:
            self.user_message_fun("No AxiDraw units found.")
            return
        for device, description in ports:
            self.user_message_fun(f"{device}  {description}")

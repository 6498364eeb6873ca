# coding=utf-8
# parser.py
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
parser.py

The AxiLang command dispatcher.

Dispatcher walks a stream of positioned tokens, reads one command at a
time (looking ahead only at that command's own arguments), checks it
against the session mode, and executes it on a Driver.

The mode is set once, by MODE:
    unset --MODE P--> plot
    unset --MODE I--> interactive (Driver.enter_interactive_mode() is called)

In strict mode (batch files) the first error stops the dispatcher. In
lenient mode (the interactive session) the error is reported and the
dispatcher carries on from the next source line.

execute_file() runs a script file from start to finish in strict mode.
"""

import logging
import os

from lxml import etree

from axilang import commands, messages
from axilang.commands import OPTIONS, SIMPLE_INTERACTIVE_COMMANDS
from axilang.diagnostics import CommandError, DriverError, FatalError, report, warn
from axilang.driver import Mode
from axilang.fetch import ResourceFetcher, is_url
from axilang.lexer import Lexer
from axilang.tokens import FileState, TokenType

logger = logging.getLogger(__name__)

MODE_USAGE = "Usage: MODE <I|P>"
BLOCK_TERMINATORS = {TokenType.OPTS: TokenType.END_OPTS, TokenType.UOPTS: TokenType.END_UOPTS}


class PendingInput(Exception):
    ''' The command at the current position needs tokens that have not arrived yet '''


class Dispatcher:
    """
    Dispatcher: execute AxiLang commands against a Driver.

    The token stream (`file_state`), the read position and the mode all
    persist between calls to parse(), so an interactive session can feed
    the dispatcher one line at a time.
    """

    def __init__(self, driver, strict=True, params=None, fetcher=None,
                 user_message_fun=messages.emit, default_logging=True):
        self.params = messages.default_params() if params is None else params
        messages.configure_logging(self.params, default_logging)

        self.driver = driver
        self.strict = strict
        self.fetcher = ResourceFetcher(self.params) if fetcher is None else fetcher
        self.user_message_fun = user_message_fun

        self.file_state = FileState()
        self.index = 0 # Index of the next token to read
        self.mode = Mode.UNSET
        self.plot_loaded = False
        self.downloads = [] # Temporary files fetched for SETPLOT
        self.skip_until = None # Terminator of an option block abandoned after an error

        self.executors = {
            commands.SetMode: self._execute_set_mode,
            commands.SetOptions: self._execute_set_options,
            commands.Connect: lambda command: self.driver.connect(),
            commands.Disconnect: lambda command: self.driver.disconnect(),
            commands.PenUp: lambda command: self.driver.pen_up(),
            commands.PenDown: lambda command: self.driver.pen_down(),
            commands.PenToggle: lambda command: self.driver.pen_toggle(),
            commands.Home: lambda command: self.driver.home(),
            commands.GoTo: lambda command: self.driver.go_to(command.x, command.y),
            commands.GoToRelative:
                lambda command: self.driver.go_to_relative(command.x, command.y),
            commands.Draw: lambda command: self.driver.draw_path(list(command.path)),
            commands.Wait: lambda command: self.driver.wait(command.milliseconds),
            commands.GetPosition: self._execute_get_position,
            commands.GetPen: self._execute_get_pen,
            commands.SetPlot: self._execute_set_plot,
            commands.Plot: self._execute_plot,
        }

    @property
    def is_mode_set(self):
        return self.mode is not Mode.UNSET

    @property
    def is_mode_plot(self):
        return self.mode is Mode.PLOT

    @property
    def pending(self):
        '''True if a command has been started but is waiting for more input'''
        return self.skip_until is not None or self.index < len(self.file_state)

    def parse(self, tokens=()):
        '''
        Append `tokens` to the stream, then execute every complete command.
        Returns the list of CommandErrors reported during this call.
        In strict mode, the first CommandError is raised after it is reported.
        '''
        self.file_state.extend(tokens)
        errors = []

        while self.index < len(self.file_state):
            if self.skip_until is not None:
                self._skip_block()
                continue
            start = self.index
            try:
                command, next_index = self._read_command(start)
            except PendingInput:
                break
            except CommandError as err:
                self._handle_error(err, start, errors)
                continue

            self.index = next_index
            try:
                self._execute(command)
            except CommandError as err:
                self._handle_error(err, start, errors)

        return errors

    def discard(self):
        '''Drop every token not yet executed, including a pending command'''
        self.index = len(self.file_state)
        self.skip_until = None

    def close(self):
        '''Remove plot files downloaded during this session'''
        if getattr(self.params, 'keep_downloads', False):
            return
        while self.downloads:
            path = self.downloads.pop()
            try:
                os.remove(path)
            except OSError as err:
                warn(f"Could not remove temporary file '{path}': {err}", log=logger)
            else:
                logger.debug(f"Removed temporary file {path}")

    def _handle_error(self, err, start, errors):
        report(err, logger)
        errors.append(err)
        if self.strict:
            raise err
        failed_at = start if err.index is None else max(err.index, start)
        terminator = BLOCK_TERMINATORS.get(self.file_state[start].type)
        if terminator is not None:
            # Drop the rest of the block, which may still be arriving
            self.skip_until = terminator
            self.index = failed_at
            return
        self.index = self._next_line(failed_at)

    def _skip_block(self):
        while self.index < len(self.file_state):
            token_type = self.file_state[self.index].type
            self.index += 1
            if token_type is self.skip_until:
                self.skip_until = None
                return
        if self.file_state.ended:
            self.skip_until = None

    def _next_line(self, index):
        '''Index of the first token after the source line holding token `index`'''
        current = self.file_state[index]
        index += 1
        while index < len(self.file_state) and self.file_state[index].same_line(current):
            index += 1
        return index

    # Reading commands

    def _fail(self, message, index):
        raise CommandError(message, self.file_state[index], index)

    def _peek(self, index):
        '''
        Token at `index`, or None at the end of a finished stream.
        Raises PendingInput at the end of a stream that may still grow.
        '''
        if index < len(self.file_state):
            return self.file_state[index]
        if self.file_state.ended or self.strict:
            return None
        raise PendingInput()

    def _available(self, index):
        '''Token at `index` if it has already been lexed, else None'''
        if index < len(self.file_state):
            return self.file_state[index]
        return None

    def _read_command(self, index):
        '''Return (command, index of the token after the command)'''
        token = self.file_state[index]
        token_type = token.type

        if token_type is TokenType.MODE:
            return self._read_mode(index)
        if token_type is TokenType.OPTS:
            self._require_mode(index)
            return self._read_options(index, update=False)
        if token_type is TokenType.UOPTS:
            self._require_interactive(index)
            return self._read_options(index, update=True)
        if token_type in SIMPLE_INTERACTIVE_COMMANDS:
            self._require_interactive(index)
            return SIMPLE_INTERACTIVE_COMMANDS[token_type](token), index + 1
        if token_type in (TokenType.GO_TO, TokenType.GO_TO_RELATIVE):
            return self._read_go_to(index)
        if token_type is TokenType.DRAW:
            return self._read_draw(index)
        if token_type is TokenType.WAIT:
            self._require_interactive(index)
            milliseconds = self._read_number(index + 1, index, "wait time", "Usage: WAIT <MS>")
            return commands.Wait(token, milliseconds), index + 2
        if token_type is TokenType.SET_PLOT:
            return self._read_set_plot(index)
        if token_type is TokenType.PLOT:
            self._require_plot(index)
            return commands.Plot(token), index + 1
        if token_type is TokenType.UNKNOWN:
            self._fail(f"Unknown token '{token.text}'.", index)
        self._fail(f"Unexpected token '{token.text}'.", index)
        return None # Not reached

    def _require_mode(self, index):
        if not self.is_mode_set:
            self._fail("No mode specified. Please set a mode first.\n" + MODE_USAGE, index)

    def _require_interactive(self, index):
        '''Check that the command at `index` may run: interactive mode only'''
        self._require_mode(index)
        if self.mode is not Mode.INTERACTIVE:
            name = self.file_state[index].text
            self._fail(f"{name} can only be used in interactive mode.", index)

    def _require_plot(self, index):
        self._require_mode(index)
        if self.mode is not Mode.PLOT:
            name = self.file_state[index].text
            self._fail(f"{name} can only be used in plot mode.", index)

    def _read_mode(self, index):
        token = self.file_state[index]
        argument = self._available(index + 1)
        if argument is None:
            self._fail("No mode specified.\n" + MODE_USAGE, index)
        if argument.type is TokenType.PLOT_MODE:
            mode = Mode.PLOT
        elif argument.type is TokenType.INTERACTIVE_MODE:
            mode = Mode.INTERACTIVE
        else:
            self._fail("Invalid mode specified.\n" + MODE_USAGE, index + 1)
        if self.is_mode_set:
            self._fail(f"Mode is already set to {self.mode.value}.", index)
        return commands.SetMode(token, mode), index + 2

    def _read_options(self, index, update):
        token = self.file_state[index]
        block_name = "UOPTS" if update else "OPTS"
        terminator = TokenType.END_UOPTS if update else TokenType.END_OPTS
        interactive = self.mode is Mode.INTERACTIVE
        settings = []
        seen = {}

        cursor = index + 1
        while True:
            option_token = self._peek(cursor)
            if option_token is None:
                self._fail(f"{block_name} block is never closed with {terminator.name}.", index)
            if option_token.type is terminator:
                break

            spec = OPTIONS.get(option_token.type)
            if spec is None:
                self._fail("Invalid option specified.\n"
                           f"Usage: {block_name} <OPTION> <VALUE> ... {terminator.name}\n"
                           f"Options: {commands.option_names(interactive)}", cursor)
            if spec.interactive_only and not interactive:
                self._fail(f"{spec.keyword} can only be set in interactive mode.", cursor)

            value_token = self._peek(cursor + 1)
            if value_token is None or value_token.type is not spec.value_type:
                self._fail(f"Invalid {spec.description} specified.\nUsage: {spec.usage}",
                           cursor if value_token is None else cursor + 1)
            value = self._option_value(spec, value_token, cursor + 1)

            if spec.keyword in seen:
                warn(f"{spec.keyword} is set more than once; using the last value.",
                     option_token, logger)
            seen[spec.keyword] = True
            settings.append(commands.OptionSetting(spec, value, option_token))
            cursor += 2

        if not settings:
            warn(f"{block_name} block does not set any options.", token, logger)
        return commands.SetOptions(token, tuple(settings), update), cursor + 1

    def _option_value(self, spec, value_token, index):
        if spec.value_type is TokenType.STRING:
            return value_token.text
        value = int(value_token.text)
        if spec.value_range is not None:
            low, high = spec.value_range
            if not low <= value <= high:
                self._fail(f"Invalid {spec.description} specified.\n"
                           f"Value must be from {low} to {high}.", index)
        return value

    def _read_number(self, index, command_index, description, usage):
        '''Numeric argument at `index`; errors point at the command if it is missing'''
        argument = self._available(index)
        if argument is None:
            self._fail(f"Invalid {description} specified.\n{usage}", command_index)
        if argument.type is not TokenType.NUMBER:
            self._fail(f"Invalid {description} specified.\n{usage}", index)
        return float(argument.text)

    def _read_go_to(self, index):
        token = self.file_state[index]
        self._require_interactive(index)
        usage = f"Usage: {token.text} <X> <Y>"
        x_value = self._read_number(index + 1, index, "X coordinate", usage)
        y_value = self._read_number(index + 2, index, "Y coordinate", usage)
        if token.type is TokenType.GO_TO:
            return commands.GoTo(token, x_value, y_value), index + 3
        return commands.GoToRelative(token, x_value, y_value), index + 3

    def _read_draw(self, index):
        '''
        DRAW takes X Y pairs, read greedily until a non-numeric token or the
        end of the stream. A trailing X without a numeric Y is an error.
        '''
        token = self.file_state[index]
        self._require_interactive(index)
        usage = "Usage: DRAW <X> <Y> <X> <Y> ..."

        cursor = index + 1
        values = []
        while True:
            argument = self._available(cursor)
            if argument is None or argument.type is not TokenType.NUMBER:
                break
            values.append(float(argument.text))
            cursor += 1

        if len(values) % 2:
            if self._available(cursor) is None:
                self._fail(f"Missing Y coordinate.\n{usage}", cursor - 1)
            self._fail(f"Invalid Y coordinate specified.\n{usage}", cursor)
        if len(values) < 4:
            self._fail(f"DRAW requires at least two points.\n{usage}",
                       index if not values else cursor - 1)

        path = tuple(zip(values[0::2], values[1::2]))
        return commands.Draw(token, path), cursor

    def _read_set_plot(self, index):
        token = self.file_state[index]
        self._require_plot(index)
        argument = self._available(index + 1)
        message = "No file path/internet URL specified.\nUsage: SETPLOT \"<PATH|URL>\""
        if argument is None:
            self._fail(message, index)
        if argument.type is not TokenType.STRING or not argument.text:
            self._fail(message, index + 1)
        return commands.SetPlot(token, argument.text), index + 2

    # Executing commands

    def _execute(self, command):
        logger.debug(f"Executing {type(command).__name__} from line "
                     f"{command.anchor.position.line_number}.")
        try:
            self.executors[type(command)](command)
        except DriverError as err:
            raise CommandError(err.message, command.anchor, self.index - 1) from err

    def _execute_set_mode(self, command):
        self.mode = command.mode
        if command.mode is Mode.INTERACTIVE:
            self.driver.enter_interactive_mode()
            if self.driver.current_mode() is not Mode.INTERACTIVE:
                raise FatalError("The plotter did not enter interactive mode.", command.anchor)
        logger.debug(f"Mode is set to {command.mode.value}.")

    def _execute_set_options(self, command):
        for setting in command.settings:
            getattr(self.driver, setting.spec.setter)(setting.value)
        self.driver.commit_options()

    def _execute_get_position(self, command):
        x_value, y_value = self.driver.get_position()
        self.user_message_fun(f"X: {x_value} Y: {y_value}")

    def _execute_get_pen(self, command):
        state = "down" if self.driver.get_pen_down() else "up"
        self.user_message_fun(f"Pen is {state}.")

    def _execute_set_plot(self, command):
        path = command.source
        if is_url(path):
            path = self.fetcher.fetch(path)
            self.downloads.append(path)

        if not os.path.isfile(path) or not os.access(path, os.R_OK):
            raise CommandError(f"Could not open file '{path}'.", command.anchor)
        check_svg(path, command.anchor)

        self.driver.setup_plot(path)
        self.plot_loaded = True

    def _execute_plot(self, command):
        if not self.plot_loaded:
            raise CommandError("No plot file loaded.\n"
                               "Use SETPLOT \"<PATH|URL>\" before PLOT.", command.anchor)
        self.driver.run_plot()


def check_svg(path, anchor=None):
    '''Raise CommandError unless `path` holds an XML document with an <svg> root'''
    try:
        with open(path, 'rb') as svg_file:
            parse_ref = etree.XMLParser(huge_tree=True)
            document = etree.parse(svg_file, parser=parse_ref)
    except etree.XMLSyntaxError as err:
        raise CommandError(f"File '{path}' is not a valid SVG document.\n{err}", anchor) from err
    except OSError as err:
        raise CommandError(f"Could not open file '{path}'.", anchor) from err
    if etree.QName(document.getroot()).localname != 'svg':
        raise CommandError(f"File '{path}' is not an SVG document.", anchor)


def check_script(path):
    '''Raise FatalError unless `path` names a readable, non-empty script file'''
    if not os.path.exists(path):
        raise FatalError(f"File '{path}' does not exist.")
    if not os.path.isfile(path):
        raise FatalError(f"'{path}' is not a file.")
    if os.path.getsize(path) == 0:
        raise FatalError(f"File '{path}' is empty.")


def execute_file(path, driver, params=None, user_message_fun=messages.emit,
                 default_logging=True):
    '''
    Lex and run a whole script file, stopping at the first error.
    Raises FatalError or CommandError on failure.
    '''
    check_script(path)
    logger.debug(f"Parsing file '{path}'.")
    try:
        with open(path, encoding='utf-8') as script:
            lexer = Lexer(script, source_name=path)
            tokens = list(lexer.tokens())
    except (OSError, UnicodeDecodeError) as err:
        raise FatalError(f"Could not open file '{path}'.") from err

    for error in lexer.diagnostics:
        report(error, logger)
    if lexer.diagnostics:
        raise lexer.diagnostics[0]

    dispatcher = Dispatcher(driver, strict=True, params=params,
                            user_message_fun=user_message_fun, default_logging=default_logging)
    try:
        dispatcher.parse(tokens)
    finally:
        dispatcher.close()
    return dispatcher

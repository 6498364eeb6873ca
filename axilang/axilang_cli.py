# coding=utf-8
# axilang_cli.py
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

'''
axilang - Command Line Interface (CLI) for AxiLang.

For quick help:
    axilang --help

Run a script file:
    axilang script.axi

Start an interactive session:
    axilang -i
'''

import argparse
import logging
import sys

from axilang import __version__, messages, utils
from axilang.diagnostics import FatalError, AxiLangError, report
from axilang.driver import AxiDrawDriver, PreviewDriver
from axilang.interpreter import Interpreter
from axilang.parser import check_script, execute_file

logger = logging.getLogger(__name__)

cli_version = f"AxiLang Command Line Interface {__version__}"

quick_help = '''
    Run a script file:                axilang script.axi [OPTIONS]

    Start an interactive session:     axilang -i [OPTIONS]

    For a quick list of options, use: axilang --help

    To display current version, use:  axilang --version
        '''

bad_input_message = """usage: axilang [file] [OPTIONS]
    A script file or --interactive is required.
    For help, use: axilang --help"""


def axilang_CLI(dev=False):
    ''' The core of axilang '''

    desc = 'AxiLang Command Line Interface.'

    parser = argparse.ArgumentParser(description=desc, usage=quick_help)

    parser.add_argument("script", nargs='?', \
            help="The AxiLang script file to run")

    parser.add_argument("-f", "--file", \
            metavar='FILE', type=str, dest="file", \
            help="The AxiLang script file to run (same as the positional argument)")

    parser.add_argument("-i", "--interactive", \
            action="store_const", const=True, \
            help="Start an interactive session. A script file, if given, is run first.")

    parser.add_argument("-d", "--debug", \
            action="store_const", const=True, \
            help="Show debug messages")

    parser.add_argument("-p", "--preview", \
            action="store_const", const=True, \
            help="Preview mode; simulate the AxiDraw without hardware.")

    parser.add_argument("-c", "--config", \
            metavar='CONFIG', type=str, dest="config", \
            help="Filename for the custom configuration file.")

    parser.add_argument("-v", "--version", \
            action='store_const', const=True, \
            help="Output the version of axilang")

    args = parser.parse_args()

    if args.version:
        print(cli_version)
        sys.exit()

    script = args.file if args.file is not None else args.script
    if script is None and not args.interactive:
        print(bad_input_message)
        sys.exit(1)

    messages.configure_logging(args)

    try:
        runner = run(args, script)
    except FatalError as err:
        report(err, logger)
        sys.exit(1)
    except AxiLangError:
        sys.exit(1) # Already reported where it was raised.

    return runner if dev else None # returning the runner is useful for tests


def run(args, script):
    '''Load the configuration, then run the script and/or the interactive session'''
    utils.check_config_file(args.config)
    config_dict = utils.load_configs([args.config, 'axilang.axilang_conf'])
    params = utils.FakeConfigModule(config_dict)
    utils.assign_option_values(params, args, [config_dict], utils.CONFIG_NAMES)
    if script is not None:
        check_script(script)

    driver = PreviewDriver() if args.preview else AxiDrawDriver()

    if not args.interactive:
        return execute_file(script, driver, params=params)

    interpreter = Interpreter(driver, params=params)
    if script is not None:
        interpreter.source(script)
    interpreter.run()
    return interpreter

# coding=utf-8
# messages.py
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
messages.py

User message output and logging setup, shared by the AxiLang modules.
"""

import logging
from importlib import import_module

from plotink.plot_utils_import import from_dependency_import # plotink
message = from_dependency_import('ink_extensions_utils.message')

logger = logging.getLogger('axilang')

logging_attrs = {"default_handler": message.UserMessageHandler()}

emit = message.emit


def default_params():
    '''Return the default configuration module'''
    return import_module("axilang.axilang_conf")


def configure_logging(params, default_logging=True):
    '''
    Set up the "axilang" logger from configuration values.
    Messages are reported at INFO level and above, or DEBUG if params.debug is set.
    '''
    if default_logging and logging_attrs["default_handler"] not in logger.handlers:
        logger.addHandler(logging_attrs["default_handler"])

    if getattr(params, 'debug', False):
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

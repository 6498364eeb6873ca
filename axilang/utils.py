# coding=utf-8
# utils.py
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
utils.py

Configuration loading for the AxiLang command line interface.

A configuration is a python file or module of plain assignments, such as
axilang/axilang_conf.py. Several are merged in order of priority, and
values given on the command line override all of them.
"""

import errno
import os
import runpy
import warnings

from axilang.diagnostics import FatalError

CONFIG_NAMES = ['debug', 'max_redirects', 'fetch_timeout', 'user_agent', 'temp_prefix',
                'keep_downloads', 'prompt', 'continuation_prompt']


def load_configs(config_list):
    ''' Merge configurations; config_list holds file or module names, highest priority first '''
    config_dict = {}
    for config in reversed(config_list):
        config_dict.update(load_config(config))
    return config_dict


def load_config(config):
    '''
    Return the public names assigned in `config`, a python file or module name.
    Raises FatalError if it cannot be found or does not compile.
    '''
    if config is None:
        return {}

    try:
        config_dict = runpy.run_path(config)
    except SyntaxError as se:
        raise FatalError(f"Config file {se.filename} has a syntax error on line "
                         f"{se.lineno}:\n    {se.text}") from se
    except OSError as ose:
        if config.endswith(".py") and ose.errno == errno.ENOENT:
            raise FatalError(f"Could not find config file {config}.") from ose
        with warnings.catch_warnings():
            # runpy warns when the module is already imported
            warnings.simplefilter("ignore")
            try:
                config_dict = runpy.run_module(config)
            except ImportError as ie:
                raise FatalError(f"Could not find any file or module named {config}.") from ie

    return {key: value for key, value in config_dict.items() if not key.startswith("_")}


def check_config_file(config):
    '''Raise FatalError unless `config` is None or names a regular file'''
    if config is not None and os.path.exists(config) and not os.path.isfile(config):
        raise FatalError(f"Config file {config} is not a file.")


def assign_option_values(options_obj, command_line, configs, option_names):
    '''
    Set each of `option_names` on `options_obj`: the command line value if one
    was given, else the first of `configs` (or options_obj itself) that has it.
    '''
    for name in option_names:
        # argparse leaves options that were not given as None
        command_line_value = getattr(command_line, name, None)
        if command_line_value is not None:
            setattr(options_obj, name, command_line_value)
        else:
            setattr(options_obj, name, get_configured_value(name, configs + [options_obj.__dict__]))


def get_configured_value(attr, configs):
    ''' Value of `attr` in the first dict of `configs` that defines it '''
    for config in configs:
        if attr in config:
            return config[attr]
    raise ValueError(f"No configured value for {attr}.")


class FakeConfigModule:
    ''' Attribute access to a dict of configured values '''
    def __init__(self, a_dict):
        self.__dict__ = a_dict

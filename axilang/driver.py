# coding=utf-8
# driver.py
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
driver.py

The plotter control surface used by the AxiLang dispatcher.

Driver is the interface. AxiDrawDriver controls a real AxiDraw through the
AxiDraw Python API (pyaxidraw); PreviewDriver simulates one offline.

AxiDraw python API documentation is hosted at: https://axidraw.com/doc/py_api/
"""

import abc
import enum
import functools
import logging

from axilang.diagnostics import DriverError, FatalError

logger = logging.getLogger(__name__)

PYAXIDRAW_URL = "https://cdn.evilmadscientist.com/dl/ad/public/AxiDraw_API.zip"


class Mode(enum.Enum):
    ''' Session-wide mode, set once by the MODE command '''
    UNSET = 'unset'
    INTERACTIVE = 'interactive'
    PLOT = 'plot'


class Driver(abc.ABC):
    """ Interface between the AxiLang dispatcher and a plotter """

    @abc.abstractmethod
    def enter_interactive_mode(self):
        ''' Begin interactive context '''

    @abc.abstractmethod
    def set_acceleration(self, value):
        ''' Acceleration rate factor (1-100) '''

    @abc.abstractmethod
    def set_pen_up_position(self, value):
        ''' Height of pen when raised (0-100) '''

    @abc.abstractmethod
    def set_pen_down_position(self, value):
        ''' Height of pen when lowered (0-100) '''

    @abc.abstractmethod
    def set_pen_up_delay(self, value):
        ''' Delay after pen is raised (ms) '''

    @abc.abstractmethod
    def set_pen_down_delay(self, value):
        ''' Delay after pen is lowered (ms) '''

    @abc.abstractmethod
    def set_pen_up_speed(self, value):
        ''' Maximum transit speed, when pen is up (1-100) '''

    @abc.abstractmethod
    def set_pen_down_speed(self, value):
        ''' Maximum plotting speed, when pen is down (1-100) '''

    @abc.abstractmethod
    def set_pen_up_rate(self, value):
        ''' Rate of raising pen (1-100) '''

    @abc.abstractmethod
    def set_pen_down_rate(self, value):
        ''' Rate of lowering pen (1-100) '''

    @abc.abstractmethod
    def set_model(self, value):
        ''' AxiDraw model (1-7) '''

    @abc.abstractmethod
    def set_port(self, value):
        ''' Serial port or AxiDraw name; "auto" for the first unit found '''

    @abc.abstractmethod
    def set_units(self, value):
        ''' Interactive units. 0: inches, 1: centimeters, 2: millimeters '''

    @abc.abstractmethod
    def commit_options(self):
        ''' Apply the options set since the last commit '''

    @abc.abstractmethod
    def connect(self):
        pass

    @abc.abstractmethod
    def disconnect(self):
        pass

    @abc.abstractmethod
    def pen_up(self):
        pass

    @abc.abstractmethod
    def pen_down(self):
        pass

    @abc.abstractmethod
    def pen_toggle(self):
        pass

    @abc.abstractmethod
    def home(self):
        pass

    @abc.abstractmethod
    def go_to(self, x_target, y_target):
        ''' Absolute move, pen up '''

    @abc.abstractmethod
    def go_to_relative(self, x_delta, y_delta):
        ''' Relative move, pen up '''

    @abc.abstractmethod
    def draw_path(self, points):
        ''' Move to the first (x, y) point, then draw through the others '''

    @abc.abstractmethod
    def wait(self, milliseconds):
        pass

    @abc.abstractmethod
    def get_position(self):
        ''' Return the (x, y) position '''

    @abc.abstractmethod
    def get_pen_down(self):
        ''' Return True if the pen is down '''

    @abc.abstractmethod
    def current_mode(self):
        ''' Return the Mode the plotter is in '''

    @abc.abstractmethod
    def setup_plot(self, path):
        ''' Load an SVG file to plot '''

    @abc.abstractmethod
    def run_plot(self):
        ''' Plot the loaded SVG file '''


# AxiLang setter name: AxiDraw option name
AXIDRAW_OPTION_NAMES = {
    'set_acceleration': 'accel',
    'set_pen_up_position': 'pen_pos_up',
    'set_pen_down_position': 'pen_pos_down',
    'set_pen_up_delay': 'pen_delay_up',
    'set_pen_down_delay': 'pen_delay_down',
    'set_pen_up_speed': 'speed_penup',
    'set_pen_down_speed': 'speed_pendown',
    'set_pen_up_rate': 'pen_rate_raise',
    'set_pen_down_rate': 'pen_rate_lower',
    'set_model': 'model',
    'set_port': 'port',
    'set_units': 'units',
}


def api_errors(method):
    ''' Report RuntimeError from the AxiDraw API as a DriverError '''
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except RuntimeError as err:
            raise DriverError(str(err)) from err
    return wrapper


class AxiDrawDriver(Driver):
    """
    Control an AxiDraw through the pyaxidraw Python API.

    Both AxiDraw.interactive() and AxiDraw.plot_setup() reset the AxiDraw
    options, so every option set through this driver is remembered and
    applied again after either call.
    """

    def __init__(self, axidraw_ref=None):
        if axidraw_ref is None:
            axidraw_ref = self._load_axidraw()
        self.ad = axidraw_ref
        self.options = {} # AxiDraw option name: value
        self.mode = Mode.UNSET
        self.connected = False
        logger.debug("AxiDraw API initialized.")

    @staticmethod
    def _load_axidraw():
        try:
            from pyaxidraw import axidraw
        except ImportError as err:
            raise FatalError("The library 'pyaxidraw' is not installed.\n"
                             f"Please install it with 'pip install {PYAXIDRAW_URL}'") from err
        try:
            return axidraw.AxiDraw()
        except Exception as err:
            raise FatalError("Could not initialize AxiDraw API.") from err

    def _set_option(self, setter, value):
        name = AXIDRAW_OPTION_NAMES[setter]
        self.options[name] = value
        logger.debug(f"Set {name} to {value}.")

    def _apply_options(self):
        ad_options = getattr(self.ad, 'options', None)
        if ad_options is None:
            return
        for name, value in self.options.items():
            setattr(ad_options, name, value)

    def enter_interactive_mode(self):
        self.ad.interactive()
        self.mode = Mode.INTERACTIVE
        self._apply_options()
        logger.debug("Mode is set to interactive.")

    def set_acceleration(self, value):
        self._set_option('set_acceleration', value)

    def set_pen_up_position(self, value):
        self._set_option('set_pen_up_position', value)

    def set_pen_down_position(self, value):
        self._set_option('set_pen_down_position', value)

    def set_pen_up_delay(self, value):
        self._set_option('set_pen_up_delay', value)

    def set_pen_down_delay(self, value):
        self._set_option('set_pen_down_delay', value)

    def set_pen_up_speed(self, value):
        self._set_option('set_pen_up_speed', value)

    def set_pen_down_speed(self, value):
        self._set_option('set_pen_down_speed', value)

    def set_pen_up_rate(self, value):
        self._set_option('set_pen_up_rate', value)

    def set_pen_down_rate(self, value):
        self._set_option('set_pen_down_rate', value)

    def set_model(self, value):
        self._set_option('set_model', value)

    def set_port(self, value):
        self._set_option('set_port', None if value == "auto" else value)

    def set_units(self, value):
        self._set_option('set_units', value)

    @api_errors
    def commit_options(self):
        self._apply_options()
        if self.mode is Mode.INTERACTIVE and self.connected:
            self.ad.update()
        logger.debug("Updated options.")

    def connect(self):
        if not self.ad.connect():
            raise FatalError("Could not connect to AxiDraw.")
        self.connected = True
        logger.debug("Connected to AxiDraw.")

    def disconnect(self):
        self.ad.disconnect()
        self.connected = False
        logger.debug("Disconnected from AxiDraw.")

    @api_errors
    def pen_up(self):
        self.ad.penup()
        logger.debug("Pen is up.")

    @api_errors
    def pen_down(self):
        self.ad.pendown()
        logger.debug("Pen is down.")

    def pen_toggle(self):
        if self.ad.current_pen(): # True if the pen is up
            self.pen_down()
        else:
            self.pen_up()

    @api_errors
    def home(self):
        self.ad.moveto(0, 0)
        logger.debug("Moved to home.")

    @api_errors
    def go_to(self, x_target, y_target):
        self.ad.moveto(x_target, y_target)
        logger.debug(f"Moved to ({x_target}, {y_target}).")

    @api_errors
    def go_to_relative(self, x_delta, y_delta):
        self.ad.move(x_delta, y_delta)
        logger.debug(f"Moved by ({x_delta}, {y_delta}).")

    @api_errors
    def draw_path(self, points):
        first, *rest = points
        self.ad.moveto(first[0], first[1])
        logger.debug(f"Moved to ({first[0]}, {first[1]}).")
        for x_value, y_value in rest:
            self.ad.lineto(x_value, y_value)
            logger.debug(f"Drew line to ({x_value}, {y_value}).")

    @api_errors
    def wait(self, milliseconds):
        self.ad.delay(milliseconds)
        logger.debug(f"Waited for {milliseconds} ms.")

    @api_errors
    def get_position(self):
        x_value, y_value = self.ad.current_pos()
        return (x_value, y_value)

    def get_pen_down(self):
        return not self.ad.current_pen()

    def current_mode(self):
        ad_options = getattr(self.ad, 'options', None)
        if getattr(ad_options, 'mode', None) == "interactive":
            return Mode.INTERACTIVE
        return self.mode

    @api_errors
    def setup_plot(self, path):
        self.ad.plot_setup(path)
        self.mode = Mode.PLOT
        self._apply_options()
        logger.debug(f"Plot file {path} loaded.")

    @api_errors
    def run_plot(self):
        logger.debug("Running plot.")
        self.ad.plot_run()
        for warning_message in self.ad.warnings.return_text_list():
            logger.warning(warning_message)


class PreviewDriver(Driver):
    """
    PreviewDriver: simulate an AxiDraw, without hardware.

    Keeps track of the mode, options, pen state and position that a
    real AxiDraw would have, and reports each action.
    """

    def __init__(self):
        self.mode = Mode.UNSET
        self.options = {}
        self.pending_options = {}
        self.connected = False
        self.pen_is_down = False
        self.position = (0.0, 0.0)
        self.plot_file = None
        self.plots = 0

    def _set_option(self, setter, value):
        name = AXIDRAW_OPTION_NAMES[setter]
        self.pending_options[name] = value
        logger.debug(f"Set {name} to {value}.")

    def _point(self, x_value, y_value):
        return (float(x_value), float(y_value))

    def enter_interactive_mode(self):
        self.mode = Mode.INTERACTIVE
        self.options.setdefault('units', 0)
        logger.info("Preview: interactive mode.")

    def set_acceleration(self, value):
        self._set_option('set_acceleration', value)

    def set_pen_up_position(self, value):
        self._set_option('set_pen_up_position', value)

    def set_pen_down_position(self, value):
        self._set_option('set_pen_down_position', value)

    def set_pen_up_delay(self, value):
        self._set_option('set_pen_up_delay', value)

    def set_pen_down_delay(self, value):
        self._set_option('set_pen_down_delay', value)

    def set_pen_up_speed(self, value):
        self._set_option('set_pen_up_speed', value)

    def set_pen_down_speed(self, value):
        self._set_option('set_pen_down_speed', value)

    def set_pen_up_rate(self, value):
        self._set_option('set_pen_up_rate', value)

    def set_pen_down_rate(self, value):
        self._set_option('set_pen_down_rate', value)

    def set_model(self, value):
        self._set_option('set_model', value)

    def set_port(self, value):
        self._set_option('set_port', None if value == "auto" else value)

    def set_units(self, value):
        self._set_option('set_units', value)

    def commit_options(self):
        self.options.update(self.pending_options)
        logger.info(f"Preview: options {self.pending_options}.")
        self.pending_options.clear()

    def connect(self):
        self.connected = True
        self.pen_is_down = False
        logger.info("Preview: connected.")

    def disconnect(self):
        self.connected = False
        logger.info("Preview: disconnected.")

    def _verify_connection(self):
        if not self.connected:
            raise DriverError("Not connected to AxiDraw")

    def pen_up(self):
        self._verify_connection()
        self.pen_is_down = False
        logger.info("Preview: pen up.")

    def pen_down(self):
        self._verify_connection()
        self.pen_is_down = True
        logger.info("Preview: pen down.")

    def pen_toggle(self):
        if self.pen_is_down:
            self.pen_up()
        else:
            self.pen_down()

    def home(self):
        self.go_to(0, 0)

    def go_to(self, x_target, y_target):
        self.pen_up()
        self.position = self._point(x_target, y_target)
        logger.info(f"Preview: move to {self.position}.")

    def go_to_relative(self, x_delta, y_delta):
        x_delta, y_delta = self._point(x_delta, y_delta)
        self.go_to(self.position[0] + x_delta, self.position[1] + y_delta)

    def draw_path(self, points):
        first, *rest = points
        self.go_to(*first)
        for point in rest:
            self.pen_is_down = True
            self.position = self._point(*point)
            logger.info(f"Preview: line to {self.position}.")

    def wait(self, milliseconds):
        self._verify_connection()
        logger.info(f"Preview: wait {milliseconds} ms.")

    def get_position(self):
        return self.position

    def get_pen_down(self):
        return self.pen_is_down

    def current_mode(self):
        return self.mode

    def setup_plot(self, path):
        self.mode = Mode.PLOT
        self.plot_file = path
        logger.info(f"Preview: plot file {path}.")

    def run_plot(self):
        if self.plot_file is None:
            raise DriverError("No SVG input provided.")
        self.plots += 1
        logger.info(f"Preview: plotted {self.plot_file}.")

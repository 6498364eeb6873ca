import os

from mock import MagicMock, call

from pyfakefs.fake_filesystem_unittest import TestCase

from axilang import messages, utils
from axilang.diagnostics import CommandError, DriverError, FatalError
from axilang.driver import Driver, Mode
from axilang.lexer import Lexer
from axilang.parser import Dispatcher, execute_file
from axilang.tokens import TokenType

# python -m unittest discover -s test in top-level package dir

SVG_TEXT = '<svg xmlns="http://www.w3.org/2000/svg" width="10mm" height="10mm"/>'


def make_driver():
    driver = MagicMock(spec=Driver)
    driver.current_mode.return_value = Mode.INTERACTIVE
    driver.get_position.return_value = (1.5, 2.0)
    driver.get_pen_down.return_value = False
    return driver


def stream(text, source_name="script.axi"):
    ''' Tokens of a complete script, ending with END_OF_FILE '''
    return list(Lexer(text.splitlines(keepends=True), source_name).tokens())


class DispatcherTestCase(TestCase):
    ''' Dispatcher in strict mode, as used for script files '''

    def setUp(self):
        self.setUpPyfakefs()
        self.driver = make_driver()
        self.output = MagicMock()

    def dispatcher(self, strict=True, params=None, fetcher=None):
        return Dispatcher(self.driver, strict=strict, params=params, fetcher=fetcher,
                          user_message_fun=self.output, default_logging=False)

    def run_script(self, text, **kwargs):
        dispatcher = self.dispatcher(**kwargs)
        with self.assertLogs("axilang", level="DEBUG"):
            dispatcher.parse(stream(text))
        return dispatcher

    def assert_error(self, text, message, driver_calls=None):
        ''' Running `text` raises a CommandError containing `message` '''
        dispatcher = self.dispatcher()
        with self.assertLogs("axilang", level="ERROR") as logs:
            with self.assertRaises(CommandError) as ce:
                dispatcher.parse(stream(text))
        self.assertIn(message, ce.exception.message)
        self.assertIn(message.splitlines()[0], logs.output[-1])
        if driver_calls is not None:
            self.assertEqual(self.driver.mock_calls, driver_calls)
        return ce.exception

    # Mode state machine

    def test_command_before_mode(self):
        error = self.assert_error("GOTO 1 2", "No mode specified. Please set a mode first.", [])
        self.assertEqual(error.token.text, "GOTO")

    def test_goto_in_interactive_mode(self):
        self.run_script("MODE I\nGOTO 1 2")

        self.driver.go_to.assert_called_once_with(1, 2)
        self.assertEqual(self.driver.mock_calls,
                         [call.enter_interactive_mode(), call.current_mode(), call.go_to(1, 2)])

    def test_mode_flags(self):
        dispatcher = self.dispatcher()
        self.assertFalse(dispatcher.is_mode_set)

        dispatcher.parse(stream("MODE P"))

        self.assertTrue(dispatcher.is_mode_set)
        self.assertTrue(dispatcher.is_mode_plot)
        self.assertEqual(self.driver.mock_calls, [])

    def test_invalid_mode(self):
        error = self.assert_error("MODE X", "Invalid mode specified.\nUsage: MODE <I|P>", [])
        self.assertEqual(error.token.text, "X")

    def test_missing_mode(self):
        self.assert_error("MODE", "No mode specified.")

    def test_mode_set_twice(self):
        self.assert_error("MODE P\nMODE I", "Mode is already set", [])

    def test_driver_refuses_interactive_mode(self):
        self.driver.current_mode.return_value = Mode.UNSET
        with self.assertRaises(FatalError):
            self.dispatcher(strict=False).parse(stream("MODE I\nHOME"))
        self.driver.home.assert_not_called()

    def test_interactive_command_in_plot_mode(self):
        for command in ("CONNECT", "DISCONNECT", "PENUP", "PENDOWN", "PENTOGGLE", "HOME",
                        "GETPOS", "GETPEN", "GOTO 1 2", "GOTO_REL 1 2", "DRAW 1 2 3 4",
                        "WAIT 10"):
            with self.subTest(command=command):
                name = command.split()[0]
                self.assert_error(f"MODE P\n{command}",
                                  f"{name} can only be used in interactive mode.", [])

    def test_plot_command_in_interactive_mode(self):
        self.assert_error('MODE I\nSETPLOT "drawing.svg"', "SETPLOT can only be used in plot mode.")
        self.assert_error("MODE I\nPLOT", "PLOT can only be used in plot mode.")

    # Simple commands

    def test_simple_commands(self):
        self.run_script("MODE I\nCONNECT\nPENDOWN\nPENUP\nPENTOGGLE\nHOME\nDISCONNECT")

        self.assertEqual(self.driver.mock_calls[2:], [call.connect(), call.pen_down(),
                                                      call.pen_up(), call.pen_toggle(),
                                                      call.home(), call.disconnect()])

    def test_getpos_and_getpen(self):
        self.run_script("MODE I\nGETPOS\nGETPEN")

        self.output.assert_has_calls([call("X: 1.5 Y: 2.0"), call("Pen is up.")])

    def test_getpen_down(self):
        self.driver.get_pen_down.return_value = True
        self.run_script("MODE I\nGETPEN")
        self.output.assert_called_once_with("Pen is down.")

    def test_several_commands_per_line(self):
        self.run_script("MODE I CONNECT GOTO 1 2 HOME")
        self.assertEqual(self.driver.mock_calls[2:], [call.connect(), call.go_to(1, 2),
                                                      call.home()])

    # Arguments

    def test_goto_relative(self):
        self.run_script("MODE I\nGOTO_REL 5 7")
        self.driver.go_to_relative.assert_called_once_with(5, 7)

    def test_goto_bad_arguments(self):
        error = self.assert_error("MODE I\nGOTO x 2", "Invalid X coordinate specified.")
        self.assertEqual(error.token.text, "x")
        error = self.assert_error("MODE I\nGOTO 1 y", "Invalid Y coordinate specified.")
        self.assertEqual(error.token.text, "y")
        error = self.assert_error("MODE I\nGOTO_REL 1", "Usage: GOTO_REL <X> <Y>")
        self.assertEqual(error.token.text, "GOTO_REL")
        self.driver.go_to.assert_not_called()
        self.driver.go_to_relative.assert_not_called()

    def test_wait(self):
        self.run_script("MODE I\nWAIT 250")
        self.driver.wait.assert_called_once_with(250)
        self.assert_error("MODE I\nWAIT soon", "Invalid wait time specified.\nUsage: WAIT <MS>")

    def test_draw(self):
        self.run_script("MODE I\nDRAW 1 2 3 4")
        self.driver.draw_path.assert_called_once_with([(1, 2), (3, 4)])

    def test_draw_stops_at_next_command(self):
        self.run_script("MODE I\nDRAW 1 2 3 4 5 6 HOME")
        self.driver.draw_path.assert_called_once_with([(1, 2), (3, 4), (5, 6)])
        self.driver.home.assert_called_once_with()

    def test_draw_odd_count(self):
        error = self.assert_error("MODE I\nDRAW 1 2 3 4 5", "Missing Y coordinate.")
        self.assertEqual(error.token.text, "5")
        self.driver.draw_path.assert_not_called()

    def test_draw_non_numeric_y(self):
        error = self.assert_error("MODE I\nDRAW 1 2 3 HOME", "Invalid Y coordinate specified.")
        self.assertEqual(error.token.text, "HOME")
        self.driver.draw_path.assert_not_called()
        self.driver.home.assert_not_called()

    def test_draw_single_point(self):
        self.assert_error("MODE I\nDRAW 1 2", "DRAW requires at least two points.")
        self.assert_error("MODE I\nDRAW", "DRAW requires at least two points.")

    # Option blocks

    def test_opts_in_plot_mode(self):
        self.run_script("MODE P\nOPTS ACCEL 75 END_OPTS")
        self.assertEqual(self.driver.mock_calls, [call.set_acceleration(75), call.commit_options()])

    def test_every_option(self):
        self.run_script("""MODE I
OPTS
    ACCEL 1 PENU_POS 2 PEND_POS 3 PENU_DELAY 4 PEND_DELAY 5 PENU_SPEED 6
    PEND_SPEED 7 PENU_RATE 8 PEND_RATE 9 MODEL 4 PORT "auto" UNITS 2
END_OPTS""")

        self.assertEqual(self.driver.mock_calls[2:], [
            call.set_acceleration(1), call.set_pen_up_position(2), call.set_pen_down_position(3),
            call.set_pen_up_delay(4), call.set_pen_down_delay(5), call.set_pen_up_speed(6),
            call.set_pen_down_speed(7), call.set_pen_up_rate(8), call.set_pen_down_rate(9),
            call.set_model(4), call.set_port("auto"), call.set_units(2), call.commit_options()])

    def test_uopts(self):
        self.run_script("MODE I\nCONNECT\nUOPTS PEND_POS 20 END_UOPTS\nPENDOWN")
        self.assertEqual(self.driver.mock_calls[3:], [call.set_pen_down_position(20),
                                                      call.commit_options(), call.pen_down()])

    def test_uopts_in_plot_mode(self):
        self.assert_error("MODE P\nUOPTS ACCEL 5 END_UOPTS",
                          "UOPTS can only be used in interactive mode.", [])

    def test_opts_before_mode(self):
        self.assert_error("OPTS ACCEL 5 END_OPTS", "No mode specified.", [])

    def test_units_in_plot_mode(self):
        error = self.assert_error("MODE P\nOPTS UNITS 1 END_OPTS",
                                  "UNITS can only be set in interactive mode.", [])
        self.assertEqual(error.token.text, "UNITS")

    def test_option_value_type(self):
        self.assert_error('MODE P\nOPTS ACCEL "fast" END_OPTS',
                          "Invalid acceleration specified.\nUsage: ACCEL <VALUE>", [])
        self.assert_error("MODE P\nOPTS PORT 3 END_OPTS",
                          'Invalid port specified.\nUsage: PORT "<VALUE>"', [])

    def test_option_range(self):
        self.assert_error("MODE P\nOPTS MODEL 8 END_OPTS", "Value must be from 1 to 7.", [])
        self.assert_error("MODE I\nOPTS UNITS 3 END_OPTS", "Value must be from 0 to 2.")
        self.driver.set_units.assert_not_called()

    def test_block_is_atomic(self):
        self.assert_error("MODE P\nOPTS ACCEL 10 PENU_POS 60 BOGUS 1 END_OPTS",
                          "Invalid option specified.", [])

    def test_block_never_closed(self):
        self.assert_error("MODE P\nOPTS ACCEL 10", "OPTS block is never closed with END_OPTS.", [])

    def test_wrong_terminator(self):
        self.assert_error("MODE I\nUOPTS ACCEL 10 END_OPTS", "Invalid option specified.")

    def test_duplicate_option(self):
        dispatcher = self.dispatcher()
        with self.assertLogs("axilang", level="WARNING") as logs:
            dispatcher.parse(stream("MODE P\nOPTS ACCEL 10 ACCEL 20 END_OPTS"))

        self.assertIn("ACCEL is set more than once", logs.output[0])
        self.assertEqual(self.driver.mock_calls, [call.set_acceleration(10),
                                                  call.set_acceleration(20),
                                                  call.commit_options()])

    def test_empty_block(self):
        dispatcher = self.dispatcher()
        with self.assertLogs("axilang", level="WARNING") as logs:
            dispatcher.parse(stream("MODE P\nOPTS END_OPTS"))

        self.assertIn("OPTS block does not set any options.", logs.output[0])
        self.assertEqual(self.driver.mock_calls, [call.commit_options()])

    # Other tokens

    def test_unknown_token(self):
        error = self.assert_error("MODE I\nFLY 1 2", "Unknown token 'FLY'.", [
            call.enter_interactive_mode(), call.current_mode()])
        self.assertEqual(error.position.line_number, 2)
        self.assertEqual(error.position.source, "script.axi")

    def test_unexpected_token(self):
        for text in ("END_OPTS", "ACCEL", "12", '"text"', "P"):
            with self.subTest(text=text):
                self.assert_error(f"MODE I\n{text}", "Unexpected token")

    def test_empty_stream(self):
        dispatcher = self.dispatcher()
        self.assertEqual(dispatcher.parse(stream("% nothing\n")), [])
        self.assertFalse(dispatcher.pending)

    def test_driver_error(self):
        self.driver.pen_down.side_effect = DriverError("Not connected to AxiDraw")
        error = self.assert_error("MODE I\nPENDOWN\nHOME", "Not connected to AxiDraw")

        self.assertEqual(error.token.text, "PENDOWN")
        self.driver.home.assert_not_called()

    # SETPLOT and PLOT

    def test_setplot_and_plot(self):
        self.fs.create_file("drawing.svg", contents=SVG_TEXT)
        dispatcher = self.run_script('MODE P\nSETPLOT "drawing.svg"\nPLOT')

        self.assertTrue(dispatcher.plot_loaded)
        self.assertEqual(self.driver.mock_calls, [call.setup_plot("drawing.svg"),
                                                  call.run_plot()])

    def test_setplot_missing_file(self):
        self.assert_error('MODE P\nSETPLOT "nowhere.svg"', "Could not open file 'nowhere.svg'.", [])

    def test_setplot_directory(self):
        self.fs.create_dir("drawings")
        self.assert_error('MODE P\nSETPLOT "drawings"', "Could not open file 'drawings'.", [])

    def test_setplot_not_svg(self):
        self.fs.create_file("page.html", contents="<html><body/></html>")
        self.fs.create_file("broken.svg", contents="<svg")
        self.assert_error('MODE P\nSETPLOT "page.html"', "is not an SVG document.", [])
        self.assert_error('MODE P\nSETPLOT "broken.svg"', "is not a valid SVG document.", [])

    def test_setplot_argument(self):
        self.assert_error("MODE P\nSETPLOT", "No file path/internet URL specified.")
        self.assert_error("MODE P\nSETPLOT drawing.svg", "No file path/internet URL specified.")
        self.assert_error('MODE P\nSETPLOT ""', "No file path/internet URL specified.")

    def test_plot_without_setplot(self):
        self.assert_error("MODE P\nPLOT", "No plot file loaded.", [])

    def test_setplot_url(self):
        self.fs.create_file("/tmp/axilang-download.svg", contents=SVG_TEXT)
        fetcher = MagicMock()
        fetcher.fetch.return_value = "/tmp/axilang-download.svg"

        dispatcher = self.run_script('MODE P\nSETPLOT "https://example.com/a.svg"\nPLOT',
                                     fetcher=fetcher)

        fetcher.fetch.assert_called_once_with("https://example.com/a.svg")
        self.driver.setup_plot.assert_called_once_with("/tmp/axilang-download.svg")
        self.assertEqual(dispatcher.downloads, ["/tmp/axilang-download.svg"])

        dispatcher.close()
        self.assertFalse(os.path.exists("/tmp/axilang-download.svg"))
        self.assertEqual(dispatcher.downloads, [])

    def test_keep_downloads(self):
        self.fs.create_file("/tmp/axilang-download.svg", contents=SVG_TEXT)
        fetcher = MagicMock()
        fetcher.fetch.return_value = "/tmp/axilang-download.svg"
        config = dict(vars(messages.default_params()), keep_downloads=True)
        params = utils.FakeConfigModule(config)

        dispatcher = self.run_script('MODE P\nSETPLOT "http://example.com/a.svg"',
                                     fetcher=fetcher, params=params)
        dispatcher.close()

        self.assertTrue(os.path.exists("/tmp/axilang-download.svg"))

    def test_fetch_failure_is_fatal(self):
        fetcher = MagicMock()
        fetcher.fetch.side_effect = FatalError("Too many redirects.")

        with self.assertRaises(FatalError):
            self.dispatcher(strict=False, fetcher=fetcher).parse(
                stream('MODE P\nSETPLOT "http://example.com"'))
        self.driver.setup_plot.assert_not_called()


class LenientDispatcherTestCase(TestCase):
    ''' Dispatcher in lenient mode, as used by the interactive session '''

    def setUp(self):
        self.setUpPyfakefs()
        self.driver = make_driver()
        self.lexer = Lexer()
        self.dispatcher = Dispatcher(self.driver, strict=False, user_message_fun=MagicMock(),
                                     default_logging=False)

    def feed(self, line):
        ''' Lex and dispatch one line of interactive input; return the reported errors '''
        tokens = [t for t in self.lexer.lex_line(line) if t.type is not TokenType.END_OF_FILE]
        return self.dispatcher.parse(tokens)

    def test_valid_line_after_malformed_line(self):
        self.feed("MODE I")
        with self.assertLogs("axilang", level="ERROR"):
            errors = self.feed("GOTO 1 x")
        self.feed("GOTO 3 4")

        self.assertEqual(len(errors), 1)
        self.driver.go_to.assert_called_once_with(3, 4)

    def test_strict_mode_halts(self):
        dispatcher = Dispatcher(self.driver, strict=True, default_logging=False)
        with self.assertLogs("axilang", level="ERROR"):
            with self.assertRaises(CommandError):
                dispatcher.parse(stream("MODE I\nGOTO 1 x\nGOTO 3 4\n"))
        self.driver.go_to.assert_not_called()

    def test_whole_script_lenient(self):
        dispatcher = Dispatcher(self.driver, strict=False, default_logging=False)
        with self.assertLogs("axilang", level="ERROR"):
            errors = dispatcher.parse(stream("MODE I\nGOTO 1 x HOME\nGOTO 3 4\n"))

        self.assertEqual([error.message.splitlines()[0] for error in errors],
                         ["Invalid Y coordinate specified."])
        self.driver.home.assert_not_called() # the rest of the bad line is skipped
        self.driver.go_to.assert_called_once_with(3, 4)

    def test_errors_before_mode_keep_session(self):
        with self.assertLogs("axilang", level="ERROR"):
            self.feed("HOME")
        self.feed("MODE I")
        self.feed("HOME")

        self.driver.home.assert_called_once_with()

    def test_pending_block(self):
        self.feed("MODE P")
        self.feed("OPTS")
        self.assertTrue(self.dispatcher.pending)
        self.feed("  ACCEL 50")
        self.feed("  PORT")
        self.assertTrue(self.dispatcher.pending)
        self.driver.set_acceleration.assert_not_called()

        self.feed('"AxiDraw-1" END_OPTS')

        self.assertFalse(self.dispatcher.pending)
        self.assertEqual(self.driver.mock_calls, [call.set_acceleration(50),
                                                  call.set_port("AxiDraw-1"),
                                                  call.commit_options()])

    def test_error_inside_pending_block(self):
        self.feed("MODE P")
        self.feed("OPTS ACCEL 50")
        with self.assertLogs("axilang", level="ERROR") as logs:
            errors = self.feed("BOGUS 3")
            errors += self.feed("ACCEL 5")
            errors += self.feed("END_OPTS")

        self.assertEqual(len(errors), 1)
        self.assertEqual(len(logs.output), 1)
        self.assertFalse(self.dispatcher.pending)
        self.assertEqual(self.driver.mock_calls, [])

        self.feed("OPTS ACCEL 20 END_OPTS")
        self.assertEqual(self.driver.mock_calls, [call.set_acceleration(20),
                                                  call.commit_options()])

    def test_block_skipped_until_terminator_arrives(self):
        self.feed("MODE I")
        with self.assertLogs("axilang", level="ERROR"):
            errors = self.feed("UOPTS MODEL 9")
        self.assertEqual(len(errors), 1)
        self.assertTrue(self.dispatcher.pending)

        self.assertEqual(self.feed("PEND_POS 10"), [])
        self.assertTrue(self.dispatcher.pending)
        self.assertEqual(self.feed("END_UOPTS HOME"), [])

        self.assertFalse(self.dispatcher.pending)
        self.driver.set_pen_down_position.assert_not_called()
        self.driver.home.assert_called_once_with()

    def test_discard(self):
        self.feed("MODE P")
        self.feed("OPTS ACCEL 50")
        self.dispatcher.discard()

        self.assertFalse(self.dispatcher.pending)
        with self.assertLogs("axilang", level="ERROR"):
            self.feed("END_OPTS")
        self.driver.set_acceleration.assert_not_called()


class ExecuteFileTestCase(TestCase):

    def setUp(self):
        self.setUpPyfakefs()
        self.driver = make_driver()

    def test_execute_file(self):
        self.fs.create_file("square.axi", contents="MODE I\nCONNECT\nDRAW 0 0 10 0\n")

        execute_file("square.axi", self.driver, default_logging=False)

        self.assertEqual(self.driver.mock_calls[2:], [call.connect(),
                                                      call.draw_path([(0, 0), (10, 0)])])

    def test_missing_file(self):
        with self.assertRaises(FatalError) as fe:
            execute_file("missing.axi", self.driver, default_logging=False)
        self.assertIn("does not exist", fe.exception.message)

    def test_empty_file(self):
        self.fs.create_file("empty.axi")
        with self.assertRaises(FatalError) as fe:
            execute_file("empty.axi", self.driver, default_logging=False)
        self.assertIn("is empty", fe.exception.message)

    def test_directory(self):
        self.fs.create_dir("scripts.axi")
        with self.assertRaises(FatalError):
            execute_file("scripts.axi", self.driver, default_logging=False)

    def test_unknown_tokens_abort_before_running(self):
        self.fs.create_file("bad.axi", contents="MODE I\nCONNECT\nFLY\nSWIM\n")

        with self.assertLogs("axilang", level="ERROR") as logs:
            with self.assertRaises(CommandError):
                execute_file("bad.axi", self.driver, default_logging=False)

        self.assertEqual(len(logs.output), 2)
        self.assertIn("On line 3 of bad.axi.", logs.output[0])
        self.assertEqual(self.driver.mock_calls, [])

    def test_error_stops_script(self):
        self.fs.create_file("halt.axi", contents="MODE I\nCONNECT\nWAIT\nHOME\n")

        with self.assertLogs("axilang", level="ERROR"):
            with self.assertRaises(CommandError):
                execute_file("halt.axi", self.driver, default_logging=False)

        self.driver.connect.assert_called_once_with()
        self.driver.home.assert_not_called()

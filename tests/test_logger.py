import io
import logging
import unittest

from cluegrid.utils.logger import ROOT_LOGGER, configure_logging, get_logger, parse_level


class LoggerTests(unittest.TestCase):
    def tearDown(self) -> None:
        logger = logging.getLogger(ROOT_LOGGER)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)

    def test_reconfiguring_replaces_console_handler(self) -> None:
        foreign = logging.NullHandler()
        logging.getLogger(ROOT_LOGGER).addHandler(foreign)
        configure_logging("info")
        configure_logging("debug")
        handlers = logging.getLogger(ROOT_LOGGER).handlers
        self.assertEqual(len(handlers), 2)
        self.assertIn(foreign, handlers)
        self.assertEqual(logging.getLogger(ROOT_LOGGER).level, logging.DEBUG)

    def test_records_are_formatted_to_stream(self) -> None:
        stream = io.StringIO()
        configure_logging(logging.INFO, stream=stream)
        get_logger("cluegrid.engine.stats").info("Recorded %s", "win")
        get_logger("cluegrid.engine.stats").debug("hidden")
        line = stream.getvalue().strip()
        self.assertIn("| INFO    | cluegrid.engine.stats | Recorded win", line)
        self.assertNotIn("hidden", line)

    def test_get_logger_namespaces_names(self) -> None:
        self.assertEqual(get_logger().name, "cluegrid")
        self.assertEqual(get_logger("main").name, "cluegrid.main")
        self.assertEqual(get_logger("cluegrid.io.storage").name, "cluegrid.io.storage")

    def test_parse_level(self) -> None:
        self.assertEqual(parse_level("warning"), logging.WARNING)
        self.assertEqual(parse_level(" Debug "), logging.DEBUG)
        self.assertEqual(parse_level(15), 15)
        self.assertEqual(parse_level("chatty"), logging.WARNING)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

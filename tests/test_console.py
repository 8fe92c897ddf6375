"""
Tests for the console presentation and log formatting.
"""

import io
import logging
import time

from modpack_installer.core.log import InstallerLogFormatter, setup_logging
from modpack_installer.ui import ConsoleProgress


class TestConsoleProgress:

    def test_progress_line(self):
        stream = io.StringIO()
        progress = ConsoleProgress(stream)
        progress.on_progress(1, 4, "Downloading a.jar")
        assert " 25% (1/4 files) - Downloading a.jar" in stream.getvalue()
        assert not stream.getvalue().endswith("\n")

    def test_finished_line_is_closed(self):
        stream = io.StringIO()
        progress = ConsoleProgress(stream)
        progress.on_progress(4, 4, "Installation completed!")
        assert stream.getvalue().endswith("\n")

    def test_status_starts_new_line(self):
        stream = io.StringIO()
        progress = ConsoleProgress(stream)
        progress.on_progress(0, 2, "Downloading a.jar")
        progress.on_status("Installation failed")
        lines = stream.getvalue().split("\n")
        assert "Installation failed" in lines[1]

    def test_installer_update_remembered(self):
        progress = ConsoleProgress(io.StringIO())
        progress.on_installer_update("2.0.0", "https://example.com/new.jar")
        assert progress.installer_update == ("2.0.0", "https://example.com/new.jar")


class TestLogging:

    def test_timestamp_format(self):
        formatter = InstallerLogFormatter("[%(asctime)s]: %(message)s")
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)
        formatter.converter = lambda _: time.struct_time((2025, 3, 7, 16, 5, 9, 4, 66, 0))
        assert formatter.format(record) == "[3/7/2025 4:05:09 PM]: hello"

    def test_file_handler(self, temp_dir):
        log_path = temp_dir / "installer.log"
        logger = setup_logging(log_path)
        try:
            logging.getLogger("modpack_installer.sync.installer").info("Starting installation...")
            for handler in logger.handlers:
                handler.flush()
            assert "Starting installation..." in log_path.read_text()
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()

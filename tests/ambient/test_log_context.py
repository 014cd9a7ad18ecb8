"""
Tests for structured logging setup and context binding.
"""
import logging

import pytest
import structlog


@pytest.fixture(autouse=True)
def _clean_contextvars():
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


class TestLogContext:
    """Tests for LogContext and the bind helpers."""

    def test_binds_and_unbinds(self):
        from observability import LogContext

        with LogContext(verse_ref="John 3:16", provider="openai"):
            assert structlog.contextvars.get_contextvars() == {
                "verse_ref": "John 3:16",
                "provider": "openai",
            }

        assert structlog.contextvars.get_contextvars() == {}

    @pytest.mark.asyncio
    async def test_async(self):
        from observability import LogContext

        async with LogContext(verse_ref="Gen 1:1"):
            assert structlog.contextvars.get_contextvars()["verse_ref"] == "Gen 1:1"

        assert "verse_ref" not in structlog.contextvars.get_contextvars()

    def test_leaves_other_bindings(self):
        from observability import LogContext, bind_context, clear_context

        bind_context(study="Gospels")
        with LogContext(verse_ref="John 1:1"):
            pass

        assert structlog.contextvars.get_contextvars() == {"study": "Gospels"}

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    @pytest.mark.asyncio
    async def test_generation_binds_verse(self):
        from pipeline.commentary import CommentaryAccumulator

        seen = {}

        async def generate(verse_ref, previous):
            seen.update(structlog.contextvars.get_contextvars())
            return {"markdown": "## Meaning"}

        await CommentaryAccumulator().generate_for("Gen 1:1", ["Gen 1:1"], [], generate)

        assert seen["verse_ref"] == "Gen 1:1"
        assert "verse_ref" not in structlog.contextvars.get_contextvars()


class TestSetupLogging:
    """Tests for setup_logging and shutdown_logging."""

    def test_repeat_call_is_noop_unless_forced(self):
        from observability.logging import LoggingConfig, setup_logging, shutdown_logging

        shutdown_logging()
        try:
            setup_logging(LoggingConfig(level="WARNING"))
            setup_logging(LoggingConfig(level="DEBUG"))
            assert logging.getLogger().level == logging.WARNING

            setup_logging(LoggingConfig(level="DEBUG"), force=True)
            assert logging.getLogger().level == logging.DEBUG
        finally:
            setup_logging(LoggingConfig(level="INFO"), force=True)

    def test_vendor_loggers_quieted(self):
        from observability.logging import LoggingConfig, setup_logging

        setup_logging(LoggingConfig(level="DEBUG"), force=True)
        try:
            assert logging.getLogger("openai").level == logging.WARNING
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            setup_logging(LoggingConfig(level="INFO"), force=True)

    def test_file_logging(self, tmp_path):
        from observability.logging import LoggingConfig, get_logger, setup_logging

        log_file = tmp_path / "logs" / "scriptorium.log"
        setup_logging(
            LoggingConfig(level="INFO", log_to_console=False, log_to_file=True, log_file_path=log_file),
            force=True,
        )
        try:
            get_logger("tests.ambient").info("Timeline built", clusters=2)
            for handler in logging.getLogger().handlers:
                handler.flush()
            assert "Timeline built" in log_file.read_text(encoding="utf-8")
        finally:
            setup_logging(LoggingConfig(level="INFO"), force=True)

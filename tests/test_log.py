import logging

from reminder_engine.log import setup_logger


def test_setup_logger_adds_handlers_once(tmp_path):
    log_file = tmp_path / "logs" / "engine.log"
    logger = setup_logger("reminder_engine.test_log", log_file=str(log_file), level=logging.DEBUG)
    again = setup_logger("reminder_engine.test_log", log_file=str(log_file))

    assert logger is again
    assert len(logger.handlers) == 2
    logger.info("scheduled")
    for handler in logger.handlers:
        handler.flush()
    assert "scheduled" in log_file.read_text(encoding="utf-8")

import logging

from loguru import logger

from phrase_stories.utils.logger import CLIENT_LOGGERS, setup_logger


def test_file_sink_keeps_debug_and_client_records(tmp_path):
    log_file = tmp_path / "logs" / "stories.log"
    setup_logger("WARNING", log_file, client_level="INFO")

    logger.debug("polled run_1")
    logging.getLogger("httpx").info("HTTP Request: POST /v1/text-to-speech")
    logging.getLogger("openai").debug("hidden below client level")
    logger.complete()
    logger.remove()

    text = log_file.read_text(encoding="utf-8")
    assert "polled run_1" in text
    assert "HTTP Request: POST /v1/text-to-speech" in text
    assert "hidden below client level" not in text


def test_client_loggers_do_not_propagate(tmp_path):
    setup_logger("INFO", client_level="WARNING")
    for name in CLIENT_LOGGERS:
        client_logger = logging.getLogger(name)
        assert not client_logger.propagate
        assert client_logger.level == logging.WARNING
    logger.remove()

from loguru import logger

from liveshare_autotest.common.log_setup import init_logger, reset_logger


def test_init_logger_writes_file_once(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    other_file = tmp_path / "logs" / "other.log"
    reset_logger()
    try:
        init_logger(level="debug", log_file=str(log_file))
        # Already initialized: ignored
        init_logger(log_file=str(other_file))
        logger.info("Event settings flow started")

        assert "Event settings flow started" in log_file.read_text(encoding="utf-8")
        assert not other_file.exists()
    finally:
        reset_logger()
        init_logger(log_file="")

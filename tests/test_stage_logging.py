import logging

from common.errors import AnalysisFailed, NoJsonFound
from utils.logger import StageLogger, truncate


def test_truncate_long_and_structured_values():
    assert truncate("x" * 10, limit=5) == "xxxxx …[truncated]"
    assert truncate({"a": 1}) == '{"a": 1}'


def test_stage_logger_tags_session_and_stage(caplog):
    log = StageLogger(logging.getLogger("trades-matching.test")).with_session("abc")
    with caplog.at_level(logging.DEBUG, logger="trades-matching.test"):
        log.stage_start("pricing", "PROMPT TEXT", worker="w1")
        log.stage_result("pricing", total=175)
        log.stage_failed("pricing", AnalysisFailed(NoJsonFound("nothing")))

    text = caplog.text
    assert "STAGE START | session=abc stage=pricing worker=w1" in text
    assert "PROMPT TEXT" in text
    assert "STAGE DONE | session=abc stage=pricing total=175" in text
    assert "STAGE FAIL | session=abc stage=pricing error=AnalysisFailed" in text

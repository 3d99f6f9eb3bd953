import io
import json

from roi_analyzer.adapters.logging_utils import get_logger


def test_logger_writes_one_json_object_per_event():
    stream = io.StringIO()
    logger = get_logger("tests.logging_utils.json_lines", stream=stream)

    logger.warning("scenarios_write_failed", extra={"context": {"op": "save_new", "scenario_id": 7}})

    payload = json.loads(stream.getvalue().strip())
    assert payload["message"] == "scenarios_write_failed"
    assert payload["level"] == "WARNING"
    assert payload["op"] == "save_new"
    assert payload["scenario_id"] == 7
    assert "env" in payload


def test_logger_includes_traceback_for_exceptions():
    stream = io.StringIO()
    logger = get_logger("tests.logging_utils.exc", stream=stream)

    try:
        raise ValueError("boom")
    except ValueError:
        logger.exception("failed")

    assert "ValueError: boom" in json.loads(stream.getvalue().strip())["exc"]

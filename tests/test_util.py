import logging
import pytest
from util.enums import ErrorMessage
from util.errors import AggregationError, DimensionMismatchError, InvalidVersionError
from util.functions import clip_chars, first_matching_line, preview
from util.timing import timed


def test_status_for_each_kind():
    assert ErrorMessage.status_for(InvalidVersionError.kind) == 400
    assert ErrorMessage.status_for(AggregationError.kind) == 502
    assert ErrorMessage.status_for(DimensionMismatchError.kind) == 500
    assert ErrorMessage.status_for("deadline_exceeded") == 504
    assert ErrorMessage.status_for("something_new") == 500


def test_error_str_includes_kind():
    err = InvalidVersionError("1999", ["draft"])
    assert str(err) == "invalid_version: invalid spec version: 1999 (known: draft)"


def test_clip_and_preview():
    assert clip_chars("abc", 3) == "abc"
    assert clip_chars("abcd", 3) == "abc..."
    assert preview("a\nb\tc") == "a b c"


def test_first_matching_line_skips_blanks():
    assert first_matching_line("\n  \n# h\nbody", lambda l: not l.startswith("#")) == "body"
    assert first_matching_line("# h", lambda l: False) is None


def test_timed_logs_failure_and_reraises(caplog):
    log = logging.getLogger("test.timed")
    with caplog.at_level(logging.INFO, logger="test.timed"):
        with pytest.raises(RuntimeError):
            with timed(log, "stage", chunk="chunk-0"):
                raise RuntimeError("boom")
    assert "stage.done" in caplog.text
    assert "ok=False chunk=chunk-0" in caplog.text

from feed_summarizer.errors import AggregatedError, DeadlineExceeded, FetchFailure
from feed_summarizer.logging_conf import tail_log


def test_aggregated_error_lists_every_cause():
    error = AggregatedError(
        [FetchFailure("https://a", "status code: 500"), DeadlineExceeded("https://b")],
        "some URLs may not have been fetched successfully",
    )
    message = str(error)
    assert message.startswith("some URLs may not have been fetched successfully")
    assert "failed to fetch https://a: status code: 500" in message
    assert "failed to fetch https://b: deadline exceeded" in message
    assert len(error) == 2
    assert error.failed_identifiers == {"https://a", "https://b"}


def test_deadline_exceeded_is_a_fetch_failure():
    assert isinstance(DeadlineExceeded("x"), FetchFailure)


def test_tail_log(tmp_path):
    path = tmp_path / "summarizer.log"
    assert tail_log(path, 5) == []
    path.write_text("".join(f"line {i}\n" for i in range(10)), encoding="utf-8")
    assert tail_log(path, 3) == ["line 7\n", "line 8\n", "line 9\n"]

import logging

import pytest
from django.http import HttpResponse

from surrogate_cache.exceptions import (
    HeaderAlreadySent,
    HeaderFinalizedError,
    PreconditionViolation,
)
from surrogate_cache.headers import (
    STALE_IF_ERROR,
    STALE_WHILE_REVALIDATE,
    CacheControlHeader,
    MergedCacheControlHeader,
    ResponseSink,
    SentHeader,
    SurrogateControlHeader,
    SurrogateKeysHeader,
)


class RecordingSink:
    def __init__(self):
        self.lines = []

    def write_header(self, name, value):
        self.lines.append(f"{name}: {value}")


class TestSurrogateControlHeader:
    @pytest.mark.parametrize("seconds", [0, 1, 10, 300, 86400])
    def test_renders(self, seconds):
        header = SurrogateControlHeader(seconds)
        assert header.get_header_name() == "Surrogate-Control"
        assert header.get_seconds() == seconds
        assert header.get_value() == f"max-age={seconds}"

    def test_coerces_seconds(self):
        assert SurrogateControlHeader("120").get_seconds() == 120
        assert SurrogateControlHeader(-5).get_seconds() == 5
        assert SurrogateControlHeader("soon").get_seconds() == 0

    def test_set_seconds(self):
        header = SurrogateControlHeader(10)
        assert header.set_seconds(600) == 600
        assert header.get_value() == "max-age=600"

    def test_send(self):
        sink = RecordingSink()
        record = SurrogateControlHeader(10).send(sink)
        assert record == SentHeader("Surrogate-Control", "max-age=10")
        assert sink.lines == ["Surrogate-Control: max-age=10"]

    def test_send_twice_raises(self):
        header = SurrogateControlHeader(10)
        header.send(RecordingSink())
        with pytest.raises(HeaderAlreadySent):
            header.send(RecordingSink())

    def test_mutation_after_send_raises(self):
        header = SurrogateControlHeader(10)
        header.send(RecordingSink())
        with pytest.raises(HeaderFinalizedError):
            header.set_seconds(20)

    def test_missing_sink_logs_warning(self, caplog):
        header = SurrogateControlHeader(10)
        with caplog.at_level(logging.WARNING):
            assert header.send(None) is None
        assert "Surrogate-Control header not sent" in caplog.text
        assert header.sent is None


class TestCacheControlHeader:
    @pytest.mark.parametrize(
        "directive,seconds",
        [
            (STALE_WHILE_REVALIDATE, 86400),
            (STALE_IF_ERROR, 60),
            ("max-age", 0),
        ],
    )
    def test_renders(self, directive, seconds):
        header = CacheControlHeader(seconds, directive)
        assert header.get_header_name() == "Cache-Control"
        assert header.get_directive() == directive
        assert header.get_value() == f"{directive}={seconds}"
        assert header.render() == f"Cache-Control: {directive}={seconds}"

    def test_merged(self):
        merged = MergedCacheControlHeader(
            [
                CacheControlHeader(86400, STALE_WHILE_REVALIDATE),
                CacheControlHeader(60, STALE_IF_ERROR),
            ]
        )
        assert merged.get_value() == "stale-while-revalidate=86400, stale-if-error=60"

    def test_merged_send_finalizes_members(self):
        member = CacheControlHeader(60, STALE_IF_ERROR)
        MergedCacheControlHeader([member]).send(RecordingSink())
        with pytest.raises(HeaderFinalizedError):
            member.set_seconds(1)

    def test_merged_empty_not_sent(self):
        sink = RecordingSink()
        assert MergedCacheControlHeader([]).send(sink) is None
        assert sink.lines == []


class TestSurrogateKeysHeader:
    def test_renders(self):
        header = SurrogateKeysHeader(["post-5", "author-2"])
        assert header.get_header_name() == "Surrogate-Key"
        assert header.get_value() == "post-5 author-2"

    def test_strips_invalid_characters(self):
        header = SurrogateKeysHeader()
        header.add_key("abc def!")
        assert header.get_keys() == ["abcdef"]
        assert header.get_value() == "abcdef"

    def test_duplicates_collapse_in_first_seen_order(self):
        header = SurrogateKeysHeader()
        header.add_keys(["b", "a", "b", "c", "a"])
        assert header.get_value() == "b a c"

    def test_keys_that_sanitize_to_empty_are_ignored(self):
        header = SurrogateKeysHeader()
        assert header.add_key("!!!") == []
        assert header.add_keys(["", " ", "ok"]) == ["ok"]

    def test_set_keys_replaces(self):
        header = SurrogateKeysHeader(["a", "b"])
        assert header.set_keys(["c"]) == ["c"]
        assert header.get_value() == "c"

    def test_bare_string_is_one_key(self):
        header = SurrogateKeysHeader()
        assert header.add_keys("post-5") == ["post-5"]
        assert header.set_keys("author-2") == ["author-2"]
        assert header.get_value() == "author-2"

    def test_empty_not_sent(self):
        sink = RecordingSink()
        header = SurrogateKeysHeader(["?!"])
        assert header.send(sink) is None
        assert sink.lines == []

    def test_send(self):
        sink = RecordingSink()
        SurrogateKeysHeader(["post-5", "author-2"]).send(sink)
        assert sink.lines == ["Surrogate-Key: post-5 author-2"]

    def test_oversized_key_dropped(self):
        header = SurrogateKeysHeader(["a" * 2000, "small"])
        assert header.get_value() == "small"

    def test_header_size_limit(self):
        keys = [f"{i:04d}" + "x" * 1000 for i in range(20)]
        header = SurrogateKeysHeader(keys)
        assert len(header.get_value()) <= SurrogateKeysHeader.MAX_HEADER_SIZE
        assert len(header.get_value().split()) < 20

    def test_add_after_send_raises(self):
        header = SurrogateKeysHeader(["a"])
        header.send(RecordingSink())
        with pytest.raises(HeaderFinalizedError):
            header.add_key("b")
        with pytest.raises(HeaderFinalizedError):
            header.set_keys([])


class TestResponseSink:
    def test_writes_header(self):
        response = HttpResponse(b"ok")
        SurrogateControlHeader(30).send(ResponseSink(response))
        assert response["Surrogate-Control"] == "max-age=30"

    def test_closed_response_raises(self):
        response = HttpResponse(b"ok")
        response.close()
        with pytest.raises(PreconditionViolation):
            SurrogateControlHeader(30).send(ResponseSink(response))

    def test_last_value_wins(self):
        response = HttpResponse(b"ok")
        sink = ResponseSink(response)
        CacheControlHeader(1, STALE_WHILE_REVALIDATE).send(sink)
        CacheControlHeader(2, STALE_IF_ERROR).send(sink)
        assert response["Cache-Control"] == "stale-if-error=2"

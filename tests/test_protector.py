import pytest

from ja_translate.translation.protector import SpanProtector, find_placeholders


@pytest.fixture
def protector() -> SpanProtector:
    return SpanProtector()


def test_mask_replaces_spans_in_fixed_order(protector: SpanProtector) -> None:
    text = "Run `make` after\n```sh\nmake all\n```\nsee https://example.com and ./src/app.py"

    masked, span_map = protector.mask(text)

    assert masked == "Run __INLINE_CODE_1__ after\n__CODE_BLOCK_0__\nsee __URL_2__ and __FILE_PATH_3__"
    assert list(span_map) == [
        "__CODE_BLOCK_0__",
        "__INLINE_CODE_1__",
        "__URL_2__",
        "__FILE_PATH_3__",
    ]
    assert span_map["__CODE_BLOCK_0__"] == "```sh\nmake all\n```"
    assert span_map["__FILE_PATH_3__"] == "./src/app.py"


def test_counter_is_shared_across_span_classes(protector: SpanProtector) -> None:
    masked, span_map = protector.mask("`a` then `b` then http://x.io")

    assert masked == "__INLINE_CODE_0__ then __INLINE_CODE_1__ then __URL_2__"
    assert len(span_map) == 3


def test_link_containing_url_round_trips(protector: SpanProtector) -> None:
    text = "Read [the notes at http://a.io today](notes) first."

    masked, span_map = protector.mask(text)

    # The URL is claimed first; the link then wraps its placeholder
    assert masked == "Read __LINK_1__ first."
    assert span_map["__LINK_1__"] == "[the notes at __URL_0__ today](notes)"
    assert protector.restore(masked, span_map) == text


def test_numbers_already_in_the_text_are_skipped(protector: SpanProtector) -> None:
    text = "__URL_0__ then https://x.io"

    masked, span_map = protector.mask(text)

    assert masked == "__URL_0__ then __URL_1__"
    assert span_map == {"__URL_1__": "https://x.io"}
    assert protector.restore(masked, span_map) == text


def test_round_trip_preserves_tricky_text(protector: SpanProtector) -> None:
    samples = [
        "",
        "plain prose without anything special",
        "`code`, `more code`; and (`x`).",
        "See [a](./guide.md) and [b](http://b.dev/x?y=1).",
        "```\nfenced `inline` https://inside.example\n```\nafter /etc/hosts.conf",
        "Paths like /usr/lib/file.so and ./a/b.tar.gz",
        "__URL_7__ literal-looking text",
        "__URL_0__ then https://x.io",
        "`__INLINE_CODE_0__` and `__INLINE_CODE_1__`",
        "__URL_0```\nfence\n```__ glued to a code block",
        "see [__LINK_0__](notes) and [docs](guide)",
    ]
    for text in samples:
        masked, span_map = protector.mask(text)
        assert protector.restore(masked, span_map) == text


def test_restore_is_idempotent(protector: SpanProtector) -> None:
    text = "Use `git` with https://github.com/org/repo"
    masked, span_map = protector.mask(text)

    once = protector.restore(masked, span_map)

    assert protector.restore(once, span_map) == once == text


def test_protector_instances_keep_no_state_between_calls(protector: SpanProtector) -> None:
    first, _ = protector.mask("`a`")
    second, _ = protector.mask("`b`")

    assert first == second == "__INLINE_CODE_0__"


def test_find_placeholders() -> None:
    assert find_placeholders("x __URL_0__ y __CODE_BLOCK_12__ __OTHER_1__") == [
        "__URL_0__",
        "__CODE_BLOCK_12__",
    ]

from pathlib import Path

import pytest

from filebrowser.documents import (
    MatchType,
    extract_front_matter,
    extract_tags,
    load_document,
    parse,
    render_html,
    search,
)

SAMPLE = "---\ntitle: Hello\ntags: [a, b]\n---\nBody #c [[d]]"


# ---------------------------------------------------------------------------
# Front matter
# ---------------------------------------------------------------------------

def test_front_matter_sample() -> None:
    metadata, body = extract_front_matter(SAMPLE)

    assert metadata == {"title": "Hello", "tags": "[a, b]"}
    assert body == "Body #c [[d]]"
    assert "---" not in body


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "Just text",
        "Intro\n---\ntitle: x\n---\nrest",
        "\n---\ntitle: x\n---\nleading blank line",
        " ---\ntitle: x\n---\nleading space",
        "---\ntitle: never closed\n",
        "--- \ntitle: x\n---\ntrailing space on opener",
    ],
)
def test_text_without_front_matter_is_unchanged(raw: str) -> None:
    metadata, body = extract_front_matter(raw)

    assert metadata == {}
    assert body == raw


def test_keys_are_lowercased_and_last_wins() -> None:
    metadata, _ = extract_front_matter("---\nTitle: First\nTITLE: Second\nAuthor: Ann\n---\n")

    assert metadata == {"title": "Second", "author": "Ann"}


def test_value_split_on_first_colon_only() -> None:
    metadata, _ = extract_front_matter("---\nurl: https://example.com:8080/x\n---\n")

    assert metadata["url"] == "https://example.com:8080/x"


def test_one_layer_of_matching_quotes_is_removed() -> None:
    raw = (
        "---\n"
        'double: "Quoted"\n'
        "single: 'Single'\n"
        "nested: \"'inner'\"\n"
        "mismatched: \"open'\n"
        "---\n"
    )
    metadata, _ = extract_front_matter(raw)

    assert metadata == {
        "double": "Quoted",
        "single": "Single",
        "nested": "'inner'",
        "mismatched": "\"open'",
    }


def test_malformed_lines_are_skipped() -> None:
    raw = "---\nno colon here\n: orphan value\nempty:\nblank: \"\"\n  id :  42  \n---\nbody"
    metadata, body = extract_front_matter(raw)

    assert metadata == {"id": "42"}
    assert body == "body"


def test_empty_block_and_crlf() -> None:
    assert extract_front_matter("---\n---\nBody") == ({}, "Body")
    assert extract_front_matter("---\r\ntitle: Win\r\n---\r\nBody") == ({"title": "Win"}, "Body")


def test_block_closes_only_on_exact_delimiter() -> None:
    metadata, body = extract_front_matter("---\na: 1\n----\nb: 2\n---\nrest\n---\nmore")

    assert metadata == {"a": "1", "b": "2"}
    assert body == "rest\n---\nmore"


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

def test_tags_from_all_sources() -> None:
    assert sorted(extract_tags(SAMPLE)) == ["a", "b", "c", "d"]


def test_tags_are_deduplicated_case_insensitively() -> None:
    tags = extract_tags("---\ntags: [Python]\n---\n#python and [[PYTHON]] and #Rust #rust")

    assert tags == ["Python", "Rust"]


def test_inline_tag_list_elements_are_trimmed_and_unquoted() -> None:
    tags = extract_tags("---\ntitle: x\ntags: [ \"two words\" , 'single', , plain ]\n---\n")

    assert tags == ["two words", "single", "plain"]


def test_tag_list_outside_front_matter_is_ignored() -> None:
    assert extract_tags("Body\ntags: [hidden]\n") == []


def test_hashtags_need_a_non_word_character_before() -> None:
    assert extract_tags("issue#12, C# and foo#bar") == []
    assert extract_tags("# Heading\n## Sub heading\n") == []
    assert extract_tags("(#inline) #end") == ["inline", "end"]


def test_hashtags_in_front_matter_are_collected() -> None:
    assert "meta" in extract_tags("---\nsummary: about #meta\n---\nbody")


def test_wiki_links_are_trimmed() -> None:
    assert extract_tags("See [[ Some Page ]] and [[Other]]") == ["Some Page", "Other"]


def test_extract_tags_is_idempotent() -> None:
    raw = SAMPLE + "\n#again [[d]] #C"

    assert extract_tags(raw) == extract_tags(raw)


def test_parse_combines_metadata_tags_and_body() -> None:
    doc = parse(SAMPLE)

    assert doc.metadata["title"] == "Hello"
    assert sorted(doc.tags) == ["a", "b", "c", "d"]
    assert doc.body == "Body #c [[d]]"


# ---------------------------------------------------------------------------
# Loading and rendering
# ---------------------------------------------------------------------------

def test_load_document_reports_failures(tmp_path: Path) -> None:
    good = tmp_path / "good.md"
    good.write_text(SAMPLE, encoding="utf-8")
    broken = tmp_path / "broken.md"
    broken.write_bytes(b"\xff\xfe\xfa not utf-8")

    ok = load_document(good)
    bad = load_document(broken)
    missing = load_document(tmp_path / "missing.md")

    assert ok.ok and ok.document.metadata["title"] == "Hello"
    assert not bad.ok and bad.error
    assert not missing.ok and missing.error


def test_render_html_uses_extensions() -> None:
    body = (
        "# Title\n\n"
        "| a | b |\n|---|---|\n| 1 | 2 |\n\n"
        "Text[^1] and https://example.com/page\n\n"
        "[^1]: A footnote.\n"
    )
    html = render_html(body)

    assert "<h1" in html and "Title</h1>" in html
    assert "<table>" in html
    assert 'class="footnote"' in html
    assert 'href="https://example.com/page"' in html


def test_render_html_keeps_urls_in_code_literal() -> None:
    body = "```\ncurl https://example.com/x\n```\n\n    wget https://a.b/c\n\n`https://inline.io`\n"
    html = render_html(body)

    assert "<a " not in html
    assert "&lt;" not in html and "&gt;" not in html
    assert "curl https://example.com/x" in html
    assert "wget https://a.b/c" in html
    assert "<code>https://inline.io</code>" in html


def test_render_html_leaves_explicit_links_alone() -> None:
    html = render_html("[site](https://example.com)")

    assert html.count("<a ") == 1
    assert '<a href="https://example.com">site</a>' in html


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

def test_search_prefers_id_over_content() -> None:
    hit = search("hello is also in the body", {"id": "HELLO-1"}, [], "hello")

    assert hit.match_type == MatchType.ID
    assert hit.snippet is None


def test_search_priority_order() -> None:
    assert search("x", {"title": "Say Hello"}, ["hello"], "hello").match_type == MatchType.TITLE
    assert search("hello", {}, ["greeting-hello"], "HELLO").match_type == MatchType.TAG
    assert search("well Hello there", {}, [], "hello").match_type == MatchType.CONTENT


def test_search_without_match_or_with_blank_query() -> None:
    assert search("nothing here", {"title": "x"}, ["y"], "hello") is None
    assert search("anything", {}, [], "") is None
    assert search("anything", {}, [], "   ") is None


def test_snippet_for_short_body_has_no_ellipses() -> None:
    hit = search("line one\n\n   hello\tthere", {}, [], "hello")

    assert hit.snippet == "line one hello there"


def test_snippet_is_windowed_around_first_match() -> None:
    body = "..." + "x" * 50 + "hello world " + "y" * 50 + "..."
    hit = search(body, {}, [], "hello")

    assert hit.snippet.startswith("...")
    assert hit.snippet.endswith("...")
    assert "hello world" in hit.snippet
    assert len(hit.snippet) <= 100 + len("hello") + 6


def test_snippet_at_body_start_has_only_trailing_ellipsis() -> None:
    body = "hello " + "z" * 100
    hit = search(body, {}, [], "hello")

    assert hit.snippet.startswith("hello")
    assert hit.snippet.endswith("...")


def test_search_uses_one_case_rule_for_every_field() -> None:
    assert search("", {"id": "Straße"}, [], "SS") is None
    assert search("Straße", {}, [], "SS") is None
    assert search("", {"id": "STRASSE-1"}, [], "strasse").match_type == MatchType.ID
    assert search("", {}, ["Straße"], "STRAßE").match_type == MatchType.TAG
    assert search("in der Straße", {}, [], "STRAßE").match_type == MatchType.CONTENT

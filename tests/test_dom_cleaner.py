"""
Unit Tests — DOM Cleaner
========================
Covers script/style stripping, the fixed output shape, idempotency,
tolerance of malformed input, and the batch directory helper.
"""
import pytest

from autoheal.services.dom_cleaner import (
    clean_dom,
    clean_dom_file,
    clean_failures_directory,
    cleaned_name_for,
)


SAMPLE_DOM = """\
<!DOCTYPE html>
<html>
<head>
  <title>TodoMVC</title>
  <style>.todo { color: red; }</style>
  <script src="/app.js"></script>
</head>
<body>
  <section class="todoapp">
    <h1>todo's</h1>
    <input class="new-todo" placeholder="What needs to be done?" autofocus>
    <script>window.__STATE__ = {"todos": []};</script>
  </section>
  <style>body { margin: 0; }</style>
</body>
</html>
"""

IDEMPOTENCY_SAMPLES = [
    SAMPLE_DOM,
    "<html><head><title>Tom &amp; Jerry</title></head><body><p>a &amp; b &lt; c</p></body></html>",
    "<title>&lt;b&gt;bold&lt;/b&gt;</title><body><ul><li>one<li>two</ul></body>",
    "<body><!-- comment --><div data-cy='x' hidden>text</div></body>",
    "<div><p>unclosed",
    "",
]


# ---------------------------------------------------------------------------
# 1. Stripping
# ---------------------------------------------------------------------------
class TestStripping:

    def test_removes_script_and_style_everywhere(self):
        cleaned = clean_dom(SAMPLE_DOM)
        assert "<script" not in cleaned
        assert "<style" not in cleaned
        assert "__STATE__" not in cleaned
        assert "margin: 0" not in cleaned

    def test_keeps_title_and_body_content(self):
        cleaned = clean_dom(SAMPLE_DOM)
        assert "<title>TodoMVC</title>" in cleaned
        assert "<h1>todo's</h1>" in cleaned
        assert 'class="new-todo"' in cleaned

    def test_exact_output_shape(self):
        raw = (
            "<html><head><title>Todos</title><style>h1{}</style></head>"
            "<body><h1>todos</h1><script>alert(1)</script></body></html>"
        )
        assert clean_dom(raw) == (
            "<html><head><title>Todos</title></head><body><h1>todos</h1></body></html>"
        )

    def test_drops_other_head_content(self):
        raw = '<html><head><meta charset="utf-8"><title>T</title></head><body></body></html>'
        assert "meta" not in clean_dom(raw)


# ---------------------------------------------------------------------------
# 2. Tolerance
# ---------------------------------------------------------------------------
class TestTolerance:

    def test_empty_input(self):
        assert clean_dom("") == "<html><head><title></title></head><body></body></html>"

    def test_none_input(self):
        assert clean_dom(None) == "<html><head><title></title></head><body></body></html>"

    def test_missing_body_yields_empty_body(self):
        assert clean_dom("<div><p>unclosed").endswith("<body></body></html>")

    def test_missing_title_yields_empty_title(self):
        assert "<title></title>" in clean_dom("<body><p>x</p></body>")

    def test_title_markup_is_escaped(self):
        cleaned = clean_dom("<title>&lt;b&gt;</title><body></body>")
        assert "<title>&lt;b&gt;</title>" in cleaned


# ---------------------------------------------------------------------------
# 3. Idempotency / determinism
# ---------------------------------------------------------------------------
class TestIdempotency:

    @pytest.mark.parametrize("raw", IDEMPOTENCY_SAMPLES)
    def test_cleaning_twice_is_a_no_op(self, raw):
        once = clean_dom(raw)
        assert clean_dom(once) == once

    @pytest.mark.parametrize("raw", IDEMPOTENCY_SAMPLES)
    def test_deterministic(self, raw):
        assert clean_dom(raw) == clean_dom(raw)

    def test_output_not_larger_than_structural_content(self):
        assert len(clean_dom(SAMPLE_DOM)) < len(SAMPLE_DOM)


# ---------------------------------------------------------------------------
# 4. Files and directories
# ---------------------------------------------------------------------------
class TestBatchCleaning:

    def test_cleaned_name(self):
        assert cleaned_name_for("adds a todo.html") == "adds a todo-clean.html"

    def test_clean_dom_file_writes_sibling(self, tmp_path):
        src = tmp_path / "adds a todo.html"
        src.write_text(SAMPLE_DOM, encoding="utf-8")

        artifact = clean_dom_file(str(src))

        out = tmp_path / "adds a todo-clean.html"
        assert artifact.cleaned_path == str(out)
        assert out.read_text(encoding="utf-8") == clean_dom(SAMPLE_DOM)
        assert artifact.original_chars == len(SAMPLE_DOM)
        assert artifact.cleaned_chars < artifact.original_chars
        # original left alone
        assert src.read_text(encoding="utf-8") == SAMPLE_DOM

    def test_directory_skips_already_cleaned(self, tmp_path):
        (tmp_path / "a.html").write_text(SAMPLE_DOM, encoding="utf-8")
        (tmp_path / "b.html").write_text("<body>b</body>", encoding="utf-8")
        (tmp_path / "a.context.json").write_text("{}", encoding="utf-8")

        first = clean_failures_directory(str(tmp_path))
        second = clean_failures_directory(str(tmp_path))

        assert [a.cleaned_path for a in first] == [
            str(tmp_path / "a-clean.html"),
            str(tmp_path / "b-clean.html"),
        ]
        assert len(second) == 2
        assert not (tmp_path / "a-clean-clean.html").exists()

    def test_missing_directory_returns_empty(self, tmp_path):
        assert clean_failures_directory(str(tmp_path / "nope")) == []

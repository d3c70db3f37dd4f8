"""
End-to-end pipeline tests

Tests the full path: pandoc JSON on disk -> pipeline stages -> rewritten JSON,
and the pandoc filter entry point over streams.
"""

import io
import json
import tempfile
from pathlib import Path

import pytest

from flexspan.__main__ import (
    env_check,
    source_read,
    rules_load,
    spans_rewrite,
    commands_render,
    result_write,
    results_report,
)
from flexspan.filter import stream_filter, filter_main
from flexspan.models import ProgramState, pipeline


def meta_str(text):
    return {"t": "MetaInlines", "c": [{"t": "Str", "c": text}]}


def doc_make(text, rules=()):
    """One-paragraph document whose metadata holds the given rules"""
    inlines = []
    for i, word in enumerate(text.split(" ")):
        if i:
            inlines.append({"t": "Space"})
        inlines.append({"t": "Str", "c": word})
    meta = {}
    if rules:
        meta["flexspan"] = {"t": "MetaList", "c": [
            {"t": "MetaMap", "c": {k: meta_str(v) for k, v in rule.items()}} for rule in rules
        ]}
    return {"pandoc-api-version": [1, 23, 1], "meta": meta, "blocks": [{"t": "Para", "c": inlines}]}


BOX_RULES = [{"left": "!!", "command": "custombox", "opts": "Cerulean"}]


def pipeline_run(tmpdir, doc, to=None, rules_yaml=None):
    inputdir = Path(tmpdir) / "in"
    outputdir = Path(tmpdir) / "out"
    inputdir.mkdir()
    (inputdir / "doc.json").write_text(json.dumps(doc), encoding="utf-8")
    rules_file = None
    if rules_yaml is not None:
        (inputdir / "rules.yaml").write_text(rules_yaml, encoding="utf-8")
        rules_file = "rules.yaml"

    state = ProgramState(
        inputdir=inputdir,
        outputdir=outputdir,
        verbosity=0,
        inputFile="doc.json",
        rulesFile=rules_file,
        to=to,
    )
    final = pipeline(
        state,
        env_check,
        source_read,
        rules_load,
        spans_rewrite,
        commands_render,
        result_write,
        results_report,
    )
    written = json.loads((outputdir / "doc.json").read_text(encoding="utf-8"))
    return final, written


class TestPipeline:
    """Test the batch pipeline"""

    def test_spans_for_html(self):
        doc = doc_make("Look at !!flexspan!!.", BOX_RULES)
        with tempfile.TemporaryDirectory() as tmpdir:
            final, written = pipeline_run(tmpdir, doc, to="html")

        assert final.rewriteResult["status"] is True
        assert final.rewriteResult["span_count"] == 1
        assert final.rewriteResult["render_count"] == 0
        assert final.rewriteResult["rule_count"] == 1
        inlines = written["blocks"][0]["c"]
        span = [i for i in inlines if i["t"] == "Span"][0]
        assert span["c"][0] == ["", ["custombox"], [["Cerulean", ""]]]
        assert inlines[-1] == {"t": "Str", "c": "."}

    def test_commands_for_latex(self):
        doc = doc_make("Look at !!flexspan!!(LimeGreen)", BOX_RULES)
        with tempfile.TemporaryDirectory() as tmpdir:
            final, written = pipeline_run(tmpdir, doc, to="latex")

        assert final.rewriteResult["render_count"] == 1
        raws = [i["c"][1] for i in written["blocks"][0]["c"] if i["t"] == "RawInline"]
        assert raws == ["\\custombox[LimeGreen]{", "}"]

    def test_rules_file(self):
        doc = doc_make("a --b-- c")
        with tempfile.TemporaryDirectory() as tmpdir:
            final, written = pipeline_run(tmpdir, doc, rules_yaml='- left: "--"\n  command: dash\n')

        assert final.rewriteResult["span_count"] == 1
        assert any(i["t"] == "Span" for i in written["blocks"][0]["c"])

    def test_no_rules_document_unchanged(self):
        doc = doc_make("a --b-- c")
        with tempfile.TemporaryDirectory() as tmpdir:
            final, written = pipeline_run(tmpdir, doc)

        assert final.rewriteResult["span_count"] == 0
        assert written == doc

    def test_missing_input_exits(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            state = ProgramState(
                inputdir=Path(tmpdir), outputdir=Path(tmpdir) / "out", verbosity=0, inputFile="absent.json"
            )
            with pytest.raises(SystemExit):
                env_check(state)

    def test_invalid_rules_file_exits(self):
        doc = doc_make("a")
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(SystemExit):
                pipeline_run(tmpdir, doc, rules_yaml="- left: [unclosed\n")


class TestFilter:
    """Test the pandoc filter entry point"""

    def test_stream_filter(self):
        source = io.StringIO(json.dumps(doc_make("Look at !!flexspan!!", BOX_RULES)))
        sink = io.StringIO()
        count = stream_filter(source, sink, "beamer")

        assert count == 1
        written = json.loads(sink.getvalue())
        raws = [i["c"][1] for i in written["blocks"][0]["c"] if i["t"] == "RawInline"]
        assert raws == ["\\custombox[Cerulean]{", "}"]

    def test_stream_filter_html_keeps_spans(self):
        source = io.StringIO(json.dumps(doc_make("!!flexspan!!", BOX_RULES)))
        sink = io.StringIO()
        stream_filter(source, sink, "html")

        written = json.loads(sink.getvalue())
        assert written["blocks"][0]["c"][0]["t"] == "Span"

    def test_filter_main(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(doc_make("--x--", [{"left": "--", "cmd": "d"}]))))
        assert filter_main(["latex"]) == 0
        written = json.loads(capsys.readouterr().out)
        assert written["blocks"][0]["c"][0] == {"t": "RawInline", "c": ["latex", "\\d{"]}

    def test_filter_main_bad_input(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("not json"))
        assert filter_main(["latex"]) == 1
        assert "flexspan-filter" in capsys.readouterr().err


class TestSplitOptions:
    """Option groups that pandoc splits at blanks"""

    def test_group_with_blank_html(self):
        source = io.StringIO(json.dumps(doc_make("Look at !!x!!(fg=blue, bold) more", BOX_RULES)))
        sink = io.StringIO()
        stream_filter(source, sink, "html")

        inlines = json.loads(sink.getvalue())["blocks"][0]["c"]
        span = [i for i in inlines if i["t"] == "Span"][0]
        assert span["c"][0][2] == [["fg", "blue"], ["bold", ""]]
        assert inlines[-2:] == [{"t": "Space"}, {"t": "Str", "c": "more"}]
        assert not any(i["t"] == "Str" and "(" in i["c"] for i in inlines)

    def test_group_after_blank_latex(self):
        source = io.StringIO(json.dumps(doc_make("!!x!! (Red)", BOX_RULES)))
        sink = io.StringIO()
        stream_filter(source, sink, "latex")

        inlines = json.loads(sink.getvalue())["blocks"][0]["c"]
        assert inlines == [
            {"t": "RawInline", "c": ["latex", "\\custombox[Red]{"]},
            {"t": "Str", "c": "x"},
            {"t": "RawInline", "c": ["latex", "}"]},
        ]


class TestRunningTwice:
    """Filtering an already rewritten document changes nothing"""

    NESTED_RULES = [{"left": "[[", "right": "]]", "command": "box"}, {"left": "--", "command": "dash"}]

    def test_filter_twice(self):
        first = io.StringIO()
        stream_filter(io.StringIO(json.dumps(doc_make("[[a --b-- c]]", self.NESTED_RULES))), first, "html")
        second = io.StringIO()
        count = stream_filter(io.StringIO(first.getvalue()), second, "html")

        assert count == 0
        assert json.loads(second.getvalue()) == json.loads(first.getvalue())
        box = json.loads(first.getvalue())["blocks"][0]["c"][0]
        assert {"t": "Str", "c": "--b--"} in box["c"][1]

    def test_pipeline_then_filter(self):
        doc = doc_make("[[a --b-- c]] and !!x!!(fg=blue, bold)", self.NESTED_RULES + BOX_RULES)
        with tempfile.TemporaryDirectory() as tmpdir:
            final, written = pipeline_run(tmpdir, doc)

        assert final.rewriteResult["span_count"] == 2
        sink = io.StringIO()
        assert stream_filter(io.StringIO(json.dumps(written)), sink, "html") == 0
        assert json.loads(sink.getvalue()) == written

from pathlib import Path

import pytest
from docx import Document as DocxReader

from WeChatFormat import ai, cli


def _write_markdown(tmp_path: Path) -> Path:
    source = tmp_path / "article.md"
    source.write_text("# 标题\n\n- 要点 **一**\n- 要点二\n", encoding="utf-8")
    return source


def test_cli_renders_html_next_to_input(tmp_path: Path):
    source = _write_markdown(tmp_path)
    cli.main([str(source), "--theme", "minimal"])
    html = (tmp_path / "article.html").read_text(encoding="utf-8")
    assert html.startswith("<section")
    assert "标题</h1>" in html
    assert "• 要点 <span" in html


def test_cli_renders_docx_into_directory(tmp_path: Path):
    source = _write_markdown(tmp_path)
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    cli.main([str(source), "--format", "docx", "-o", str(out_dir)])
    texts = [p.text for p in DocxReader(out_dir / "article.docx").paragraphs]
    assert "标题" in texts
    assert "• 要点 一" in texts


def test_cli_missing_input(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        cli.main([str(tmp_path / "missing.md")])


def test_cli_unknown_theme(tmp_path: Path):
    source = _write_markdown(tmp_path)
    with pytest.raises(SystemExit):
        cli.main([str(source), "--theme", "neon"])


def test_cli_requires_input_unless_listing():
    with pytest.raises(SystemExit):
        cli.main([])


def test_cli_lists_themes(capsys):
    cli.main(["--list-themes"])
    out = capsys.readouterr().out
    assert "classic\t经典蓝 (商务)" in out
    assert len(out.strip().splitlines()) == 4


def test_cli_runs_ai_action(tmp_path: Path, monkeypatch):
    class StubProvider(ai.LLMProvider):
        def invoke(self, messages, **kwargs):
            return "- 标题甲"

    monkeypatch.setattr(ai.OpenAIProvider, "from_env", classmethod(lambda cls: StubProvider()))
    source = _write_markdown(tmp_path)
    output = tmp_path / "result.html"
    cli.main([str(source), "--ai", "title", "-o", str(output)])
    html = output.read_text(encoding="utf-8")
    assert "AI 生成的标题:" in html
    assert "• 标题甲" in html


def test_cli_reads_byte_order_mark(tmp_path: Path):
    source = tmp_path / "bom.md"
    source.write_text("# 标题\n正文", encoding="utf-8-sig")
    cli.main([str(source)])
    html = (tmp_path / "bom.html").read_text(encoding="utf-8")
    assert "标题</h1>" in html
    assert "\ufeff" not in html

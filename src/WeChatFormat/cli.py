from __future__ import annotations

import argparse
import logging
from pathlib import Path

from . import ai, markdown_parser, renderer_docx, renderer_html, themes
from .utils import configure_logging, read_markdown, resolve_output_path, write_text

FORMAT_SUFFIXES = {"html": ".html", "docx": ".docx"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wechat-format",
        description="Format Markdown drafts as themed WeChat articles.",
    )
    parser.add_argument("input", type=str, nargs="?", help="Path to Markdown file")
    parser.add_argument("-o", "--output", type=str, help="Output file or directory")
    parser.add_argument("--theme", default=themes.DEFAULT_THEME_ID, help="Theme id (see --list-themes)")
    parser.add_argument("--format", choices=sorted(FORMAT_SUFFIXES), default="html", help="Output format")
    parser.add_argument(
        "--ai",
        choices=[action.value for action in ai.AIAction],
        help="Run an AI transform on the draft before rendering",
    )
    parser.add_argument("--list-themes", action="store_true", help="Print available themes and exit")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)

    if args.list_themes:
        for theme in themes.builtin_themes().values():
            print(f"{theme.id}\t{theme.name}")
        return
    if not args.input:
        parser.error("the following arguments are required: input")
    try:
        theme = themes.get_theme(args.theme)
    except themes.UnknownThemeError as exc:
        parser.error(str(exc))

    input_path = Path(args.input).expanduser()
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")
    output_path = resolve_output_path(input_path, args.output, FORMAT_SUFFIXES[args.format])

    logging.info("Reading %s", input_path)
    markdown_text = read_markdown(input_path)
    logging.debug("Markdown length: %d chars", len(markdown_text))

    if args.ai:
        provider = ai.OpenAIProvider.from_env()
        markdown_text = ai.apply_action(markdown_text, args.ai, provider)
        logging.info("AI action %s done", args.ai)

    logging.info("Parsing markdown...")
    blocks = markdown_parser.parse_markdown(markdown_text)

    logging.info("Rendering %s with theme %s to %s", args.format.upper(), theme.id, output_path)
    if args.format == "docx":
        renderer_docx.render_document(blocks, output_path, theme=theme, asset_root=input_path.parent)
    else:
        write_text(output_path, renderer_html.render_html(blocks, theme))

    logging.info("Done. Saved to %s", output_path)


if __name__ == "__main__":
    main()

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

logger = logging.getLogger(__name__)

THEME_CATALOG_PATH = Path(__file__).with_name("themes.yaml")
DEFAULT_THEME_ID = "classic"

STYLE_KEYS = (
    "container",
    "h1",
    "h2",
    "h3",
    "p",
    "blockquote",
    "list",
    "listItem",
    "strong",
    "link",
    "image",
)

StyleBundle = Dict[str, str]


class UnknownThemeError(KeyError):
    def __init__(self, theme_id: str, available: list[str]):
        super().__init__(theme_id)
        self.theme_id = theme_id
        self.available = available

    def __str__(self) -> str:
        return f"Unknown theme {self.theme_id!r}; available: {', '.join(self.available)}"


@dataclass(frozen=True)
class Theme:
    id: str
    name: str
    preview_color: str
    styles: Mapping[str, StyleBundle]

    def style(self, key: str) -> StyleBundle:
        return dict(self.styles.get(key, {}))


def load_themes(text: str | None = None) -> dict[str, Theme]:
    """Parse the YAML theme catalog, keeping the declared order."""
    if text is None:
        text = THEME_CATALOG_PATH.read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError("Theme catalog root must be a mapping.")

    base = data.get("base") or {}
    if not isinstance(base, dict):
        raise ValueError("Theme catalog 'base' must be a mapping of styles.")
    entries = data.get("themes")
    if not isinstance(entries, list) or not entries:
        raise ValueError("Theme catalog must define a non-empty 'themes' list.")

    themes: dict[str, Theme] = {}
    for entry in entries:
        theme = _build_theme(entry, base)
        if theme.id in themes:
            raise ValueError(f"Duplicate theme id: {theme.id}")
        themes[theme.id] = theme
    logger.debug("Loaded %d themes: %s", len(themes), ", ".join(themes))
    return themes


@lru_cache(maxsize=1)
def builtin_themes() -> dict[str, Theme]:
    return load_themes()


def get_theme(theme_id: str = DEFAULT_THEME_ID, themes: Mapping[str, Theme] | None = None) -> Theme:
    catalog = builtin_themes() if themes is None else themes
    try:
        return catalog[theme_id]
    except KeyError:
        raise UnknownThemeError(theme_id, list(catalog)) from None


def css_declarations(style: Mapping[str, Any]) -> str:
    """Turn a camelCase property bundle into an inline style attribute value."""
    return "; ".join(f"{_kebab_case(name)}: {value}" for name, value in style.items())


def _kebab_case(name: str) -> str:
    return re.sub(r"(?<!^)([A-Z])", r"-\1", name).lower()


def _build_theme(entry: Any, base: Mapping[str, Any]) -> Theme:
    if not isinstance(entry, dict):
        raise ValueError("Each theme entry must be a mapping.")
    theme_id = entry.get("id")
    if not theme_id:
        raise ValueError("Theme entry is missing an 'id'.")
    styles = entry.get("styles")
    if not isinstance(styles, dict):
        raise ValueError(f"Theme {theme_id} must define 'styles'.")
    missing = [key for key in STYLE_KEYS if key not in styles and key not in base]
    if missing:
        raise ValueError(f"Theme {theme_id} is missing styles: {', '.join(missing)}")

    merged: dict[str, StyleBundle] = {}
    for key in STYLE_KEYS:
        bundle = dict(base.get(key) or {})
        bundle.update(styles.get(key) or {})
        merged[key] = {str(name): str(value) for name, value in bundle.items()}
    return Theme(
        id=str(theme_id),
        name=str(entry.get("name") or theme_id),
        preview_color=str(entry.get("preview_color") or ""),
        styles=merged,
    )

"""AI text transforms for article drafts.

Each action sends the whole draft to an OpenAI-compatible chat model. Title and
summary results are appended below the draft; every other action replaces it.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional

from openai import OpenAI

logger = logging.getLogger(__name__)

API_KEY_ENV = "WECHAT_FORMAT_API_KEY"
FALLBACK_API_KEY_ENV = "OPENAI_API_KEY"
BASE_URL_ENV = "WECHAT_FORMAT_BASE_URL"
MODEL_ENV = "WECHAT_FORMAT_MODEL"
DEFAULT_MODEL = "gpt-4o-mini"

EMPTY_RESPONSE = "未生成任何回复。"
FAILURE_MESSAGE = "AI 处理失败，请稍后重试。"

SYSTEM_INSTRUCTION = "你是一位专业的微信公众号排版专家。你的目标是让文章结构清晰、易读且美观。"


class AIAction(str, Enum):
    SMART_FORMAT = "smart_format"
    POLISH = "polish"
    SUMMARIZE = "summarize"
    TITLE = "title"
    EMOJI = "emoji"


APPENDED_LABELS = {
    AIAction.TITLE: "标题",
    AIAction.SUMMARIZE: "摘要",
}

PROMPTS = {
    AIAction.SMART_FORMAT: """你是一位拥有10年经验的资深排版师。请基于“内容解构”方法论，将以下纯文本转换为结构化、模块化的 Markdown 格式，以便直接生成精美的公众号文章。

**执行逻辑（请在内心完成分析，只输出最终 Markdown）：**

1.  **内容解构 (Deconstruction)**：
    *   **识别骨架**：区分引言、核心论点（H2）、支撑材料（数据/案例）、操作步骤、结论。
    *   **识别层级**：明确主标题 (#)、章节标题 (##)、子要点 (###)。

2.  **组件映射 (Mapping)**：
    *   **标题体系**：
        *   文章最开头必须有主标题 (#)。
        *   主要逻辑段落使用二级标题 (##)。
    *   **视觉容器 (引用块 >)**：
        *   将“核心观点”、“金句”、“总结性段落”放入引用块。
        *   将“案例背景”或“补充说明”放入引用块。
    *   **列表组件 (- 或 1.)**：
        *   凡是涉及“步骤”、“清单”、“要点并列”的内容，必须转换为列表。
    *   **强调体系 (**加粗**)**：
        *   **极度克制**：全篇文章仅加粗 **2-3 个** 最核心的“颠覆性结论”或“关键数据”。
        *   严禁大面积加粗，严禁加粗整句话。如果段落中没有绝对亮点，则不加粗。
    *   **分割线 (---)**：
        *   在引言结束处、主要章节之间添加分割线，增加呼吸感。

3.  **严格约束**：
    *   **保留原意**：严禁改写句子、严禁编造内容。只做结构化处理。
    *   **纯净输出**：直接输出 Markdown 内容，不要包含“好的”、“以下是排版结果”等任何废话。
    *   **Emoji 点缀**：在二级标题 (##) 的文字开头适当添加 1 个符合语境的 Emoji，增加视觉锚点。

**待排版文本：**
{text}""",
    AIAction.POLISH: "请将以下文本重写，使其更加生动、流畅、专业，适合微信公众号读者的阅读习惯。修正错别字。保持 Markdown 格式（标题、列表等）不变。\n\n文本：\n{text}",
    AIAction.SUMMARIZE: "请为以下文本提供一个简短、吸引人的摘要，适合作为微信公众号的“摘要”字段。字数限制在120字以内。\n\n文本：\n{text}",
    AIAction.TITLE: "请为这篇文章生成 5 个吸引眼球、高点击率（但不要标题党）的标题。以无序列表形式返回。\n\n文本：\n{text}",
    AIAction.EMOJI: "请在以下文本的标题和关键段落中添加相关的 Emoji 表情，使其视觉上更具吸引力。不要过度使用。保持 Markdown 格式不变。\n\n文本：\n{text}",
}


class MissingAPIKeyError(RuntimeError):
    """Raised when no API key is configured for the AI provider."""


class AIProcessingError(RuntimeError):
    """Raised when a transform request fails for any reason."""


class LLMProvider(ABC):
    @abstractmethod
    def invoke(self, messages: List[Dict[str, str]], **kwargs: Any) -> str:
        """Send chat messages and return the reply text."""

    def invoke_simple(self, system_prompt: str, user_prompt: str, **kwargs: Any) -> str:
        return self.invoke(build_messages(system_prompt, user_prompt), **kwargs)


class OpenAIProvider(LLMProvider):
    """Chat completions on any OpenAI-compatible endpoint."""

    def __init__(self, api_key: str, model_name: str = DEFAULT_MODEL, base_url: Optional[str] = None):
        if not api_key:
            raise MissingAPIKeyError("API key is missing. Please check your configuration.")
        self.model_name = model_name
        self.base_url = base_url
        client_kwargs: Dict[str, Any] = {"api_key": api_key}
        if base_url:
            client_kwargs["base_url"] = base_url
        self.client = OpenAI(**client_kwargs)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "OpenAIProvider":
        env = os.environ if environ is None else environ
        api_key = env.get(API_KEY_ENV) or env.get(FALLBACK_API_KEY_ENV) or ""
        return cls(
            api_key=api_key,
            model_name=env.get(MODEL_ENV) or DEFAULT_MODEL,
            base_url=env.get(BASE_URL_ENV) or None,
        )

    def invoke(self, messages: List[Dict[str, str]], **kwargs: Any) -> str:
        response = self.client.chat.completions.create(
            model=self.model_name,
            messages=messages,
            **kwargs,
        )
        if response.choices and response.choices[0].message:
            content = response.choices[0].message.content
            return content.strip() if content else ""
        return ""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model_name}, base_url={self.base_url})"


def build_messages(system_prompt: str, user_prompt: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]


def build_prompt(text: str, action: AIAction | str) -> str:
    return PROMPTS[_coerce_action(action)].replace("{text}", text)


def process_text(text: str, action: AIAction | str, provider: LLMProvider) -> str:
    action = _coerce_action(action)
    prompt = build_prompt(text, action)
    logger.info("Running AI action %s (%d chars)", action.value, len(text))
    try:
        result = provider.invoke_simple(SYSTEM_INSTRUCTION, prompt)
    except Exception as exc:
        logger.error("AI action %s failed: %s", action.value, exc)
        raise AIProcessingError(FAILURE_MESSAGE) from exc
    return result or EMPTY_RESPONSE


def apply_action(content: str, action: AIAction | str, provider: LLMProvider) -> str:
    """Return the new draft after running ``action`` on ``content``."""
    action = _coerce_action(action)
    result = process_text(content, action, provider)
    label = APPENDED_LABELS.get(action)
    if label is None:
        return result
    return f"{content}\n\n---\n**AI 生成的{label}:**\n\n{result}"


def _coerce_action(action: AIAction | str) -> AIAction:
    try:
        return AIAction(action)
    except ValueError:
        choices = ", ".join(item.value for item in AIAction)
        raise ValueError(f"Unknown AI action {action!r}; expected one of: {choices}") from None

"""Prompts for the structured book recommender."""
from __future__ import annotations

BOOK_SYSTEM_PROMPT = (
    "你是一位专业的图书推荐助手，请始终使用中文回复。\n"
    "推荐书籍时请包含书名、作者和简短的推荐理由。\n"
)

BOOK_USER_PROMPT_TEMPLATE = "请推荐5本关于主题 {topic} 的热门书籍"


def build_book_user_prompt(*, topic: str) -> str:
    # Plain replacement: topics may contain braces.
    return BOOK_USER_PROMPT_TEMPLATE.replace("{topic}", topic)

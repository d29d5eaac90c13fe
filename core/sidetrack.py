# core/sidetrack.py
"""
Ask a chat-completion model which reply side-tracked a thread.

The model gets the thread as numbered lines and is told to answer with the number
of the offending reply only (0 when nobody went off-topic). The first integer in
its answer is matched back against `Post.position`.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Sequence

import openai

from core.models.post import Post

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"

# Positions are unsigned 32-bit; larger answers are treated as garbage.
MAX_POSITION = 2**32 - 1
_MAX_POSITION_DIGITS = len(str(MAX_POSITION))

SYSTEM_PROMPT = (
    "论坛中的歪楼是指在论坛中的回复中有人故意跑题，提出与楼主本意看似相关而又无关的问题。"
    "下面是一个讨论中的若干回复，请你指出最有可能导致歪楼的回复。"
    "只需要回答对应回复前的数字序号，不做解释，不输出其他文字。"
    "如果所有回复都没有跑题，输出数字0。"
)

_DIGITS_PATTERN = re.compile(r"[0-9]+")


def generate_prompt(posts: Iterable[Post]) -> str:
    """Render posts as a fenced block of `position：text` lines."""
    lines = ["```\n"]
    for post in posts:
        text = post.text.replace("\n", "\\n")
        lines.append(f"{post.position}：{text}\n")
    lines.append("```\n")
    return "".join(lines)


def find_first_integer(text: str) -> Optional[int]:
    """
    Return the first run of decimal digits in `text` as an int.

    None if there are no digits or the number does not fit an unsigned 32-bit int.
    """
    match = _DIGITS_PATTERN.search(text or "")
    if not match:
        return None
    digits = match.group().lstrip("0") or "0"
    # Length check first; int() rejects digit strings over the interpreter limit.
    if len(digits) > _MAX_POSITION_DIGITS:
        return None
    value = int(digits)
    if value > MAX_POSITION:
        return None
    return value


def resolve_position(posts: Sequence[Post], position: Optional[int]) -> Optional[Post]:
    if not position:
        return None
    for post in posts:
        if post.position == position:
            return post
    return None


class SideTrackLocator:
    """
    Locates the side-tracking reply using the OpenAI chat-completions API.

    Attributes:
        client (openai.OpenAI): API client. Reads OPENAI_API_KEY / OPENAI_BASE_URL
            from the environment when built without arguments.
        model (str): Chat model name.
    """

    def __init__(self, client: Optional[openai.OpenAI] = None, model: str = DEFAULT_MODEL):
        self.client = client if client is not None else openai.OpenAI()
        self.model = model

    def _ask(self, prompt: str) -> Optional[str]:
        logger.debug("Using model %s", self.model)
        completion = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        )
        if not completion.choices:
            return None
        return completion.choices[0].message.content

    def locate(self, posts: Sequence[Post]) -> Optional[Post]:
        """Return the side-tracking post, or None when there is none (or no usable answer)."""
        if not posts:
            return None

        try:
            answer = self._ask(generate_prompt(posts))
        except openai.OpenAIError as e:
            logger.error("Completion request failed: %s", e)
            return None

        answer = (answer or "").strip()
        logger.debug("Completion answer: %r", answer)

        post = resolve_position(posts, find_first_integer(answer))
        if post is None:
            logger.info("No side-tracker found (answer=%r).", answer)
        else:
            logger.info("Side-tracker is #%d by @%s: %s", post.position, post.handle, post.uri)
        return post

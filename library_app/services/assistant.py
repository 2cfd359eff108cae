"""Librarian chat assistant backed by an OpenAI chat completion model.

``ask`` always returns text: a missing API key or a failing backend turns
into a fixed message instead of an exception.
"""

import logging
from typing import Optional

from openai import OpenAI

from library_app.core.config import ASSISTANT_MODEL, OPENAI_API_KEY

logger = logging.getLogger("library.assistant")

SYSTEM_PROMPT = (
    "You are a professional librarian assistant at a theological college library. "
    "Answer questions about theology book recommendations, summaries of biblical topics, "
    "or library administration politely, academically and helpfully."
)

NOT_CONFIGURED = "The assistant API key is not configured. Please contact the administrator."
CANNOT_PROCESS = "Sorry, I cannot process this request right now."
BACKEND_ERROR = "An error occurred while contacting the AI librarian."


class LibrarianAssistant:

    def __init__(self, api_key: Optional[str] = None, model: str = ASSISTANT_MODEL,
                 system_prompt: str = SYSTEM_PROMPT, client=None):
        self.api_key = OPENAI_API_KEY if api_key is None else api_key
        self.model = model
        self.system_prompt = system_prompt
        self._client = client

    @property
    def client(self):
        if self._client is None and self.api_key:
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def ask(self, query: str) -> str:
        if self.client is None:
            return NOT_CONFIGURED
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": query},
                ],
            )
        except Exception as e:
            logger.error(f"Assistant backend error: {e}")
            return BACKEND_ERROR
        choices = getattr(response, "choices", None) or []
        text = choices[0].message.content if choices else None
        return text or CANNOT_PROCESS

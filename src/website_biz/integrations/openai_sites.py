"""OpenAI-backed generator for the ``ai-premium`` site style."""

import logging
import re

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4.1"
DEFAULT_TIMEOUT_SECONDS = 120
FALLBACK_HTML = "<!doctype html><html><body><h1>{{business_name}}</h1></body></html>"

SYSTEM_PROMPT = (
    "Return only a complete HTML document for a premium local business site. "
    "Include image placeholders {{HERO_IMAGE}} {{SERVICE_IMAGE_1}} "
    "{{SERVICE_IMAGE_2}} {{SERVICE_IMAGE_3}} {{GALLERY_IMAGE_1}} "
    "{{GALLERY_IMAGE_2}} {{ABOUT_IMAGE}} {{TESTIMONIAL_BG}} and business "
    "placeholders {{business_name}} {{city}} {{phone}} {{email}} {{address}} "
    "{{rating}} {{reviews}} {{industry}} {{instagram}} {{facebook}} "
    "{{tiktok}} {{linkedin}}."
)

_CODE_FENCE = re.compile(r"^```(?:html)?\s*|\s*```$", re.IGNORECASE)


class AiSiteGenerator:
    """Ask a chat model for a full HTML document for one business.

    Example:
        >>> generator = AiSiteGenerator(api_key="sk-...")
        >>> html = await generator.generate("Business: Acme Plumbing\\n...")
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the generator.

        Args:
            api_key: OpenAI API key.
            model: Chat model name.
            timeout_seconds: Bound on the completion request.

        Raises:
            ValueError: If no API key is provided.
        """
        if not api_key:
            raise ValueError("OpenAI API key required. Set OPENAI_API_KEY.")
        self.model = model
        self._client = AsyncOpenAI(api_key=api_key, timeout=timeout_seconds, max_retries=1)

    async def generate(self, prompt: str) -> str:
        """Return the generated HTML document with placeholders left in."""
        response = await self._client.chat.completions.create(
            model=self.model,
            temperature=0.8,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        )
        content = (response.choices[0].message.content or "").strip()
        content = _CODE_FENCE.sub("", content).strip()
        if not content:
            logger.warning("Model %s returned an empty document", self.model)
            return FALLBACK_HTML
        return content

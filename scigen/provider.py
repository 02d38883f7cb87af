"""Question generation through an OpenAI-compatible chat completions API."""

from __future__ import annotations

import asyncio
import http.client
import json
import time
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, List, Optional

from .config import ProviderConfig
from .data.schemas import MAX_DIFFICULTY, MIN_DIFFICULTY, Question, Topic
from .errors import FetchError, MalformedResponseError, MissingCredentialError, TransportError
from .utils.logging_config import MetricsLogger, get_api_logger
from .validation import build_question, extract_content, parse_problem_payload

logger = get_api_logger()

USER_PROMPT = "Generate exactly one science question in JSON format."


def build_system_prompt(topic: Topic, difficulty: int) -> str:
    return (
        "CRITICAL: Return ONLY valid JSON. No other text.\n\n"
        f"Generate one multiple-choice science question about {topic.display_name}.\n"
        f"Difficulty level: {difficulty}/10.\n\n"
        "Required JSON format:\n"
        "{\n"
        '  "question": "Your science question here?",\n'
        '  "options": ["Option A text", "Option B text", "Option C text", "Option D text"],\n'
        '  "correctAnswer": 0,\n'
        '  "explanation": "Detailed explanation here..."\n'
        "}\n\n"
        "Rules:\n"
        "1. correctAnswer must be 0, 1, 2, or 3\n"
        "2. Provide 4 distinct options\n"
        "3. Explanation should teach the concept\n"
        f"4. Make it challenging but fair for difficulty {difficulty}"
    )


def build_messages(topic: Topic, difficulty: int) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": build_system_prompt(topic, difficulty)},
        {"role": "user", "content": USER_PROMPT},
    ]


def _tokens_used(envelope: Any) -> Optional[int]:
    try:
        return int(envelope["usage"]["total_tokens"])
    except (KeyError, TypeError, ValueError):
        return None


class ProblemProvider:
    """Fetches one validated ``Question`` per call from the remote model.

    No retries are performed: a failed attempt raises a ``FetchError``
    subclass straight to the caller.
    """

    def __init__(
        self,
        api_key: str,
        config: ProviderConfig | None = None,
        metrics: MetricsLogger | None = None,
    ):
        self.config = config or ProviderConfig()
        if not api_key or not api_key.strip():
            raise MissingCredentialError(self.config.api_key_env)
        self._api_key = api_key.strip()
        self.metrics = metrics or MetricsLogger()

    @property
    def provider_name(self) -> str:
        return urllib.parse.urlparse(self.config.api_url).netloc or self.config.api_url

    def build_request_body(self, topic: Topic, difficulty: int) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": build_messages(topic, difficulty),
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
            "response_format": {"type": "json_object"},
        }

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    def _post(self, body: Dict[str, Any]) -> Any:
        """Blocking POST; returns the decoded response envelope."""
        data = json.dumps(body).encode("utf-8")
        req = urllib.request.Request(
            self.config.api_url, data=data, headers=self._headers(), method="POST"
        )
        try:
            with urllib.request.urlopen(req, timeout=self.config.timeout) as resp:
                status = resp.status
                raw = resp.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as e:
            try:
                err_body = e.read().decode("utf-8", errors="replace")
            except (OSError, http.client.HTTPException):
                err_body = ""
            raise TransportError(f"HTTP {e.code}", status_code=e.code, body=err_body) from e
        except urllib.error.URLError as e:
            raise TransportError(f"Connection failed: {e.reason}") from e
        except OSError as e:
            raise TransportError(f"Connection failed: {e}") from e
        except http.client.HTTPException as e:
            raise TransportError(f"Connection failed: {type(e).__name__}: {e}") from e

        if not 200 <= status < 300:
            raise TransportError(f"HTTP {status}", status_code=status, body=raw)
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"response body is not valid JSON: {e}") from e

    async def fetch(self, topic: Topic, difficulty: int) -> Question:
        """Request, parse and validate one question.

        Args:
            topic: Topic to ask about; the returned question is tagged with it
            difficulty: Requested difficulty (1-10)

        Returns:
            A validated, whitespace-trimmed ``Question``

        Raises:
            TransportError: Network failure or non-2xx HTTP status
            MalformedResponseError: Unexpected envelope or content shape
            ValidationError: Wrong option count or out-of-range answer index
        """
        if not MIN_DIFFICULTY <= difficulty <= MAX_DIFFICULTY:
            raise ValueError(f"difficulty must be in [{MIN_DIFFICULTY}, {MAX_DIFFICULTY}], got {difficulty}")

        body = self.build_request_body(topic, difficulty)
        logger.debug("Requesting %s question at difficulty %d", topic.display_name, difficulty)
        start_time = time.time()
        envelope: Any = None
        try:
            envelope = await asyncio.to_thread(self._post, body)
            content = extract_content(envelope)
            question = build_question(parse_problem_payload(content), topic, difficulty)
        except FetchError as e:
            self.metrics.log_api_call(
                provider=self.provider_name,
                model=self.config.model,
                duration_ms=(time.time() - start_time) * 1000,
                tokens_used=_tokens_used(envelope),
                success=False,
                error=f"{type(e).__name__}: {e}",
            )
            raise

        self.metrics.log_api_call(
            provider=self.provider_name,
            model=self.config.model,
            duration_ms=(time.time() - start_time) * 1000,
            tokens_used=_tokens_used(envelope),
        )
        return question

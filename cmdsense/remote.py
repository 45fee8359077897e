# cmdsense/remote.py
"""
Gemini-backed remote ranking for online history search.

``GeminiRanker`` is a callable matching the ``remote_rank_fn`` contract of
``Mode``: it receives the query, a window of recent commands, the context
and a timeout, and returns result mappings for the search to validate.
"""
import json
import re
from typing import Any, Dict, List, Optional, Sequence

import google.generativeai as genai
from google.generativeai.types import GenerationConfig
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cmdsense.constants import GEMINI_MAX_TOKENS, GEMINI_MODEL, GEMINI_TEMPERATURE
from cmdsense.models import Context
from cmdsense.utils.logging import get_logger

logger = get_logger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a specialized search assistant that finds relevant commands "
    "in command history based on natural language queries."
)


class RemoteRankingError(RuntimeError):
    """The remote ranker could not produce a usable result list."""


class RankedCommand(BaseModel):
    """One entry of the remote ranker's answer."""
    model_config = ConfigDict(populate_by_name=True)

    command: str
    score: Optional[float] = None
    match_type: Optional[str] = Field(None, alias="matchType")
    reason: Optional[str] = None


class RankingPayload(BaseModel):
    results: List[RankedCommand] = Field(default_factory=list)


def build_prompt(query: str, commands: Sequence[str], ctx: Context) -> str:
    """Prompt asking the model to rank history entries for a query."""
    history_block = "\n".join(commands)
    return f"""{SYSTEM_INSTRUCTION}

Search through this command history for: "{query}"

Commands:
{history_block}

Current directory: {ctx.current_directory}

Return matches as a JSON array of objects with:
- command: the matching command, copied exactly from the history
- score: relevance score between 0.0-1.0
- matchType: why this matched (e.g. "exact", "semantic", "pattern")
- reason: brief explanation of why this matches the query

Return ONLY valid JSON in the following format:
{{"results": [{{"command": "...", "score": 0.9, "matchType": "semantic", "reason": "..."}}]}}
"""


def _extract_json(response_text: str) -> str:
    # Check for JSON in markdown code block with language specifier
    if "```json" in response_text and "```" in response_text.split("```json")[1]:
        return response_text.split("```json")[1].split("```")[0].strip()
    # Check for JSON in regular markdown code block
    if "```" in response_text and "```" in response_text.split("```", 1)[1]:
        return response_text.split("```")[1].strip()
    return response_text.strip()


def parse_ranking_response(response_text: str) -> List[Dict[str, Any]]:
    """
    Parse the model's answer into result mappings.

    Args:
        response_text: Raw model output, optionally wrapped in a code fence

    Returns:
        One mapping per ranked command, keys as ``SearchResult`` expects

    Raises:
        RemoteRankingError: If no valid payload can be extracted
    """
    json_str = _extract_json(response_text)
    try:
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError:
            # Models sometimes wrap the object in prose; take the outermost braces
            object_match = re.search(r"\{[\s\S]*\}", json_str)
            if not object_match:
                raise
            data = json.loads(object_match.group(0))

        if isinstance(data, list):
            data = {"results": data}
        payload = RankingPayload.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.debug(f"Raw ranking response: {response_text}")
        raise RemoteRankingError(f"Could not parse ranking response: {e}") from e

    logger.debug(f"Parsed {len(payload.results)} ranked commands")
    return [item.model_dump(exclude_none=True) for item in payload.results]


class GeminiRanker:
    """Remote ranking function backed by the Gemini API."""

    def __init__(self, api_key: Optional[str] = None, model: str = GEMINI_MODEL):
        if not api_key:
            logger.error("Gemini API key is not configured.")
            raise ValueError("Gemini API key is not configured. Set GEMINI_API_KEY to enable online search.")

        genai.configure(api_key=api_key)
        self.model_name = model
        self.model = genai.GenerativeModel(model)
        logger.debug(f"Gemini ranker initialized with model: {model}")

    def __call__(
        self,
        query: str,
        commands: Sequence[str],
        ctx: Context,
        timeout: float,
    ) -> List[Dict[str, Any]]:
        prompt = build_prompt(query, commands, ctx)
        logger.debug(f"GEMINI RANKING REQUEST PROMPT ({len(prompt)} chars), timeout {timeout}s")

        try:
            response = self.model.generate_content(
                prompt,
                generation_config=GenerationConfig(
                    temperature=GEMINI_TEMPERATURE,
                    max_output_tokens=GEMINI_MAX_TOKENS,
                ),
                request_options={"timeout": timeout},
            )
        except Exception as e:
            raise RemoteRankingError(f"Gemini request failed: {type(e).__name__} - {e}") from e

        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and getattr(feedback, "block_reason", None):
            raise RemoteRankingError(f"Prompt blocked by API safety filters: {feedback.block_reason}")

        text = self._response_text(response)
        if not text:
            raise RemoteRankingError("Empty response from Gemini API")

        return parse_ranking_response(text)

    @staticmethod
    def _response_text(response: Any) -> str:
        try:
            text = response.text
        except ValueError:
            # Raised by the SDK when the candidate has no text part
            text = ""
        if text:
            return text
        parts = getattr(response, "parts", None) or []
        return "".join(part.text for part in parts if hasattr(part, "text"))

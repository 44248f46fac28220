import json
import logging
import re

import google.generativeai as genai
from google.api_core.exceptions import GoogleAPIError
from groq import Groq, APIError, AuthenticationError

from .config import (
    GOOGLE_API_KEY,
    GROQ_API_KEY,
    LLM_PROVIDER,
    GEMINI_MODEL,
    GROQ_MODEL,
    AI_UNAVAILABLE_MESSAGE,
    GUT_CHECK_UNAVAILABLE_MESSAGE
)
from ..models.conversation import GatewayReply, GutCheckResult
from ..utils.data_processing import format_currency, safe_float

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("gemini", "groq")
GUT_CHECK_MODE = "gut_check"

GUT_CHECK_SCHEMA = {
    "convictionScore": "number between 0 and 100",
    "suggestedAdjustment": "signed dollar amount to add to the valuation",
    "reasoning": "two or three sentences"
}


class LLMService:
    """Gateway to the external generative-AI model.

    Never raises on transport or model failures: ``ask`` degrades to a fixed
    apology and ``gut_check`` to a zero adjustment.
    """

    def __init__(self, api_key=None, provider=LLM_PROVIDER, model=None, client=None):
        if provider not in SUPPORTED_PROVIDERS:
            raise ValueError(f"Unsupported LLM provider: {provider}")
        self.provider = provider
        self.api_key = api_key or (GOOGLE_API_KEY if provider == "gemini" else GROQ_API_KEY)
        self.model = model or self.get_default_model()
        self.client = client if client is not None else self._initialize_client()

    def _initialize_client(self):
        if not self.api_key:
            logger.warning("No API key configured for %s; AI answers are disabled.", self.provider)
            return None
        try:
            if self.provider == "gemini":
                genai.configure(api_key=self.api_key)
                return genai.GenerativeModel(self.model, tools="google_search_retrieval")
            return Groq(api_key=self.api_key)
        except AuthenticationError:
            logger.error("Groq API authentication failed. Check your API key.")
        except Exception:
            logger.exception("Failed to initialize %s client", self.provider)
        return None

    def get_default_model(self):
        if self.provider == "gemini":
            return GEMINI_MODEL
        return GROQ_MODEL

    @property
    def available(self):
        return self.client is not None

    @staticmethod
    def build_request(message, context, mode=None):
        """Outbound request body: message, valuation context and optional mode."""
        request = {"message": message, "context": context}
        if mode:
            request["mode"] = mode
        return request

    def build_system_prompt(self, message, context):
        vc_inputs = context.get("vcInputs") or {}
        scorecard_inputs = context.get("scorecardInputs") or {}
        team_strength = "Strong" if safe_float(scorecard_inputs.get("teamScore")) > 1 else "Average/Weak"

        return f"""
You are an expert Valuation Analyst Copilot.
You are helping a user evaluate a startup.

CURRENT VALUATION CONTEXT:
- Sector: {context.get("sector")}
- Region: {context.get("region")}
- Revenue: {format_currency(safe_float(vc_inputs.get("exitRevenue")))} (Projected Exit)
- Investment Ask: {format_currency(safe_float(vc_inputs.get("investmentAmount")))}
- Team Strength: {team_strength}

YOUR GOAL:
- Answer the user's question using the Context above.
- Use search to find REAL market data (multiples, trends, similar exits) to support your answer.
- Be concise, professional, and data-driven.
- If the user asks for a recommendation, provide a specific valuation range based on the data.

USER QUESTION:
{message}
"""

    def _generate(self, prompt, temperature=0.5):
        """Send ``prompt`` to the provider; returns (text, grounding metadata)."""
        if self.provider == "gemini":
            response = self.client.generate_content(
                prompt,
                generation_config={"temperature": temperature},
            )
            return response.text, _grounding_to_dict(response)

        completion = self.client.chat.completions.create(
            messages=[{"role": "user", "content": prompt}],
            model=self.model,
            temperature=temperature,
        )
        return completion.choices[0].message.content, None

    def handle(self, request):
        """Serve a request body built by ``build_request``.

        ``mode="gut_check"`` yields a ``GutCheckResult``, any other mode a ``GatewayReply``.
        """
        if request.get("mode") == GUT_CHECK_MODE:
            return self._score_narrative(request["message"], request["context"])
        return self._answer(request["message"], request["context"])

    def ask(self, message, context):
        """Answer a free-form market question. Always returns a ``GatewayReply``."""
        return self.handle(self.build_request(message, context))

    def gut_check(self, narrative, context):
        """Turn a founder's qualitative narrative into a conviction score and dollar adjustment."""
        return self.handle(self.build_request(narrative, context, mode=GUT_CHECK_MODE))

    def _answer(self, message, context):
        if not self.available:
            return GatewayReply(text=AI_UNAVAILABLE_MESSAGE)

        prompt = self.build_system_prompt(message, context)
        try:
            text, grounding = self._generate(prompt)
        except (GoogleAPIError, APIError) as e:
            logger.error("%s API error: %s", self.provider, e)
            return GatewayReply(text=AI_UNAVAILABLE_MESSAGE)
        except Exception:
            logger.exception("Unexpected error calling %s", self.provider)
            return GatewayReply(text=AI_UNAVAILABLE_MESSAGE)

        if not text:
            logger.warning("Empty response from %s", self.provider)
            return GatewayReply(text=AI_UNAVAILABLE_MESSAGE)
        return GatewayReply(text=text, grounding_metadata=grounding)

    def _score_narrative(self, narrative, context):
        fallback = GutCheckResult(
            conviction_score=0.0,
            suggested_adjustment=0.0,
            reasoning=GUT_CHECK_UNAVAILABLE_MESSAGE
        )
        if not self.available:
            return fallback

        prompt = f"""
You are a venture investor performing a "gut check" on a startup valuation.
Sector: {context.get("sector")}
Region: {context.get("region")}

Founder narrative:
{narrative}

Weigh the signals (customer traction, key hires, competitive threats, deal momentum)
and return ONLY a JSON object matching this schema:
{json.dumps(GUT_CHECK_SCHEMA, indent=2)}
"""
        try:
            text, _ = self._generate(prompt, temperature=0.2)
        except (GoogleAPIError, APIError) as e:
            logger.error("%s API error during gut check: %s", self.provider, e)
            return fallback
        except Exception:
            logger.exception("Unexpected error during gut check")
            return fallback

        data = extract_structured_data(text or "")
        if data is None:
            logger.warning("Gut check response was not valid JSON")
            return fallback
        try:
            return GutCheckResult.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Gut check response missing fields: %s", e)
            return fallback


def extract_structured_data(llm_response):
    """First JSON object in the response, from a ```json fence or bare braces."""
    json_pattern = r'```(?:json)?\s*([\s\S]*?)\s*```'
    candidates = re.findall(json_pattern, llm_response)
    brace_match = re.search(r'\{[\s\S]*\}', llm_response)
    if brace_match:
        candidates.append(brace_match.group(0))

    for json_str in candidates:
        try:
            data = json.loads(json_str)
            if isinstance(data, dict):
                return data
        except json.JSONDecodeError:
            continue
    return None


def _grounding_to_dict(response):
    """Flatten Gemini grounding metadata into {"groundingChunks": [{"web": {...}}]}."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) if metadata is not None else None
    if not chunks:
        return None

    grounding_chunks = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        uri = getattr(web, "uri", None) if web is not None else None
        if uri:
            grounding_chunks.append({"web": {"uri": uri, "title": getattr(web, "title", "") or ""}})
    return {"groundingChunks": grounding_chunks} if grounding_chunks else None

# homescore/ai_features.py
"""LLM ratings of subjective listing qualities.

Asks an OpenAI chat model to rate ten features of a listing on a 1-10 scale.
A scrape never fails because of this step: without an API key, or on any
client or parsing error, no features are returned and the listing is stored
without them, so the scorer treats every feature as unknown.
"""
import json
import os
import re
from typing import Optional

from dotenv import load_dotenv
from openai import OpenAI, OpenAIError

from .domain import AIFeatures
from .utils import logger

load_dotenv()

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

FEATURE_PROMPTS = {
    "kitchen_quality": "Kitchen Quality - modern appliances, countertops, cabinets, layout",
    "bathroom_quality": "Bathroom Quality - fixtures, tile, vanities, condition",
    "overall_condition": "Overall Condition - maintenance, wear, needed repairs",
    "natural_light": "Natural Light - windows, sun exposure, brightness",
    "layout_flow": "Layout Flow - room arrangement, open concept, functionality",
    "curb_appeal": "Curb Appeal - exterior appearance, landscaping, first impression",
    "privacy_level": "Privacy Level - distance from neighbors, lot position, fencing",
    "yard_usability": "Yard Usability - flat areas, outdoor living space, garden potential",
    "storage_space": "Storage Space - closets, garage, basement, attic",
    "modern_updates": "Modern Updates - recent renovations, smart home, energy efficiency",
}

_client: Optional[OpenAI] = None


def _get_client() -> Optional[OpenAI]:
    global _client
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        return None
    if _client is None:
        _client = OpenAI(api_key=api_key)
    return _client


def _build_messages(description: str, page_text: str):
    criteria = "\n".join(f"{i}. {text}" for i, text in enumerate(FEATURE_PROMPTS.values(), start=1))
    example = {name: 6 for name in FEATURE_PROMPTS}
    example["summary"] = "Brief 1-2 sentence summary of the property's best and worst features."
    user_prompt = (
        "Analyze this real estate listing and rate each feature from 1-10. Be objective and honest.\n\n"
        f"LISTING CONTENT:\n{page_text[:8000]}\n\n"
        f"DESCRIPTION:\n{description or ''}\n\n"
        f"Rate these features from 1-10 (1=poor, 5=average, 10=excellent):\n{criteria}\n\n"
        f"Respond ONLY with valid JSON in this exact format:\n{json.dumps(example, indent=2)}"
    )
    return [{"role": "user", "content": user_prompt}]


def _clamp_rating(value) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 5.0
    if v != v:  # NaN
        return 5.0
    return max(1.0, min(10.0, v))


def parse_ai_features(content: str) -> Optional[AIFeatures]:
    """Pull the first JSON object out of a model reply; None when there is none."""
    m = re.search(r"\{[\s\S]*\}", content or "")
    if not m:
        return None
    try:
        parsed = json.loads(m.group(0))
    except json.JSONDecodeError:
        return None
    if not isinstance(parsed, dict):
        return None
    ratings = {name: _clamp_rating(parsed.get(name)) for name in FEATURE_PROMPTS}
    return AIFeatures(summary=str(parsed.get("summary") or "Analysis complete."), **ratings)


def extract_ai_features(description: str, page_text: str) -> Optional[AIFeatures]:
    client = _get_client()
    if client is None:
        logger.info("No OPENAI_API_KEY configured, skipping AI features")
        return None
    try:
        response = client.chat.completions.create(
            model=OPENAI_MODEL,
            messages=_build_messages(description, page_text),
            temperature=0.3,
        )
    except OpenAIError as e:
        logger.warning("AI feature extraction failed: %s", e)
        return None
    content = response.choices[0].message.content if response.choices else ""
    features = parse_ai_features(content)
    if features is None:
        logger.warning("AI feature reply had no JSON object")
        return None
    return features

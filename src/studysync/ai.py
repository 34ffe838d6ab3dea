"""Gemini content generation: resource templates and knowledge-point tips.

Both calls return None instead of raising, whether the API key is missing,
the request fails, or the model answers with something unusable.
"""
import json
import logging

from google import genai
from google.genai import types

from studysync.config import get_api_key, get_model
from studysync.models import UNIT_KINDS

logger = logging.getLogger(__name__)

STRUCTURE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "name": types.Schema(type=types.Type.STRING, description="Name of the app or book"),
        "description": types.Schema(type=types.Type.STRING, description="Brief description"),
        "modules": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "name": types.Schema(type=types.Type.STRING, description="Module name"),
                    "unit_kind": types.Schema(type=types.Type.STRING, enum=list(UNIT_KINDS)),
                    "total_items": types.Schema(
                        type=types.Type.INTEGER, description="Total count of items to complete",
                    ),
                },
                required=["name", "unit_kind", "total_items"],
            ),
        ),
    },
    required=["name", "modules"],
)


def _client():
    api_key = get_api_key()
    if not api_key:
        logger.warning("No Gemini API key configured (GOOGLE_API_KEY / API_KEY)")
        return None
    return genai.Client(api_key=api_key)


def generate_study_structure(topic: str) -> dict | None:
    """Ask Gemini to break a topic into a resource with countable modules.

    Returns {"name", "description", "modules": [{"name", "unit_kind",
    "total_items"}]} or None.
    """
    client = _client()
    if client is None:
        return None

    prompt = f"""Create a structured study plan for: "{topic}".
Imagine this is a mobile app or a textbook. Break it down into a main resource
name (the app or book name) and specific modules (chapters or topics).
Estimate the number of items (questions, sections, articles or pages) for each
module strictly.

Return valid JSON matching the schema."""

    try:
        response = client.models.generate_content(
            model=get_model(),
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=STRUCTURE_SCHEMA,
            ),
        )
        if not response.text:
            return None
        data = json.loads(response.text)
        modules = [
            {
                "name": str(m["name"]),
                "unit_kind": m.get("unit_kind") if m.get("unit_kind") in UNIT_KINDS else "Questions",
                "total_items": max(int(m.get("total_items") or 0), 0),
            }
            for m in data["modules"]
        ]
        return {
            "name": str(data["name"]),
            "description": data.get("description") or "",
            "modules": modules,
        }
    except Exception as e:
        logger.error("Failed to generate study structure for %r: %s", topic, e)
        return None


def generate_knowledge_tip(resource_name: str, module_name: str, knowledge_point: str) -> str | None:
    """Three-part advice (core concept / common pitfall / mnemonic) or None."""
    client = _client()
    if client is None:
        return None

    prompt = f"""User is studying "{resource_name}" - "{module_name}".
They are struggling with the specific concept: "{knowledge_point}".

Please provide a "first aid kit" for this knowledge point.

Structure the response strictly as:
1. [Core concept]: One sentence definition.
2. [Common pitfall]: One common mistake or trick used in exams.
3. [Mnemonic]: A short, catchy mnemonic or rhyme to help remember it.

Keep it very concise and encouraging."""

    try:
        response = client.models.generate_content(model=get_model(), contents=prompt)
        return response.text or None
    except Exception as e:
        logger.error("Failed to generate tip for %r: %s", knowledge_point, e)
        return None

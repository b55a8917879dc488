"""Waste classifier — one image in, exactly one of four labels out.

Three interchangeable backends, picked by CLASSIFIER_BACKEND:

- ``stub``: waits CLASSIFIER_STUB_DELAY_SECONDS and returns a random label.
  Placeholder until an inference service is deployed.
- ``http``: posts the image to CLASSIFIER_URL and maps the model's raw class
  onto a label.
- ``openai``: asks an OpenAI vision model to pick a label.
"""
import asyncio
import base64
import enum
import logging
import random
from typing import Any, Optional

import httpx
from openai import AsyncOpenAI, OpenAIError

from davaoclean.config import settings

logger = logging.getLogger(__name__)


class WasteCategory(str, enum.Enum):
    biodegradable = "Biodegradable"
    recyclable = "Recyclable"
    residual = "Residual"
    special_waste = "Special Waste"


class ClassificationError(Exception):
    """The classifier could not be reached or gave no usable label."""


DISPOSAL_GUIDE: dict[WasteCategory, dict[str, Any]] = {
    WasteCategory.biodegradable: {
        "instructions": "Place in your green bin. Includes food scraps, garden waste, and paper.",
        "collection_schedule": "Collected Monday & Thursday in most barangays.",
        "examples": ["Food scraps", "Leaves", "Paper", "Garden waste"],
    },
    WasteCategory.recyclable: {
        "instructions": "Place in your blue bin. Clean and dry before disposal. "
                        "Includes plastics, glass, metal, and cardboard.",
        "collection_schedule": "Collected Wednesday & Saturday.",
        "examples": ["Plastic bottles", "Cans", "Cardboard", "Glass"],
    },
    WasteCategory.residual: {
        "instructions": "Place in your black bin. Non-recyclable, non-hazardous waste.",
        "collection_schedule": "Collected Tuesday & Friday in most areas.",
        "examples": ["Styrofoam", "Dirty packaging", "Mixed waste"],
    },
    WasteCategory.special_waste: {
        "instructions": "Do NOT place in regular bins. Bring to designated DENR drop-off points. "
                        "Includes batteries, e-waste, chemicals, and medical waste.",
        "collection_schedule": "Drop-off points only; no curbside collection.",
        "examples": ["Batteries", "E-waste", "Chemicals", "Syringes"],
    },
}

# Raw model classes -> label
RAW_CLASS_MAP: dict[str, WasteCategory] = {
    "biological": WasteCategory.biodegradable,
    "organic": WasteCategory.biodegradable,
    "food": WasteCategory.biodegradable,
    "paper": WasteCategory.biodegradable,
    "cardboard": WasteCategory.recyclable,
    "plastic": WasteCategory.recyclable,
    "glass": WasteCategory.recyclable,
    "metal": WasteCategory.recyclable,
    "trash": WasteCategory.residual,
    "shoes": WasteCategory.residual,
    "clothes": WasteCategory.residual,
    "hazardous": WasteCategory.special_waste,
    "battery": WasteCategory.special_waste,
    "e-waste": WasteCategory.special_waste,
    "medical": WasteCategory.special_waste,
}


def parse_label(raw: Optional[str]) -> WasteCategory:
    """Accept a label ("Special Waste", "special_waste") or a raw model class."""
    if not raw:
        raise ClassificationError("Missing prediction from classifier")
    text = raw.strip().strip(".").strip()
    normalized = text.lower().replace("_", " ")
    for category in WasteCategory:
        if normalized == category.value.lower():
            return category
    if normalized in RAW_CLASS_MAP:
        return RAW_CLASS_MAP[normalized]
    raise ClassificationError(f"Unrecognised classifier label: {raw}")


def category_guide(category: WasteCategory) -> dict[str, Any]:
    return {"category": category.value, **DISPOSAL_GUIDE[category]}


class StubClassifier:
    """Random label after a fixed delay."""

    def __init__(self, delay_seconds: float = 2.0, rng: Optional[random.Random] = None):
        self.delay_seconds = delay_seconds
        self.rng = rng or random.Random()

    async def classify(self, image: bytes, filename: str, content_type: str) -> WasteCategory:
        await asyncio.sleep(self.delay_seconds)
        return self.rng.choice(list(WasteCategory))


class RemoteClassifier:
    """Client for an HTTP inference service taking a multipart ``file``."""

    def __init__(self, url: str, timeout: float = 60.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def classify(self, image: bytes, filename: str, content_type: str) -> WasteCategory:
        files = {"file": (filename, image, content_type)}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.url, files=files)
        except httpx.HTTPError as e:
            raise ClassificationError(f"Classifier service unreachable: {e}") from e

        if response.status_code != 200:
            raise ClassificationError(f"Classifier service failed: {response.text}")
        try:
            body = response.json()
        except ValueError as e:
            raise ClassificationError("Classifier service returned invalid JSON") from e

        # {"category": "..."} or {"prediction": "...", "confidence": ...}
        raw = (body.get("category") or body.get("prediction")) if isinstance(body, dict) else None
        if not isinstance(raw, str):
            raise ClassificationError("Classifier service returned an unusable reply")
        return parse_label(raw)


CLASSIFY_PROMPT = (
    "Classify the waste item in this photo. Answer with exactly one of: "
    + ", ".join(c.value for c in WasteCategory)
    + ". No other words."
)


class OpenAIClassifier:
    """Asks a vision-capable chat model to pick one label."""

    def __init__(self, api_key: str, model: str, client: Optional[AsyncOpenAI] = None):
        self.model = model
        self.client = client or AsyncOpenAI(api_key=api_key)

    async def classify(self, image: bytes, filename: str, content_type: str) -> WasteCategory:
        data_url = f"data:{content_type};base64,{base64.b64encode(image).decode('ascii')}"
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": CLASSIFY_PROMPT},
                            {"type": "image_url", "image_url": {"url": data_url}},
                        ],
                    }
                ],
                max_tokens=10,
            )
        except OpenAIError as e:
            logger.error("LLM API error: %s", e)
            raise ClassificationError(f"Classifier service failed: {e}") from e

        return parse_label(response.choices[0].message.content)


def get_classifier():
    """FastAPI dependency returning the configured classifier backend."""
    backend = settings.CLASSIFIER_BACKEND.lower()
    if backend == "http":
        return RemoteClassifier(settings.CLASSIFIER_URL, timeout=settings.CLASSIFIER_TIMEOUT_SECONDS)
    if backend == "openai":
        return OpenAIClassifier(settings.OPENAI_API_KEY, settings.OPENAI_MODEL)
    if backend != "stub":
        logger.warning("Unknown CLASSIFIER_BACKEND '%s', using stub", settings.CLASSIFIER_BACKEND)
    return StubClassifier(settings.CLASSIFIER_STUB_DELAY_SECONDS)

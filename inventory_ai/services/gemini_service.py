import http.client
import json
import logging
from typing import Iterable, Optional
from urllib import error, request
from urllib.parse import quote, urlparse

from pydantic import TypeAdapter

from inventory_ai.config import Settings, get_settings
from inventory_ai.core.errors import ParseFailure
from inventory_ai.schemas.product import InventoryDelta, Product
from inventory_ai.schemas.sale import SaleIntent

logger = logging.getLogger(__name__)

_ALLOWED_HTTP_SCHEMES = {"http", "https"}

INVENTORY_FAILURE_MESSAGE = (
    "Could not understand the inventory prompt. Please try phrasing it differently."
)
SALE_FAILURE_MESSAGE = (
    "Could not understand the sale prompt. Please ensure product names match the inventory."
)

INVENTORY_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "name": {
                "type": "STRING",
                "description": "The name of the product.",
            },
            "cost": {
                "type": "NUMBER",
                "description": "The cost price of a single unit of the product.",
            },
            "price": {
                "type": "NUMBER",
                "description": "The selling price of a single unit of the product.",
            },
            "stock": {
                "type": "INTEGER",
                "description": "The number of units to add to the stock.",
            },
            "promotion": {
                "type": "NUMBER",
                "description": (
                    "The promotional discount as a decimal (e.g., 0.1 for 10% off). "
                    "Default to 0 if not mentioned."
                ),
            },
        },
        "required": ["name", "cost", "price", "stock"],
    },
}

SALE_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "productName": {
                "type": "STRING",
                "description": (
                    "The name of the product sold. This must exactly match one of the "
                    "product names provided in the inventory list."
                ),
            },
            "quantity": {
                "type": "INTEGER",
                "description": "The number of units sold.",
            },
        },
        "required": ["productName", "quantity"],
    },
}

_INVENTORY_ADAPTER = TypeAdapter(list[InventoryDelta])
_SALE_ADAPTER = TypeAdapter(list[SaleIntent])


def inventory_instruction(prompt):
    return (
        "Parse the following inventory update and provide a JSON output. "
        "If a promotion is mentioned as a percentage, convert it to a decimal "
        "(e.g., 10% becomes 0.1). If no promotion is mentioned, it should be 0. "
        'Prompt: "{}"'.format(prompt)
    )


def sale_instruction(prompt, product_names):
    return (
        "Parse the following sales update. Identify the product name and quantity "
        "sold for each item. The product name must be one of the following: [{}]. "
        'Prompt: "{}"'.format(", ".join(product_names), prompt)
    )


def build_request_body(instruction, schema):
    return {
        "contents": [{"role": "user", "parts": [{"text": instruction}]}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": schema,
        },
    }


def validate_api_url(api_url):
    parsed = urlparse(api_url)
    scheme = parsed.scheme.lower()
    if scheme not in _ALLOWED_HTTP_SCHEMES or not parsed.netloc:
        raise RuntimeError("GEMINI_API_URL must be an absolute HTTP(S) URL")
    return api_url


def build_endpoint(api_url, model):
    return "{}/models/{}:generateContent".format(
        validate_api_url(api_url).rstrip("/"),
        quote(model, safe=".-_"),
    )


def extract_response_text(envelope):
    """Join the text parts of the first candidate in a generateContent reply."""
    if not isinstance(envelope, dict):
        raise ValueError("response envelope is not an object")
    candidates = envelope.get("candidates") or []
    if not candidates:
        feedback = envelope.get("promptFeedback") or {}
        raise ValueError(
            "response has no candidates (block reason: {})".format(
                feedback.get("blockReason", "unknown")
            )
        )
    candidate = candidates[0]
    if not isinstance(candidate, dict):
        raise ValueError("response candidate is not an object")
    content = candidate.get("content") or {}
    if not isinstance(content, dict):
        raise ValueError("response content is not an object")
    parts = content.get("parts") or []
    if not isinstance(parts, list):
        raise ValueError("response parts is not an array")
    texts = []
    for part in parts:
        if not isinstance(part, dict):
            continue
        value = part.get("text", "")
        if not isinstance(value, str):
            raise ValueError("response part text is not a string")
        texts.append(value)
    text = "".join(texts)
    if not text.strip():
        raise ValueError("response candidate has no text")
    return text.strip()


def decode_inventory(text):
    payload = json.loads(text)
    if not isinstance(payload, list):
        raise ValueError("Invalid response format from AI. Expected an array of products.")
    return _INVENTORY_ADAPTER.validate_python(payload)


def decode_sales(text):
    payload = json.loads(text)
    if not isinstance(payload, list) or not payload:
        raise ValueError("Invalid response format from AI. Expected an array of sales.")
    return _SALE_ADAPTER.validate_python(payload)


def _raise_http_error(exc):
    body = ""
    try:
        body_bytes = exc.read()
        if body_bytes:
            body = body_bytes.decode("utf-8", errors="replace").strip()
    except (OSError, ValueError):
        body = ""

    if body:
        raise RuntimeError("Gemini API error: HTTP {} {}".format(exc.code, body)) from exc
    raise RuntimeError("Gemini API error: HTTP {}".format(exc.code)) from exc


class GeminiPromptParser:
    """Turns free-form prompts into inventory deltas or sale intents via Gemini."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @property
    def configured(self) -> bool:
        return bool((self.settings.GEMINI_API_KEY or "").strip())

    def generate(self, instruction: str, schema: dict) -> str:
        api_key = (self.settings.GEMINI_API_KEY or "").strip()
        if not api_key:
            raise RuntimeError("GEMINI_API_KEY is not configured")

        endpoint = build_endpoint(self.settings.GEMINI_API_URL, self.settings.GEMINI_MODEL)
        payload = json.dumps(build_request_body(instruction, schema)).encode("utf-8")
        req = request.Request(
            endpoint,
            data=payload,
            method="POST",
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": api_key,
            },
        )

        urlopen_kwargs = {}
        if self.settings.GEMINI_TIMEOUT_SECONDS is not None:
            urlopen_kwargs["timeout"] = self.settings.GEMINI_TIMEOUT_SECONDS

        try:
            with request.urlopen(req, **urlopen_kwargs) as response:  # nosec B310
                status_code = response.getcode()
                if status_code < 200 or status_code >= 300:
                    raise RuntimeError("Gemini API error: HTTP {}".format(status_code))
                raw = response.read()
        except error.HTTPError as exc:
            _raise_http_error(exc)
        except error.URLError as exc:
            raise RuntimeError("Gemini API error: {}".format(exc.reason)) from exc
        except (OSError, http.client.HTTPException) as exc:
            # Timeouts and dropped connections while reading are not wrapped by urllib.
            raise RuntimeError("Gemini API error: {}".format(str(exc) or type(exc).__name__)) from exc

        envelope = json.loads(raw.decode("utf-8"))
        return extract_response_text(envelope)

    def parse_inventory_prompt(self, prompt: str) -> list[InventoryDelta]:
        try:
            text = self.generate(inventory_instruction(prompt), INVENTORY_SCHEMA)
            deltas = decode_inventory(text)
        except (RuntimeError, ValueError) as exc:
            logger.warning("Gemini inventory parse failed: %s", exc)
            raise ParseFailure(INVENTORY_FAILURE_MESSAGE) from exc
        logger.info("Parsed %d inventory item(s) from prompt", len(deltas))
        return deltas

    def parse_sale_prompt(self, prompt: str, products: Iterable[Product]) -> list[SaleIntent]:
        names = [product.name for product in products]
        try:
            text = self.generate(sale_instruction(prompt, names), SALE_SCHEMA)
            intents = decode_sales(text)
        except (RuntimeError, ValueError) as exc:
            logger.warning("Gemini sale parse failed: %s", exc)
            raise ParseFailure(SALE_FAILURE_MESSAGE) from exc
        logger.info("Parsed %d sale line(s) from prompt", len(intents))
        return intents


__all__ = [
    "GeminiPromptParser",
    "INVENTORY_SCHEMA",
    "SALE_SCHEMA",
    "build_endpoint",
    "build_request_body",
    "decode_inventory",
    "decode_sales",
    "extract_response_text",
    "validate_api_url",
]

import http.client
import io
import json
import unittest
from unittest.mock import MagicMock, patch
from urllib import error

from inventory_ai.config import Settings
from inventory_ai.core.errors import ParseFailure
from inventory_ai.services import gemini_service
from inventory_ai.services.gemini_service import (
    INVENTORY_SCHEMA,
    SALE_SCHEMA,
    GeminiPromptParser,
    build_endpoint,
    build_request_body,
    decode_inventory,
    decode_sales,
    extract_response_text,
)
from inventory_ai.services.seed import demo_state


def _envelope(payload):
    return {
        "candidates": [
            {"content": {"role": "model", "parts": [{"text": json.dumps(payload)}]}}
        ]
    }


def _fake_urlopen(envelope, status=200):
    response = MagicMock()
    response.getcode.return_value = status
    response.read.return_value = json.dumps(envelope).encode("utf-8")
    context = MagicMock()
    context.__enter__.return_value = response
    context.__exit__.return_value = False
    return MagicMock(return_value=context)


def _settings(**overrides):
    values = {
        "GEMINI_API_KEY": "test-key",
        "GEMINI_API_URL": "https://generativelanguage.googleapis.com/v1beta",
        "GEMINI_MODEL": "gemini-2.5-flash",
    }
    values.update(overrides)
    return Settings(**values)


class GeminiPayloadTest(unittest.TestCase):
    def test_request_body_carries_schema_and_json_mime(self):
        body = build_request_body("Parse this", INVENTORY_SCHEMA)
        self.assertEqual(body["contents"][0]["parts"][0]["text"], "Parse this")
        self.assertEqual(body["generationConfig"]["responseMimeType"], "application/json")
        self.assertEqual(body["generationConfig"]["responseSchema"]["items"]["required"],
                         ["name", "cost", "price", "stock"])

    def test_sale_schema_requires_product_and_quantity(self):
        self.assertEqual(SALE_SCHEMA["items"]["required"], ["productName", "quantity"])

    def test_build_endpoint(self):
        self.assertEqual(
            build_endpoint("https://generativelanguage.googleapis.com/v1beta/", "gemini-2.5-flash"),
            "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:generateContent",
        )

    def test_build_endpoint_rejects_non_http_scheme(self):
        with self.assertRaises(RuntimeError):
            build_endpoint("file:///tmp/gemini", "gemini-2.5-flash")

    def test_extract_response_text_joins_parts(self):
        envelope = {"candidates": [{"content": {"parts": [{"text": "[{\"a\""}, {"text": ": 1}]"}]}}]}
        self.assertEqual(extract_response_text(envelope), '[{"a": 1}]')

    def test_extract_response_text_without_candidates(self):
        with self.assertRaises(ValueError):
            extract_response_text({"promptFeedback": {"blockReason": "SAFETY"}})


class GeminiDecodeTest(unittest.TestCase):
    def test_inventory_promotion_defaults_to_zero(self):
        deltas = decode_inventory(json.dumps([
            {"name": "Red Hoodie", "cost": 15, "price": 35, "stock": 100},
            {"name": "Blue Cap", "cost": 5, "price": 15, "stock": 50, "promotion": 0.1},
            {"name": "Green Scarf", "cost": 4, "price": 12, "stock": 10, "promotion": None},
        ]))
        self.assertEqual([delta.promotion for delta in deltas], [0.0, 0.1, 0.0])
        self.assertEqual(deltas[0].stock, 100)

    def test_inventory_requires_array(self):
        with self.assertRaises(ValueError):
            decode_inventory(json.dumps({"name": "Red Hoodie"}))

    def test_inventory_missing_field(self):
        with self.assertRaises(ValueError):
            decode_inventory(json.dumps([{"name": "Red Hoodie", "cost": 15, "price": 35}]))

    def test_sales_reject_empty_array(self):
        with self.assertRaises(ValueError):
            decode_sales("[]")

    def test_sales_reject_zero_quantity(self):
        with self.assertRaises(ValueError):
            decode_sales(json.dumps([{"productName": "Denim Jeans", "quantity": 0}]))

    def test_sales_keep_every_line(self):
        intents = decode_sales(json.dumps([
            {"productName": "Denim Jeans", "quantity": 2},
            {"productName": "Leather Belt", "quantity": 1},
        ]))
        self.assertEqual([(i.product_name, i.quantity) for i in intents],
                         [("Denim Jeans", 2), ("Leather Belt", 1)])


class GeminiPromptParserTest(unittest.TestCase):
    def test_parse_inventory_prompt_posts_to_generate_content(self):
        urlopen = _fake_urlopen(_envelope([
            {"name": "Red Hoodie", "cost": 15, "price": 35, "stock": 100, "promotion": 0},
        ]))
        parser = GeminiPromptParser(_settings())

        with patch.object(gemini_service.request, "urlopen", urlopen):
            deltas = parser.parse_inventory_prompt("Add 100 Red Hoodies, cost $15, price $35")

        self.assertEqual(len(deltas), 1)
        self.assertEqual(deltas[0].name, "Red Hoodie")
        req = urlopen.call_args.args[0]
        self.assertTrue(req.full_url.endswith("/models/gemini-2.5-flash:generateContent"))
        self.assertEqual(req.get_header("X-goog-api-key"), "test-key")
        body = json.loads(req.data.decode("utf-8"))
        self.assertIn("Add 100 Red Hoodies", body["contents"][0]["parts"][0]["text"])
        self.assertNotIn("timeout", urlopen.call_args.kwargs)

    def test_timeout_is_passed_when_configured(self):
        urlopen = _fake_urlopen(_envelope([{"name": "Cap", "cost": 1, "price": 2, "stock": 3}]))
        parser = GeminiPromptParser(_settings(GEMINI_TIMEOUT_SECONDS=12.5))

        with patch.object(gemini_service.request, "urlopen", urlopen):
            parser.parse_inventory_prompt("Add 3 caps")

        self.assertEqual(urlopen.call_args.kwargs["timeout"], 12.5)

    def test_parse_sale_prompt_lists_product_names(self):
        urlopen = _fake_urlopen(_envelope([{"productName": "Denim Jeans", "quantity": 2}]))
        parser = GeminiPromptParser(_settings())

        with patch.object(gemini_service.request, "urlopen", urlopen):
            intents = parser.parse_sale_prompt("Sold 2 jeans", demo_state().products)

        self.assertEqual(intents[0].product_name, "Denim Jeans")
        body = json.loads(urlopen.call_args.args[0].data.decode("utf-8"))
        text = body["contents"][0]["parts"][0]["text"]
        self.assertIn("[Classic T-Shirt, Denim Jeans, Leather Belt]", text)
        self.assertEqual(body["generationConfig"]["responseSchema"], SALE_SCHEMA)

    def test_non_array_reply_becomes_parse_failure(self):
        urlopen = _fake_urlopen(_envelope({"name": "Red Hoodie"}))
        parser = GeminiPromptParser(_settings())

        with patch.object(gemini_service.request, "urlopen", urlopen):
            with self.assertRaises(ParseFailure) as ctx:
                parser.parse_inventory_prompt("Add hoodies")
        self.assertIn("Could not understand the inventory prompt", ctx.exception.message)

    def test_http_error_becomes_parse_failure(self):
        http_error = error.HTTPError(
            "https://example.test", 500, "boom", {}, io.BytesIO(b'{"error": "internal"}')
        )
        parser = GeminiPromptParser(_settings())

        with patch.object(gemini_service.request, "urlopen", MagicMock(side_effect=http_error)):
            with self.assertRaises(ParseFailure) as ctx:
                parser.parse_sale_prompt("Sold 2 jeans", demo_state().products)
        self.assertIn("Could not understand the sale prompt", ctx.exception.message)
        self.assertIn("HTTP 500", str(ctx.exception.__cause__))

    def test_read_timeout_becomes_parse_failure(self):
        parser = GeminiPromptParser(_settings(GEMINI_TIMEOUT_SECONDS=1))

        with patch.object(gemini_service.request, "urlopen", MagicMock(side_effect=TimeoutError("timed out"))):
            with self.assertRaises(ParseFailure) as ctx:
                parser.parse_inventory_prompt("Add 3 caps")
        self.assertIn("timed out", str(ctx.exception.__cause__))

    def test_dropped_connection_becomes_parse_failure(self):
        parser = GeminiPromptParser(_settings())
        dropped = http.client.RemoteDisconnected("Remote end closed connection without response")

        with patch.object(gemini_service.request, "urlopen", MagicMock(side_effect=dropped)):
            with self.assertRaises(ParseFailure):
                parser.parse_sale_prompt("Sold 2 jeans", demo_state().products)

    def test_incomplete_body_becomes_parse_failure(self):
        urlopen = _fake_urlopen({})
        response = urlopen.return_value.__enter__.return_value
        response.read.side_effect = http.client.IncompleteRead(b"{\"cand")
        parser = GeminiPromptParser(_settings())

        with patch.object(gemini_service.request, "urlopen", urlopen):
            with self.assertRaises(ParseFailure):
                parser.parse_inventory_prompt("Add 3 caps")

    def test_malformed_envelope_becomes_parse_failure(self):
        parser = GeminiPromptParser(_settings())
        for envelope in (
            {"candidates": [{"content": "not an object"}]},
            {"candidates": [{"content": {"parts": [{"text": 42}]}}]},
            {"candidates": [{"content": {"parts": "text"}}]},
        ):
            with self.subTest(envelope=envelope):
                with patch.object(gemini_service.request, "urlopen", _fake_urlopen(envelope)):
                    with self.assertRaises(ParseFailure):
                        parser.parse_inventory_prompt("Add 3 caps")

    def test_missing_key_fails_without_network(self):
        urlopen = MagicMock()
        parser = GeminiPromptParser(_settings(GEMINI_API_KEY=None))

        self.assertFalse(parser.configured)
        with patch.object(gemini_service.request, "urlopen", urlopen):
            with self.assertRaises(ParseFailure):
                parser.parse_inventory_prompt("Add hoodies")
        urlopen.assert_not_called()


if __name__ == "__main__":
    unittest.main()

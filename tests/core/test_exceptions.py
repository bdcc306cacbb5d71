"""Tests for meilisearch_mcp.core.exceptions."""

from __future__ import annotations

from meilisearch_mcp.core.exceptions import (
    ConfigException,
    MeiliMCPException,
    MeilisearchAPIError,
    MeilisearchConnectionError,
    RouteError,
    SummarizationError,
    TransportClosedError,
    TransportError,
    ValidationException,
)


class TestHierarchy:
    def test_all_derive_from_base(self):
        for cls in (
            ConfigException,
            ValidationException,
            MeilisearchAPIError,
            MeilisearchConnectionError,
            RouteError,
            SummarizationError,
            TransportError,
            TransportClosedError,
        ):
            assert issubclass(cls, MeiliMCPException)

    def test_closed_is_transport_error(self):
        assert issubclass(TransportClosedError, TransportError)


class TestDetails:
    def test_base_to_dict(self):
        exc = MeiliMCPException("broken", {"k": "v"})

        assert exc.to_dict() == {"error": "MeiliMCPException", "message": "broken", "details": {"k": "v"}}
        assert str(exc) == "broken"

    def test_config_missing_vars(self):
        exc = ConfigException("need key", missing_vars=["AI_PROVIDER_API_KEY"])

        assert exc.missing_vars == ["AI_PROVIDER_API_KEY"]
        assert exc.details == {"missing_vars": ["AI_PROVIDER_API_KEY"]}

    def test_validation_field_and_value(self):
        exc = ValidationException("bad limit", field="limit", value=-1)

        assert exc.details == {"field": "limit", "value": "-1"}

    def test_api_error(self):
        exc = MeilisearchAPIError(401, {"message": "The provided API key is invalid."})

        assert exc.status_code == 401
        assert exc.body == {"message": "The provided API key is invalid."}
        assert exc.message.startswith("Meilisearch API error (401): ")

    def test_route_error_truncates_raw_output(self):
        exc = RouteError("MALFORMED_MODEL_OUTPUT", "bad", raw_output="x" * 2000)

        assert len(exc.details["raw_output"]) == 500
        assert exc.raw_output == "x" * 2000

    def test_summarization_chunk_index(self):
        assert SummarizationError("failed", chunk_index=2).details == {"chunk_index": 2}

    def test_transport_session_id(self):
        exc = TransportClosedError("closed", session_id="abc")

        assert exc.session_id == "abc"
        assert exc.details == {"session_id": "abc"}

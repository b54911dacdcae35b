"""
Unit tests for gateway configuration loading.
"""

import pytest

from places_gateway.api.gateway_config import CorsConfig, GatewayConfig, load_gateway_config


class TestLoadGatewayConfig:
    """Test reading config/gateway.yml."""

    def test_project_config(self):
        config = load_gateway_config()

        assert config.cors.headers() == {
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Headers": "Authorization,X-Api-Key",
            "Access-Control-Max-Age": "600",
        }
        assert config.status_for("RESOURCE_NOT_FOUND") == 404
        assert config.status_for("MISSING_AUTHENTICATION_TOKEN") == 403
        assert config.status_for("QUOTA_EXCEEDED") == 429

    def test_env_var_override(self, tmp_path, monkeypatch):
        config_file = tmp_path / "gateway.yml"
        config_file.write_text(
            "cors:\n"
            "  allow_origin: https://app.example.com\n"
            "gateway_responses:\n"
            "  RESOURCE_NOT_FOUND: 404\n"
        )
        monkeypatch.setenv("PLACES_GATEWAY_GATEWAY_CONFIG", str(config_file))

        config = load_gateway_config()

        assert config.cors.allow_origin == "https://app.example.com"
        assert config.cors.max_age == 600
        assert config.gateway_responses == {"RESOURCE_NOT_FOUND": 404}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_gateway_config(str(tmp_path / "missing.yml"))

    @pytest.mark.parametrize(
        "content,message",
        [
            ("- a\n- b\n", "must be a mapping"),
            ("cors: open\n", "`cors` section"),
            ("cors:\n  max_age: soon\n", "max_age"),
            ("gateway_responses: [404]\n", "`gateway_responses` section"),
            ("gateway_responses:\n  THROTTLED: 200\n", "4xx/5xx"),
            ("gateway_responses:\n  THROTTLED: true\n", "4xx/5xx"),
            ("cors: {\n", "Invalid YAML"),
        ],
    )
    def test_invalid_config(self, tmp_path, content, message):
        config_file = tmp_path / "gateway.yml"
        config_file.write_text(content)

        with pytest.raises(ValueError, match=message):
            load_gateway_config(str(config_file))


class TestGatewayConfig:
    """Test status lookup defaults."""

    def test_unknown_type_uses_default_4xx(self):
        config = GatewayConfig(gateway_responses={"DEFAULT_4XX": 418})

        assert config.status_for("SOMETHING_NEW") == 418

    def test_empty_config_falls_back_to_400(self):
        assert GatewayConfig().status_for("RESOURCE_NOT_FOUND") == 400

    def test_cors_defaults(self):
        assert CorsConfig().headers()["Access-Control-Max-Age"] == "600"


# Mark all tests in this file as unit tests
pytestmark = pytest.mark.unit

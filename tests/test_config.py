from __future__ import annotations

from pathlib import Path

from docqa.config import Settings, get_settings


def test_defaults_match_local_ollama():
    settings = Settings()
    assert settings.ollama_base_url == "http://localhost:11434"
    assert settings.ollama_generate_path == "/api/generate"
    assert settings.generator_temperature == 0.0
    assert settings.generator_top_p == 0.95
    assert settings.generator_max_attempts == 1
    assert settings.api_port == 8001


def test_default_category_table():
    settings = Settings()
    assert settings.default_category == "invoices"
    assert settings.category_dirs["contracts"] == "employment-contracts"
    assert settings.category_dirs["support"] == "customer-support"
    assert settings.category_dirs["knowledge-base"] == "knowledge-base"


def test_override_returns_fresh_instance():
    settings = get_settings({"data_dir": Path("/srv/docs"), "selection_fallback_limit": 1})
    assert settings.data_dir == Path("/srv/docs")
    assert settings.selection_fallback_limit == 1
    assert get_settings() is get_settings()


def test_broadening_tokens_accept_comma_separated_string():
    settings = Settings(selection_broadening_tokens="Invoice, receipt ,")
    assert settings.broadening_tokens_tuple == ("invoice", "receipt")


def test_environment_variables_are_read(monkeypatch):
    monkeypatch.setenv("DOCQA_GENERATOR_MODEL", "qwen2.5")
    monkeypatch.setenv("DOCQA_PROMPT_TEMPLATE", "invoice_calculator")
    settings = Settings()
    assert settings.generator_model == "qwen2.5"
    assert settings.prompt_template == "invoice_calculator"


def test_category_keys_are_lowercased():
    settings = Settings(category_dirs={" HR ": "people"}, category_templates={"Invoices": "invoice_calculator"})
    assert settings.category_dirs == {"hr": "people"}
    assert settings.category_templates == {"invoices": "invoice_calculator"}


def test_prompt_templates_default_per_category():
    settings = Settings()
    assert settings.category_templates == {"invoices": "invoice_qa"}
    assert settings.prompt_template == "general_qa"

import pytest

from professor_rag.core.config import RAGConfig, Settings
from professor_rag.core.exceptions import ConfigurationError


def test_defaults_match_hosted_services():
    config = RAGConfig.from_settings(Settings(_env_file=None))

    assert config.index_name == "rag"
    assert config.namespace == "ns1"
    assert config.embedding_model == "text-embedding-3-small"
    assert config.encoding_format == "float"
    assert config.completion_model == "gpt-4"
    assert config.top_k == 3
    assert config.include_metadata is True


def test_invalid_top_k_is_rejected():
    with pytest.raises(ConfigurationError):
        RAGConfig(
            index_name="rag",
            namespace="ns1",
            embedding_model="m",
            encoding_format="float",
            completion_model="c",
            top_k=0,
        ).validate()


def test_empty_index_name_is_rejected():
    settings = Settings(_env_file=None, PINECONE_INDEX_NAME="")

    with pytest.raises(ConfigurationError):
        RAGConfig.from_settings(settings)


def test_api_keys_are_read_from_environment(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("PINECONE_API_KEY", "pc-env")

    settings = Settings(_env_file=None)

    assert settings.OPENAI_API_KEY == "sk-env"
    assert settings.PINECONE_API_KEY == "pc-env"


def test_allowed_origins_split_on_commas():
    settings = Settings(_env_file=None, ALLOWED_ORIGINS="http://a.test, http://b.test")

    assert settings.allowed_origins == ["http://a.test", "http://b.test"]


def test_base64_encoding_is_rejected():
    settings = Settings(_env_file=None, EMBEDDING_ENCODING_FORMAT="base64")

    with pytest.raises(ConfigurationError):
        RAGConfig.from_settings(settings)

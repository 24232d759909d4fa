"""Tests for the domain error family."""

from clause_clarity.domain.errors import (
    ConfigurationError,
    DomainError,
    EmbeddingProviderError,
    MissingCredentialsError,
    ModelProviderError,
    ParseError,
    ProviderError,
    ValidationError,
)


def test_all_errors_are_domain_errors():
    for cls in (
        ConfigurationError,
        ValidationError,
        ParseError,
        ProviderError,
        ModelProviderError,
        EmbeddingProviderError,
        MissingCredentialsError,
    ):
        assert issubclass(cls, DomainError)


def test_provider_error_carries_status():
    err = ModelProviderError("Quota exceeded", status=429)

    assert err.status == 429
    assert err.is_quota
    assert str(err) == "[429] Quota exceeded"
    assert isinstance(err, ProviderError)


def test_provider_error_without_status():
    err = EmbeddingProviderError("connection reset")

    assert err.status is None
    assert not err.is_quota
    assert str(err) == "connection reset"


def test_missing_credentials_is_provider_error_with_401():
    err = MissingCredentialsError()

    assert isinstance(err, ProviderError)
    assert err.status == 401
    assert "API key" in str(err)


def test_parse_error_keeps_detail():
    err = ParseError("no array")
    assert err.detail == "no array"

import pytest


@pytest.mark.smoke
def test_settings_load_smoke():
    from sentinelle.core.config import get_settings

    settings = get_settings()

    # Debe poder importarse y tener los campos básicos.
    assert settings is not None
    assert hasattr(settings, "page_format")
    assert hasattr(settings, "legal_explainer_backend")


@pytest.mark.smoke
def test_page_format_normalizado():
    from sentinelle.core.config import Settings

    assert Settings(page_format=" a4 ", _env_file=None).page_format == "A4"


@pytest.mark.smoke
def test_url_del_servicio_invalida():
    from pydantic import ValidationError

    from sentinelle.core.config import Settings

    with pytest.raises(ValidationError):
        Settings(legal_explainer_url="ftp://legal", _env_file=None)

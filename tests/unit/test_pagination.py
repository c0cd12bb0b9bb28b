from placement_portal.core.config import get_settings
from placement_portal.utils.pagination import clamp_page


def test_defaults() -> None:
    params = clamp_page(None, None)
    assert params.page == 1
    assert params.page_size == get_settings().default_page_size


def test_page_size_is_clamped() -> None:
    settings = get_settings()
    assert clamp_page(1, 10_000).page_size == settings.max_page_size
    assert clamp_page(1, 0).page_size == 1


def test_page_starts_at_one() -> None:
    assert clamp_page(0, 5).page == 1
    assert clamp_page(-3, 5).page == 1

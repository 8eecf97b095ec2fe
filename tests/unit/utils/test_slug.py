import pytest

from crm_service.app.utils.slug import generate_unique_slug, slugify


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Acme", "acme"),
        ("  Acme Corp  ", "acme-corp"),
        ("Acme & Sons, Ltd.", "acme-sons-ltd"),
        ("--Hello__World--", "hello-world"),
        ("!!!", "organization"),
    ],
)
def test_slugify(name, expected):
    assert slugify(name) == expected


@pytest.mark.asyncio
async def test_unique_slug_uses_base_when_free():
    async def slug_exists(slug):
        return False

    assert await generate_unique_slug("Acme Corp", slug_exists) == "acme-corp"


@pytest.mark.asyncio
async def test_unique_slug_appends_suffix_on_collision():
    """Test a taken slug gets a 4-char [a-z0-9] suffix"""
    taken = {"acme"}

    async def slug_exists(slug):
        return slug in taken

    slug = await generate_unique_slug("Acme", slug_exists)

    assert slug.startswith("acme-")
    suffix = slug.split("-", 1)[1]
    assert len(suffix) == 4
    assert suffix.isalnum() and suffix == suffix.lower()


@pytest.mark.asyncio
async def test_unique_slug_exhaustion_returns_none():
    """Test every candidate taken gives up after the configured attempts"""
    calls = []

    async def slug_exists(slug):
        calls.append(slug)
        return True

    assert await generate_unique_slug("Acme", slug_exists, max_attempts=5) is None
    assert len(calls) == 6  # base + 5 suffixed candidates

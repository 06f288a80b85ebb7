import pytest
from app.utils.idempotency import get_idempotent, set_idempotent


@pytest.mark.idempotency
class TestIdempotencyStore:

    @pytest.mark.asyncio
    async def test_idemp_flow(self):
        key = "pytest-idemp"
        assert await get_idempotent(key) is None
        await set_idempotent(key, {"ok": True})
        assert await get_idempotent(key) == {"ok": True}

    @pytest.mark.asyncio
    async def test_missing_key_is_ignored(self):
        await set_idempotent(None, {"ok": True})
        await set_idempotent("", {"ok": True})
        assert await get_idempotent(None) is None
        assert await get_idempotent("") is None

    @pytest.mark.asyncio
    async def test_keys_do_not_collide(self):
        await set_idempotent("first", {"n": 1})
        await set_idempotent("second", {"n": 2})
        assert await get_idempotent("first") == {"n": 1}
        assert await get_idempotent("second") == {"n": 2}

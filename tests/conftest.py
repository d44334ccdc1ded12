import pytest
from httpx import ASGITransport, AsyncClient

from idle_arena.dependencies import get_combat_service
from idle_arena.main import app
from idle_arena.services.combat_log_storage import CombatLogStorage
from idle_arena.services.combat_service import CombatService


@pytest.fixture
def combat_service() -> CombatService:
    return CombatService(log_storage=CombatLogStorage())


@pytest.fixture
async def client(combat_service: CombatService) -> AsyncClient:
    """HTTP client wired to a fresh CombatService for each test."""
    app.dependency_overrides[get_combat_service] = lambda: combat_service
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

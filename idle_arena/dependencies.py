from functools import lru_cache

from idle_arena.services.combat_service import CombatService


@lru_cache
def get_combat_service() -> CombatService:
    """Process-wide CombatService; tests override this dependency."""
    return CombatService()

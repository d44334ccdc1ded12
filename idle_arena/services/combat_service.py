"""Combat service: PvE simulations against enemy templates, plus log access.

A fresh CombatEngine is created per fight so concurrent requests never share
an engine's log buffer. Fights are seeded when the caller supplies a seed
(arena replays, tests) and draw from OS entropy otherwise.

Health policy: the player enters every simulated fight at full health and
leaves it at full health again; the engine itself never writes health back.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
from dataclasses import dataclass

from idle_arena.data.enemy_templates import EnemyTemplate, default_enemy_templates
from idle_arena.services.combat_engine import (
    Combatant,
    CombatEngine,
    CombatLogEntry,
    CombatResult,
    CombatRewards,
    CombatStats,
    Weapon,
)
from idle_arena.services.combat_log_storage import CombatLogStorage, StoredCombatSession

logger = logging.getLogger(__name__)

PLAYER_COMBATANT_NAME = "Player"


@dataclass
class CombatSimulation:
    """Outcome of CombatService.simulate_combat."""
    result: CombatResult[CombatRewards]
    session_id: str
    updated_player_stats: CombatStats


def restore_health(stats: CombatStats) -> CombatStats:
    """Copy of stats with health set to max_health."""
    return dataclasses.replace(stats, health=stats.max_health)


class CombatService:
    def __init__(
        self,
        log_storage: CombatLogStorage | None = None,
        max_turns: int | None = None,
    ) -> None:
        self.log_storage = log_storage or CombatLogStorage()
        self.max_turns = max_turns
        self._enemy_templates: dict[str, EnemyTemplate] = default_enemy_templates()

    # -----------------------------------------------------------------------
    # Enemy templates
    # -----------------------------------------------------------------------

    def list_enemy_templates(self) -> list[EnemyTemplate]:
        return list(self._enemy_templates.values())

    def get_enemy_template(self, template_id: str) -> EnemyTemplate | None:
        return self._enemy_templates.get(template_id)

    def set_enemy_template(self, template: EnemyTemplate) -> None:
        """Add a template or replace the one with the same id."""
        self._enemy_templates[template.id] = template

    # -----------------------------------------------------------------------
    # Simulation
    # -----------------------------------------------------------------------

    def simulate_combat(
        self,
        player_id: str,
        player_stats: CombatStats,
        player_weapon: Weapon | None,
        enemy_template_id: str,
        seed: int | None = None,
    ) -> CombatSimulation:
        """Fight the player against a template enemy and store the logs.

        Raises KeyError for an unknown template and CombatValidationError for
        malformed player stats.
        """
        template = self._enemy_templates.get(enemy_template_id)
        if template is None:
            logger.warning("Combat requested against unknown enemy template '%s'", enemy_template_id)
            raise KeyError(f"Enemy template '{enemy_template_id}' not found")

        player = Combatant(
            id=player_id,
            name=PLAYER_COMBATANT_NAME,
            stats=restore_health(player_stats),
            weapon=player_weapon,
            is_player=True,
        )
        enemy = Combatant(
            id=template.id,
            name=template.name,
            stats=restore_health(template.stats),
            weapon=template.weapon,
            is_player=False,
        )

        engine = CombatEngine(seed, max_turns=self.max_turns)
        result = engine.resolve_combat(player, enemy, copy.deepcopy(template.rewards))
        session_id = self.log_storage.store_combat_logs(player_id, result.logs)

        logger.info(
            "Player %s fought %s: winner=%s turns=%d session=%s",
            player_id,
            template.id,
            result.winner,
            result.turns,
            session_id,
        )
        return CombatSimulation(
            result=result,
            session_id=session_id,
            updated_player_stats=restore_health(player_stats),
        )

    # -----------------------------------------------------------------------
    # Log access
    # -----------------------------------------------------------------------

    def get_player_combat_logs(self, player_id: str, limit: int = 10) -> list[StoredCombatSession]:
        return self.log_storage.get_player_logs(player_id, limit)

    def get_combat_logs(self, player_id: str, session_id: str) -> list[CombatLogEntry] | None:
        return self.log_storage.get_combat_logs(player_id, session_id)

    def get_storage_stats(self) -> dict[str, int]:
        return self.log_storage.get_storage_stats()

    def cleanup_old_logs(self, max_age_days: float | None = None) -> None:
        """Drop stored sessions older than max_age_days (default from settings)."""
        self.log_storage.cleanup_old_logs(max_age_days)

"""Static definitions for the built-in PvE enemy templates.

Templates:
  goblin  - weak and quick; good first fight
  orc     - slow, armoured bruiser
  dragon  - end-game boss; drops crafting materials

Each template carries full-health stats, an optional weapon and the rewards
granted for defeating it. CombatService copies these into its own registry,
so callers may add or replace templates at runtime without touching this
module.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass

from idle_arena.services.combat_engine import CombatRewards, CombatStats, Weapon


@dataclass
class EnemyTemplate:
    """Definition of a single enemy type."""
    id: str
    name: str
    stats: CombatStats
    rewards: CombatRewards
    weapon: Weapon | None = None


ENEMY_TEMPLATES: dict[str, EnemyTemplate] = {
    "goblin": EnemyTemplate(
        id="goblin",
        name="Goblin",
        stats=CombatStats(health=50, max_health=50, attack=8, defense=5, speed=12),
        weapon=Weapon(id="rusty_dagger", name="Rusty Dagger", base_damage=5, multiplier=1.0),
        rewards=CombatRewards(experience=25, gold=10),
    ),
    "orc": EnemyTemplate(
        id="orc",
        name="Orc Warrior",
        stats=CombatStats(health=100, max_health=100, attack=15, defense=10, speed=8),
        weapon=Weapon(id="iron_axe", name="Iron Axe", base_damage=12, multiplier=1.2),
        rewards=CombatRewards(experience=75, gold=30),
    ),
    "dragon": EnemyTemplate(
        id="dragon",
        name="Ancient Dragon",
        stats=CombatStats(health=300, max_health=300, attack=35, defense=20, speed=15),
        weapon=Weapon(id="dragon_breath", name="Dragon Breath", base_damage=25, multiplier=1.5),
        rewards=CombatRewards(
            experience=500,
            gold=200,
            items=["dragon_scale", "fire_essence"],
        ),
    ),
}


def default_enemy_templates() -> dict[str, EnemyTemplate]:
    """Independent copies of the built-in templates, keyed by id."""
    return copy.deepcopy(ENEMY_TEMPLATES)

"""Combat engine: deterministic one-on-one turn-based combat resolution.

Combat sequence per turn:
  1. The faster combatant attacks the slower one (speed ties go to the first
     combatant passed to resolve_combat).
  2. If the defender drops to 0 health the fight ends immediately; the second
     action of the turn is skipped.
  3. Otherwise the slower combatant retaliates.
  4. Repeat until one side is at 0 health or the turn cap is reached.

Damage formula:
  armed:   roll = base_damage + attack * multiplier
           reduction = max(0.1, 1 - defense * 0.009)
  unarmed: roll = attack
           reduction = max(0.1, 1 - defense * 0.01)
  damage = max(1, floor(roll * variance * reduction)),  variance in [0.875, 1.125)

The minimum of 1 damage per hit guarantees progress; the turn cap guarantees
termination when health pools are large. At the cap the combatant with more
remaining health wins, ties going to whoever acted first.

An engine instance keeps the logs of its most recent resolution for get_logs().
Concurrent resolutions on one instance are not supported; use one engine per
fight.
"""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Generic, TypeVar

from idle_arena.config import settings
from idle_arena.services.rng import RandomSource, create_rng

logger = logging.getLogger(__name__)

MIN_DAMAGE = 1
VARIANCE_MIN = 0.875
VARIANCE_MAX = 1.125
ARMED_DEFENSE_FACTOR = 0.009
UNARMED_DEFENSE_FACTOR = 0.01
MIN_DEFENSE_REDUCTION = 0.1

RewardsT = TypeVar("RewardsT")


class CombatValidationError(ValueError):
    """Raised before combat starts when a combatant is malformed."""


# ---------------------------------------------------------------------------
# Combat records
# ---------------------------------------------------------------------------

@dataclass
class CombatStats:
    health: int
    max_health: int
    attack: int
    defense: int
    speed: int


@dataclass
class Weapon:
    id: str
    name: str
    base_damage: float
    multiplier: float = 1.0


@dataclass
class Combatant:
    """One side of a fight."""
    id: str
    name: str
    stats: CombatStats
    is_player: bool = False
    weapon: Weapon | None = None


@dataclass
class CombatRewards:
    """Reward payload forwarded untouched by the engine."""
    experience: int = 0
    gold: int = 0
    items: list[str] | None = None


@dataclass
class CombatAction:
    attacker_id: str
    target_id: str
    damage: int
    roll: float          # pre-variance base damage
    variance: float      # multiplicative factor actually sampled
    type: str = "attack"


@dataclass
class CombatLogEntry:
    turn: int
    action: CombatAction
    description: str
    remaining_health: dict[str, int]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class CombatResult(Generic[RewardsT]):
    winner: str
    loser: str
    turns: int
    logs: list[CombatLogEntry]
    rewards: RewardsT


# ---------------------------------------------------------------------------
# Damage and narration helpers
# ---------------------------------------------------------------------------

def calculate_damage(
    attacker: CombatStats,
    defender: CombatStats,
    weapon: Weapon | None,
    rng: RandomSource,
) -> tuple[int, float, float]:
    """Roll one hit. Returns (damage, roll, variance).

    Exactly one value is drawn from rng per call.
    """
    if weapon is None:
        roll: float = attacker.attack
        defense_factor = UNARMED_DEFENSE_FACTOR
    else:
        roll = weapon.base_damage + attacker.attack * weapon.multiplier
        defense_factor = ARMED_DEFENSE_FACTOR

    variance = rng.next_float(VARIANCE_MIN, VARIANCE_MAX)
    reduction = max(MIN_DEFENSE_REDUCTION, 1 - defender.defense * defense_factor)
    damage = max(MIN_DAMAGE, math.floor(roll * variance * reduction))
    return damage, roll, variance


def describe_action(action: CombatAction, attacker_name: str, target_name: str) -> str:
    """Human-readable line for a combat log entry."""
    if action.type == "attack":
        return f"{attacker_name} attacks {target_name} for {action.damage} damage!"
    return f"{attacker_name} performs an action!"


def validate_combatant(combatant: Combatant) -> None:
    """Raise CombatValidationError if the combatant cannot take part in a fight."""
    if not combatant.id:
        raise CombatValidationError("Combatant id must not be empty")

    stats = combatant.stats
    if stats.max_health <= 0:
        raise CombatValidationError(
            f"Combatant '{combatant.id}' must have positive max_health (got {stats.max_health})"
        )
    if stats.health <= 0:
        raise CombatValidationError(
            f"Combatant '{combatant.id}' must enter combat with positive health (got {stats.health})"
        )
    if stats.health > stats.max_health:
        raise CombatValidationError(
            f"Combatant '{combatant.id}' health {stats.health} exceeds max_health {stats.max_health}"
        )
    for stat_name in ("attack", "defense", "speed"):
        value = getattr(stats, stat_name)
        if value < 0:
            raise CombatValidationError(
                f"Combatant '{combatant.id}' has negative {stat_name} ({value})"
            )

    weapon = combatant.weapon
    if weapon is not None:
        if weapon.base_damage < 0:
            raise CombatValidationError(
                f"Weapon '{weapon.id}' has negative base_damage ({weapon.base_damage})"
            )
        if weapon.multiplier <= 0:
            raise CombatValidationError(
                f"Weapon '{weapon.id}' must have a positive multiplier (got {weapon.multiplier})"
            )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class CombatEngine:
    """Turn-based combat resolver.

    CombatEngine(seed) is reproducible; CombatEngine() draws from OS entropy.
    """

    def __init__(
        self,
        seed: int | None = None,
        max_turns: int | None = None,
        rng: RandomSource | None = None,
    ) -> None:
        self.seed = seed
        self.max_turns = max_turns if max_turns is not None else settings.combat_max_turns
        if self.max_turns <= 0:
            raise ValueError("max_turns must be positive")
        self._rng = rng or create_rng(seed)
        self._logs: list[CombatLogEntry] = []

    def resolve_combat(
        self,
        combatant_a: Combatant,
        combatant_b: Combatant,
        rewards: RewardsT,
    ) -> CombatResult[RewardsT]:
        """Fight combatant_a against combatant_b until one reaches 0 health.

        The caller's combatants are never mutated. Raises CombatValidationError
        before anything else happens if either combatant is malformed.
        """
        validate_combatant(combatant_a)
        validate_combatant(combatant_b)
        if combatant_a.id == combatant_b.id:
            raise CombatValidationError(
                f"Combatants must have distinct ids (both are '{combatant_a.id}')"
            )

        fighter_a = copy.deepcopy(combatant_a)
        fighter_b = copy.deepcopy(combatant_b)
        first, second = self._turn_order(fighter_a, fighter_b)

        logs: list[CombatLogEntry] = []
        winner: Combatant | None = None
        loser: Combatant | None = None
        turn = 0

        while turn < self.max_turns:
            turn += 1

            logs.append(self._execute_attack(turn, first, second))
            if second.stats.health == 0:
                winner, loser = first, second
                break

            logs.append(self._execute_attack(turn, second, first))
            if first.stats.health == 0:
                winner, loser = second, first
                break

        if winner is None:
            # Turn cap reached with both sides standing
            if second.stats.health > first.stats.health:
                winner, loser = second, first
            else:
                winner, loser = first, second
            logger.warning(
                "Combat %s vs %s hit the %d turn cap; %s wins on remaining health (%d vs %d)",
                combatant_a.id,
                combatant_b.id,
                self.max_turns,
                winner.id,
                winner.stats.health,
                loser.stats.health,
            )

        self._logs = logs
        logger.debug(
            "Combat resolved: winner=%s loser=%s turns=%d actions=%d seed=%s",
            winner.id,
            loser.id,
            turn,
            len(logs),
            self.seed,
        )
        return CombatResult(
            winner=winner.id,
            loser=loser.id,
            turns=turn,
            logs=logs,
            rewards=rewards,
        )

    def get_logs(
        self,
        start_turn: int | None = None,
        end_turn: int | None = None,
    ) -> list[CombatLogEntry]:
        """Return logs of the last resolution, filtered to an inclusive turn range."""
        return [
            entry
            for entry in self._logs
            if (start_turn is None or entry.turn >= start_turn)
            and (end_turn is None or entry.turn <= end_turn)
        ]

    @staticmethod
    def _turn_order(a: Combatant, b: Combatant) -> tuple[Combatant, Combatant]:
        if a.stats.speed >= b.stats.speed:
            return a, b
        return b, a

    def _execute_attack(self, turn: int, attacker: Combatant, defender: Combatant) -> CombatLogEntry:
        damage, roll, variance = calculate_damage(
            attacker.stats, defender.stats, attacker.weapon, self._rng
        )
        defender.stats.health = max(0, defender.stats.health - damage)

        action = CombatAction(
            attacker_id=attacker.id,
            target_id=defender.id,
            damage=damage,
            roll=roll,
            variance=variance,
        )
        return CombatLogEntry(
            turn=turn,
            action=action,
            description=describe_action(action, attacker.name, defender.name),
            remaining_health={
                attacker.id: attacker.stats.health,
                defender.id: defender.stats.health,
            },
        )

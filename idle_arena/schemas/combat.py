from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class CombatStatsSchema(BaseModel):
    health: int = Field(ge=0)
    max_health: int = Field(gt=0)
    attack: int = Field(ge=0)
    defense: int = Field(ge=0)
    speed: int = Field(ge=0)

    @model_validator(mode="after")
    def health_within_max(self) -> "CombatStatsSchema":
        if self.health > self.max_health:
            raise ValueError("health must not exceed max_health")
        return self

    model_config = {"from_attributes": True}


class WeaponSchema(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    base_damage: float = Field(ge=0)
    multiplier: float = Field(default=1.0, gt=0)

    model_config = {"from_attributes": True}


class CombatRewardsSchema(BaseModel):
    experience: int = 0
    gold: int = 0
    items: Optional[list[str]] = None

    model_config = {"from_attributes": True}


class CombatSimulationRequest(BaseModel):
    player_id: str = Field(min_length=1)
    player_stats: CombatStatsSchema
    player_weapon: WeaponSchema
    enemy_template_id: str = Field(min_length=1)
    seed: Optional[int] = None


class CombatActionResponse(BaseModel):
    attacker_id: str
    target_id: str
    type: str
    damage: int
    roll: float
    variance: float

    model_config = {"from_attributes": True}


class CombatLogEntryResponse(BaseModel):
    turn: int
    timestamp: datetime
    action: CombatActionResponse
    description: str
    remaining_health: dict[str, int]

    model_config = {"from_attributes": True}


class CombatResultResponse(BaseModel):
    winner: str
    loser: str
    turns: int
    logs: list[CombatLogEntryResponse]
    rewards: CombatRewardsSchema

    model_config = {"from_attributes": True}


class CombatSimulationResponse(BaseModel):
    result: CombatResultResponse
    session_id: str
    updated_player_stats: CombatStatsSchema

    model_config = {"from_attributes": True}


class EnemyTemplateResponse(BaseModel):
    id: str
    name: str
    stats: CombatStatsSchema
    weapon: Optional[WeaponSchema] = None
    rewards: CombatRewardsSchema

    model_config = {"from_attributes": True}


class StoredCombatSessionResponse(BaseModel):
    id: str
    timestamp: datetime
    logs: list[CombatLogEntryResponse]

    model_config = {"from_attributes": True}

"""Combat router: PvE simulation, enemy templates and stored combat logs."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from idle_arena.dependencies import get_combat_service
from idle_arena.schemas.combat import (
    CombatLogEntryResponse,
    CombatSimulationRequest,
    CombatSimulationResponse,
    EnemyTemplateResponse,
    StoredCombatSessionResponse,
)
from idle_arena.services.combat_engine import CombatStats, CombatValidationError, Weapon
from idle_arena.services.combat_service import CombatService

router = APIRouter(prefix="/api/combat", tags=["combat"])


@router.post("/simulate", response_model=CombatSimulationResponse)
async def simulate_combat_endpoint(
    body: CombatSimulationRequest,
    service: CombatService = Depends(get_combat_service),
):
    """Fight the player against an enemy template and store the combat log.

    Supplying a seed makes the outcome reproducible.
    """
    try:
        simulation = service.simulate_combat(
            player_id=body.player_id,
            player_stats=CombatStats(**body.player_stats.model_dump()),
            player_weapon=Weapon(**body.player_weapon.model_dump()),
            enemy_template_id=body.enemy_template_id,
            seed=body.seed,
        )
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Enemy template '{body.enemy_template_id}' not found",
        )
    except CombatValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return CombatSimulationResponse.model_validate(simulation)


@router.get("/enemies", response_model=list[EnemyTemplateResponse])
async def list_enemy_templates_endpoint(
    service: CombatService = Depends(get_combat_service),
):
    return [EnemyTemplateResponse.model_validate(t) for t in service.list_enemy_templates()]


@router.get("/enemies/{template_id}", response_model=EnemyTemplateResponse)
async def get_enemy_template_endpoint(
    template_id: str,
    service: CombatService = Depends(get_combat_service),
):
    template = service.get_enemy_template(template_id)
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Enemy template '{template_id}' not found",
        )
    return EnemyTemplateResponse.model_validate(template)


@router.get("/logs/{player_id}", response_model=list[StoredCombatSessionResponse])
async def get_player_combat_logs_endpoint(
    player_id: str,
    limit: int = Query(default=10, ge=1, le=100, description="Most recent sessions to return"),
    service: CombatService = Depends(get_combat_service),
):
    """Return the player's most recent combat sessions, newest first."""
    sessions = service.get_player_combat_logs(player_id, limit)
    return [StoredCombatSessionResponse.model_validate(s) for s in sessions]


@router.get("/logs/{player_id}/{session_id}", response_model=list[CombatLogEntryResponse])
async def get_combat_session_logs_endpoint(
    player_id: str,
    session_id: str,
    service: CombatService = Depends(get_combat_service),
):
    logs = service.get_combat_logs(player_id, session_id)
    if logs is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Combat session not found"
        )
    return [CombatLogEntryResponse.model_validate(entry) for entry in logs]

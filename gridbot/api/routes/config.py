"""GET /api/v1/config — expose engine configuration."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from gridbot.api.dependencies import get_engine_manager
from gridbot.api.engine_manager import EngineManager
from gridbot.api.schemas import EngineConfigResponse

router = APIRouter()


@router.get("/config", response_model=EngineConfigResponse)
def get_config(
    manager: EngineManager = Depends(get_engine_manager),
) -> EngineConfigResponse:
    cfg = manager.config
    return EngineConfigResponse(
        default_level=cfg.default_level,
        robot_max_health=cfg.robot_max_health,
        enemy_max_health=cfg.enemy_max_health,
        normal_damage=cfg.normal_damage,
        back_attack_damage=cfg.back_attack_damage,
        enemy_attack_damage=cfg.enemy_attack_damage,
        player_move_delay=cfg.player_move_delay,
        player_attack_delay=cfg.player_attack_delay,
        enemy_move_delay=cfg.enemy_move_delay,
        enemy_attack_delay=cfg.enemy_attack_delay,
        enemy_telegraph_delay=cfg.enemy_telegraph_delay,
        time_scale=cfg.time_scale,
        default_preview_cycles=cfg.default_preview_cycles,
    )

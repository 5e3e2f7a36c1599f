from fastapi import APIRouter

from thesislens.dependencies import ControllerDep, SettingsDep

router = APIRouter(tags=["health"])


@router.get("/ping")
def ping(settings: SettingsDep, controller: ControllerDep):
    """Liveness check with the configured model and current pipeline state."""
    return {
        "status": "ok",
        "version": settings.app_version,
        "model": controller.gateway.default_model,
        "state": controller.state.value,
    }

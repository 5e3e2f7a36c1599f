from typing import Annotated

from fastapi import Depends, Request

from thesislens.config import Settings, get_settings
from thesislens.services.workspace.controller import WorkspaceController


def get_controller(request: Request) -> WorkspaceController:
    return request.app.state.controller


SettingsDep = Annotated[Settings, Depends(get_settings)]
ControllerDep = Annotated[WorkspaceController, Depends(get_controller)]

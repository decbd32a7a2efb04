from fastapi import APIRouter, Depends, HTTPException
from socialnet.core.access import PolicyGateway
from socialnet.core.dependencies import get_auth_service, get_current_token, get_current_user, get_gateway
from socialnet.modules.auth.service import AuthService
from socialnet.modules.profiles.service import ProfileService
from socialnet.modules.settings.schemas import (
    ThemeUpdate, UsernameUpdate, EmailUpdate, PasswordUpdate,
    VerificationApply, SettingsState
)
from socialnet.modules.settings.workflow import ProfileSession, SettingsWorkflow
from typing import Dict

router = APIRouter(prefix="/settings", tags=["settings"])


def get_settings_workflow(
    token: str = Depends(get_current_token),
    user_data: Dict = Depends(get_current_user),
    gateway: PolicyGateway = Depends(get_gateway),
    auth_service: AuthService = Depends(get_auth_service)
) -> SettingsWorkflow:
    """One workflow per request, seeded with a fresh read of the caller's profile"""
    profiles = ProfileService(gateway)
    session = ProfileSession(
        user_data["id"], user_data.get("email"), profiles.find_profile(user_data["id"]), access_token=token
    )
    return SettingsWorkflow(session, profiles, auth_service)


def _respond(workflow: SettingsWorkflow, ok: bool) -> SettingsState:
    if not ok and workflow.last_error is not None:
        message = workflow.message
        raise HTTPException(
            status_code=workflow.last_error.status_code,
            detail=message.text if message else workflow.last_error.message
        )
    return SettingsState(**workflow.state())


@router.get("", response_model=SettingsState)
async def get_settings(workflow: SettingsWorkflow = Depends(get_settings_workflow)):
    return SettingsState(**workflow.state())


@router.put("/theme", response_model=SettingsState)
async def change_theme(
    body: ThemeUpdate,
    workflow: SettingsWorkflow = Depends(get_settings_workflow)
):
    return _respond(workflow, workflow.change_theme(body.theme))


@router.put("/username", response_model=SettingsState)
async def change_username(
    body: UsernameUpdate,
    workflow: SettingsWorkflow = Depends(get_settings_workflow)
):
    return _respond(workflow, workflow.change_username(body.username))


@router.put("/email", response_model=SettingsState)
async def change_email(
    body: EmailUpdate,
    workflow: SettingsWorkflow = Depends(get_settings_workflow)
):
    return _respond(workflow, workflow.change_email(body.email))


@router.put("/password", response_model=SettingsState)
async def change_password(
    body: PasswordUpdate,
    workflow: SettingsWorkflow = Depends(get_settings_workflow)
):
    return _respond(workflow, workflow.change_password(body.new_password, body.confirm_password))


@router.post("/verification", response_model=SettingsState)
async def apply_for_verification(
    body: VerificationApply,
    workflow: SettingsWorkflow = Depends(get_settings_workflow)
):
    return _respond(workflow, workflow.apply_for_verification(body.reason))

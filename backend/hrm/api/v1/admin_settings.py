"""
Admin Settings API – organisationsweite Arbeitszeiten.

Gespeichert als Schlüssel/Wert-Paare in system_settings (Kategorie "work").
Änderungen wirken auf alle künftigen Überstunden-Berechnungen; bereits
berechnete Einträge werden nicht automatisch neu berechnet.
"""
from fastapi import APIRouter, HTTPException

from hrm.api.deps import DB, AdminUser, CurrentUser
from hrm.schemas.settings import WorkSettingsOut, WorkSettingsUpdate
from hrm.services.work_settings import get_work_settings, update_work_settings

router = APIRouter(prefix="/admin", tags=["admin-settings"])


@router.get("/settings/work", response_model=WorkSettingsOut)
async def get_work_config(current_user: CurrentUser, db: DB):
    """Arbeitszeiten lesen (alle angemeldeten Nutzer, z.B. für die Stempeluhr)."""
    return (await get_work_settings(db)).to_dict()


@router.put("/settings/work", response_model=WorkSettingsOut)
async def update_work_config(payload: WorkSettingsUpdate, current_user: AdminUser, db: DB):
    changes = payload.model_dump(exclude_none=True)
    try:
        new_settings = await update_work_settings(db, changes, updated_by=current_user.email)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return new_settings.to_dict()

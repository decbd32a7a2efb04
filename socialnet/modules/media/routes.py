from fastapi import APIRouter, Depends, UploadFile, File
from socialnet.core.dependencies import get_current_user
from socialnet.database.supabase_client import get_service_supabase
from socialnet.modules.media.schemas import MediaResponse
from socialnet.modules.media.service import MediaService
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/media", tags=["media"])


def get_media_service(
    user_data: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_service_supabase)
) -> MediaService:
    return MediaService(supabase, user_data["id"])


@router.post("", response_model=MediaResponse, status_code=201)
async def upload_media(
    file: UploadFile = File(...),
    service: MediaService = Depends(get_media_service)
):
    """Upload an image or video into the caller's folder"""
    content = await file.read()
    return service.upload(content, file.filename, file.content_type)


@router.delete("/{key:path}", status_code=204)
async def delete_media(
    key: str,
    service: MediaService = Depends(get_media_service)
):
    service.delete(key)
    return None

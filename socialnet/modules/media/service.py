import logging
import os
import uuid
from supabase import Client
from socialnet.config.settings import settings
from socialnet.core.access import SupabaseRowSource
from socialnet.core.errors import BackendError, PolicyDenied, ValidationFailed
from socialnet.core.policies import POLICY_SET, STORAGE_OBJECTS, PolicyContext, PolicySet
from socialnet.modules.media.models import ALLOWED_MEDIA_PREFIXES, media_type_for
from socialnet.modules.media.schemas import MediaResponse
from typing import Optional

logger = logging.getLogger(__name__)


class MediaService:
    def __init__(self, supabase: Client, uid: Optional[str], policies: PolicySet = POLICY_SET):
        self.supabase = supabase
        self.uid = uid
        self.policies = policies
        self.bucket = settings.media_bucket

    def _context(self) -> PolicyContext:
        return PolicyContext(self.uid, SupabaseRowSource(self.supabase), self.policies)

    def _object(self, key: str) -> dict:
        return {"bucket_id": self.bucket, "name": key}

    def object_key(self, filename: Optional[str]) -> str:
        """Keys are always placed under the uploader's folder"""
        extension = os.path.splitext(filename or "")[1].lower()
        return f"{self.uid}/{uuid.uuid4().hex}{extension}"

    def public_url(self, key: str) -> str:
        return self.supabase.storage.from_(self.bucket).get_public_url(key)

    def upload(self, content: bytes, filename: Optional[str], content_type: Optional[str]) -> MediaResponse:
        """Upload an image or video and return its public URL"""
        content_type = content_type or "application/octet-stream"
        if not content_type.startswith(ALLOWED_MEDIA_PREFIXES):
            raise ValidationFailed("Only image and video uploads are accepted")
        if not content:
            raise ValidationFailed("Empty upload")
        key = self.object_key(filename)
        if not self.policies.allows_insert(self._context(), STORAGE_OBJECTS, self._object(key)):
            raise PolicyDenied()
        try:
            self.supabase.storage.from_(self.bucket).upload(
                key,
                content,
                file_options={"content-type": content_type}
            )
        except Exception as e:
            logger.error(f"Supabase Storage upload failed ({key}): {str(e)}")
            raise BackendError("Failed to upload media") from e
        logger.info(f"Uploaded {key} ({len(content)} bytes)")
        return MediaResponse(key=key, url=self.public_url(key), media_type=media_type_for(content_type))

    def delete(self, key: str) -> None:
        """Only keys inside the caller's own folder may be deleted"""
        if not self.policies.allows_delete(self._context(), STORAGE_OBJECTS, self._object(key)):
            raise PolicyDenied()
        try:
            self.supabase.storage.from_(self.bucket).remove([key])
        except Exception as e:
            logger.error(f"Supabase Storage delete failed ({key}): {str(e)}")
            raise BackendError("Failed to delete media") from e

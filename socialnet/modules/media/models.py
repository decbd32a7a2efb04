# Supabase Storage: one public bucket for post, message, avatar and banner media
# Object keys follow "<owner uid>/<object name>"; the delete policy relies on it.

from socialnet.config.settings import settings

"""
storage.buckets:
- id = name = settings.media_bucket ('media'), public = true

storage.objects (policies in socialnet.core.policies.STORAGE_POLICIES):
- SELECT: anyone, inside the bucket
- INSERT: any authenticated user, any key
- DELETE: authenticated, first folder of the key must equal auth.uid()
"""

ALLOWED_MEDIA_PREFIXES = ("image/", "video/")


def render_bucket_sql(bucket: str = settings.media_bucket) -> str:
    return (
        f"INSERT INTO storage.buckets (id, name, public) "
        f"VALUES ('{bucket}', '{bucket}', true) ON CONFLICT DO NOTHING;"
    )


def media_type_for(content_type: str) -> str:
    return "video" if content_type.startswith("video/") else "image"

"""
Asset domain - file types, storage keys and bucket paths
"""
from dataclasses import dataclass

ASSET_TYPE_IMAGE = "image"
ASSET_TYPE_PDF = "pdf"
ASSET_TYPE_DOCUMENT = "document"
ASSET_TYPE_AUDIO = "audio"
ASSET_TYPE_OTHER = "other"
ASSET_TYPES = (ASSET_TYPE_IMAGE, ASSET_TYPE_PDF, ASSET_TYPE_DOCUMENT, ASSET_TYPE_AUDIO, ASSET_TYPE_OTHER)


@dataclass(frozen=True)
class BucketPath:
    """
    Location of a blob: "<bucket>/<storage-key>".

    The storage key may itself contain slashes ("<client_id>/<ts>.<ext>"),
    only the first segment is the bucket.
    """
    bucket: str
    key: str

    @staticmethod
    def parse(bucket_path: str) -> "BucketPath":
        bucket, _, key = bucket_path.partition("/")
        return BucketPath(bucket=bucket, key=key)

    def __str__(self) -> str:
        return f"{self.bucket}/{self.key}"


def detect_asset_type(content_type: str | None) -> str:
    """
    Classify an upload by its MIME type.

    image/* -> image, anything mentioning pdf -> pdf, audio/* -> audio,
    everything else -> document.
    """
    content_type = (content_type or "").lower()
    if content_type.startswith("image/"):
        return ASSET_TYPE_IMAGE
    if "pdf" in content_type:
        return ASSET_TYPE_PDF
    if content_type.startswith("audio/"):
        return ASSET_TYPE_AUDIO
    return ASSET_TYPE_DOCUMENT


def build_storage_key(client_id: str, filename: str, timestamp_ms: int) -> str:
    """
    Storage key for a new upload: "{client_id}/{timestamp}.{ext}".

    The extension is whatever follows the last dot of the file name
    (the whole name when there is no dot).
    """
    ext = filename.rsplit(".", 1)[-1]
    return f"{client_id}/{timestamp_ms}.{ext}"

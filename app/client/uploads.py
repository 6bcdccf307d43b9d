"""
Staged avatar uploads.

A ``StagedUpload`` exists between file selection and a confirmed upload and
is discarded on success or when the crop modal is cancelled.
"""

import base64
import mimetypes
from dataclasses import dataclass
from typing import Optional

from app.core.exceptions import ValidationError

ALLOWED_IMAGE_TYPES = ("image/png", "image/jpeg", "image/webp", "image/gif")
MAX_IMAGE_BYTES = 5 * 1024 * 1024


@dataclass(frozen=True)
class StagedUpload:
    """File bytes waiting to be PUT to storage, plus a preview URL."""

    content: bytes
    content_type: str
    filename: Optional[str] = None

    @property
    def preview_url(self) -> str:
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


class FileStager:
    """Holds at most one staged file and the preview shown in the form."""

    def __init__(self, current_image_url: Optional[str] = None):
        self.file: Optional[StagedUpload] = None
        self.file_url: Optional[str] = current_image_url

    def stage(
        self,
        content: bytes,
        content_type: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> StagedUpload:
        """
        Stage a file selected or dropped by the user.

        Raises:
            ValidationError: Empty, oversized or non-image file
        """
        if content_type is None and filename:
            content_type, _ = mimetypes.guess_type(filename)
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError(
                "Only PNG, JPEG, WebP or GIF images can be uploaded",
                details={"content_type": content_type},
            )
        if not content:
            raise ValidationError("The selected file is empty")
        if len(content) > MAX_IMAGE_BYTES:
            raise ValidationError(
                "Image is too large",
                details={"size": len(content), "max_size": MAX_IMAGE_BYTES},
            )

        self.file = StagedUpload(content=content, content_type=content_type, filename=filename)
        self.file_url = self.file.preview_url
        return self.file

    def clear(self, current_image_url: Optional[str] = None) -> None:
        self.file = None
        self.file_url = current_image_url

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FormatDescriptor(BaseModel):
    """
    One downloadable stream as listed in the platform's streaming data.

    Carries either a direct ``url`` or a cipher payload (``signatureCipher``
    or the older ``cipher`` field). Unknown platform fields are kept as
    extras so a resolved descriptor round-trips everything it was given.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    itag: int | None = Field(None, description="Platform stream identifier")
    mime_type: str | None = Field(
        None, alias="mimeType", description='Media type, e.g. video/mp4; codecs="avc1"'
    )
    url: str | None = Field(None, description="Direct (or resolved) stream URL")
    signature_cipher: str | None = Field(
        None,
        alias="signatureCipher",
        description="Query-string payload with url, s and sp",
    )
    cipher: str | None = Field(None, description="Legacy name of signatureCipher")

    @property
    def cipher_payload(self) -> str | None:
        return self.signature_cipher or self.cipher

    @property
    def needs_decipher(self) -> bool:
        return not self.url

    def to_platform_dict(self) -> dict[str, Any]:
        """Serialize with the platform's camelCase names, dropping empty fields."""
        return self.model_dump(by_alias=True, exclude_none=True)

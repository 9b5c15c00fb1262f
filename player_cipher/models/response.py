from pydantic import BaseModel, Field

from .format import FormatDescriptor


class ResolveResponse(BaseModel):
    """Response model for the /resolve endpoint."""

    success: bool = Field(..., description="Whether any format was resolved")
    player_url: str = Field(..., description="Player the formats were resolved with")
    count: int = Field(0, description="Number of resolved formats")
    formats: dict[str, FormatDescriptor] = Field(
        default_factory=dict, description="Resolved formats keyed by final URL"
    )


class FragmentsResponse(BaseModel):
    """Response model for the /fragments endpoint."""

    player_url: str = Field(..., description="Player the fragments were extracted from")
    decipher: str = Field(..., description="Signature decipher function source")
    helpers: list[str] = Field(default_factory=list, description="Helper declarations")
    n_transform: str | None = Field(None, description="n-parameter transform source")


class ErrorResponse(BaseModel):
    """Error response model."""

    success: bool = Field(False)
    error: str = Field(..., description="Error message")
    error_code: str | None = Field(None, description="Machine-readable error code")
    player_url: str | None = Field(None, description="Player involved, if any")

"""Note access schemas."""

from pydantic import BaseModel


class NoteAccessResponse(BaseModel):
    """Whether the caller may read a note, with a signed file URL when allowed."""

    note_id: str
    can_view: bool
    is_author: bool = False
    has_purchased: bool = False
    is_exclusive: bool = False
    is_sold: bool = False
    file_url: str | None = None

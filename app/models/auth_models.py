"""Authorization claims handed to the search layer by the auth middleware."""
from typing import Literal, Optional

from pydantic import BaseModel


class SearchClaims(BaseModel):
    """Who is searching; populated upstream on `request.state.claims`."""
    kind: Literal["admin", "employer", "candidate", "moderator"]
    user_id: Optional[int] = None
    employer_id: Optional[int] = None

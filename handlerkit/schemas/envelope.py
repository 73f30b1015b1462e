"""schemas/envelope.py — The {code, msg, data, pagination} response envelope.

Code and msg are always present.  Data is present for a success response
only, pagination for a paginated success response only.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from handlerkit.schemas.pagination import PaginationResp


class Envelope(BaseModel):
    code: int
    msg: str = ""
    data: Any = None
    pagination: Optional[PaginationResp] = None

    def render(self) -> dict[str, Any]:
        """Build the JSON body, leaving out data/pagination when absent.

        Only envelope-level keys are dropped; None values inside data are kept.
        """
        content: dict[str, Any] = {"code": self.code, "msg": self.msg}
        if self.data is not None:
            content["data"] = jsonable_encoder(self.data)
        if self.pagination is not None:
            content["pagination"] = self.pagination.render()
        return content

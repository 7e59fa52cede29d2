"""APIC REST response schemas."""

from __future__ import annotations

import logging
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)

ERROR_CLASS = "error"


class ApicBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "APIC %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class ApicObjectBody(ApicBaseModel):
    attributes: dict[str, str] = Field(default_factory=dict)
    children: list[dict[str, ApicObjectBody]] = Field(default_factory=list)


type ApicRecord = dict[str, ApicObjectBody]


class ApicResponse(ApicBaseModel):
    """``{"totalCount": "1", "imdata": [{"<class>": {"attributes": {...}}}]}``"""

    total_count: int = Field(default=0, alias="totalCount")
    imdata: list[ApicRecord] = Field(default_factory=list)

    def error(self) -> ApicObjectBody | None:
        for record in self.imdata:
            body = record.get(ERROR_CLASS)
            if body is not None:
                return body
        return None

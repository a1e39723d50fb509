from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class MicroAction(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    task: str
    encouragement: str
    brave_note: Optional[str] = None
    is_fallback: bool = False

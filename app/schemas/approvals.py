from pydantic import BaseModel, Field
from typing import Literal, Optional
from typing_extensions import Annotated


class DecisionSchema(BaseModel):
    action: Literal["APPROVED", "DECLINED"]
    reason: Optional[Annotated[str, Field(max_length=500)]] = None

from pydantic import BaseModel, Field
from typing import Optional
from typing_extensions import Annotated


class OtpRequestSchema(BaseModel):
    phone: Annotated[str, Field(min_length=10, max_length=15)]


class OtpVerifySchema(BaseModel):
    phone: Annotated[str, Field(min_length=10, max_length=15)]
    otp: Annotated[str, Field(min_length=4, max_length=8)]
    callbackUrl: Optional[str] = None

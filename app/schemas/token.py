from pydantic import BaseModel
from typing import List

class Token(BaseModel):
    access_token: str
    token_type: str = 'bearer'

class TokenResponse(Token):
    user_uid: str
    roles: List[str]

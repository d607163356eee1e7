from typing import Optional
from pydantic import BaseModel, EmailStr

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int

class PrincipalResponse(BaseModel):
    id: int
    email: str
    role: Optional[str] = None
    category: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    manager_id: Optional[int] = None

class LoginResponse(Token):
    user: PrincipalResponse

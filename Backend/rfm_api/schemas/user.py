from pydantic import BaseModel, EmailStr, Field
from typing import List, Literal, Optional, Union
from datetime import date


UserStatus = Literal["Active", "Inactive"]


# ---------------------------------------------------------
# CREATE SCHEMA — admin adds an employee
# ---------------------------------------------------------
class UserCreate(BaseModel):
    firstName: str = Field(..., min_length=1)
    middleName: Optional[str] = None
    lastName: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    # list of labels, or an already-encoded string ("Cutter, Designer")
    roles: Union[List[str], str]
    status: UserStatus = "Active"
    hiredDate: Optional[date] = None

    class Config:
        json_schema_extra = {
            "example": {
                "firstName": "Leo",
                "lastName": "Espinosa",
                "email": "leo@example.com",
                "phone": "09171234567",
                "roles": ["Seamster", "Cutter"],
                "status": "Active",
                "hiredDate": "2024-06-01"
            }
        }


# ---------------------------------------------------------
# UPDATE SCHEMA — every field optional; only sent fields are written
# ---------------------------------------------------------
class UserUpdate(BaseModel):
    firstName: Optional[str] = None
    middleName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    roles: Optional[Union[List[str], str]] = None
    status: Optional[UserStatus] = None
    hiredDate: Optional[date] = None

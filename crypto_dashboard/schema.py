from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class Archetype(str, Enum):
    HODLER = "HODLer"
    DAY_TRADER = "Day Trader"
    NFT_COLLECTOR = "NFT Collector"
    DEFI_ENTHUSIAST = "DeFi Enthusiast"
    GENERAL_INVESTOR = "General Investor"


# ---- auth ----

class RegisterIn(BaseModel):
    email: str
    name: str
    password: str

class LoginIn(BaseModel):
    email: str
    password: str

class UserView(BaseModel):
    """Public part of a user: what tokens carry and what the API returns."""
    id: int
    email: str
    name: str

class AuthOut(BaseModel):
    message: str
    token: str
    user: UserView


# ---- onboarding ----

class PreferencesIn(BaseModel):
    # Optional so that a missing field gets the store's own message
    interested_assets: Optional[List[str]] = None
    investor_type: Optional[str] = None
    content_types: Optional[List[str]] = None

class PreferencesOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    interested_assets: List[str]
    investor_type: str
    content_types: List[str]
    created_at: datetime


# ---- feedback ----

class FeedbackIn(BaseModel):
    content_type: Optional[str] = None
    content_id: Optional[Union[str, int]] = None
    vote: Any = None  # checked by the store: exactly 1 or -1


class SavedOut(BaseModel):
    message: str
    id: int

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from enum import Enum

class ReportType(str, Enum):
    ICE_CREAM = "iceCream"   # ice cream machine cleaning
    FRIDGE = "fridge"        # fresh food fridge filling


class ReportCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    reportType: ReportType
    status: str = Field(default="completed")
    machineCode: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    photos: Dict[str, Any] = Field(default_factory=dict)  # photo type -> data URL(s)

class ReportUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: Optional[str] = None
    machineCode: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    photos: Optional[Dict[str, Any]] = None


class CommodityCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    code: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    price: Optional[float] = None

class CommodityUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    code: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    price: Optional[float] = None

# Navigation
class NavAction(BaseModel):
    key: str
    label: str
    path: Optional[str] = None
    icon: str
    active: bool = False

class HeaderView(BaseModel):
    title: str
    user_label: str
    buttons: List[NavAction]
    menu_items: List[NavAction]

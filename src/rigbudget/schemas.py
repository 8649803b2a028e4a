from __future__ import annotations

import math
import re
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)


Category = Literal[
    "cpu",
    "motherboard",
    "ram",
    "gpu",
    "storage",
    "case",
    "psu",
    "cooler",
]

REQUIRED_CATEGORIES: tuple[str, ...] = (
    "cpu",
    "motherboard",
    "ram",
    "gpu",
    "storage",
    "case",
    "psu",
    "cooler",
)

_NUMBER_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)")


def _leading_number(value: Any) -> Optional[float]:
    """Read the leading number of a catalog value such as "8GB" or "4.4 GHz"."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _NUMBER_RE.match(str(value))
    if not match:
        return None
    return float(match.group(1))


def _leading_int(value: Any) -> Optional[int]:
    number = _leading_number(value)
    return int(number) if number is not None else None


LeadingInt = Annotated[Optional[int], BeforeValidator(_leading_int)]
LeadingFloat = Annotated[Optional[float], BeforeValidator(_leading_number)]


class _Specs(BaseModel):
    # 目录数据可能不完整，未知字段原样保留
    model_config = ConfigDict(extra="allow", frozen=True)


class CpuSpecs(_Specs):
    cores: LeadingInt = None
    threads: LeadingInt = None
    boost_clock: LeadingFloat = None
    socket: Optional[str] = None
    tdp: LeadingInt = None


class MotherboardSpecs(_Specs):
    socket: Optional[str] = None
    ram_type: Optional[str] = None
    form_factor: Optional[str] = None


class RamSpecs(_Specs):
    type: Optional[str] = None
    capacity: LeadingInt = None
    speed: LeadingInt = None


class GpuSpecs(_Specs):
    vram: LeadingInt = None
    tdp: LeadingInt = None
    length: LeadingInt = None


class StorageSpecs(_Specs):
    capacity: LeadingInt = None
    read_speed: LeadingInt = None


class CaseSpecs(_Specs):
    max_gpu_length: LeadingInt = None
    form_factor: Optional[str] = None


class PsuSpecs(_Specs):
    wattage: LeadingInt = None
    efficiency: Optional[str] = None


class CoolerSpecs(_Specs):
    socket_support: List[str] = Field(default_factory=list)
    tdp_rating: LeadingInt = None

    @field_validator("socket_support", mode="before")
    @classmethod
    def _split_sockets(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [s.strip() for s in value.split(",") if s.strip()]
        return [str(s) for s in value]


SPECS_BY_CATEGORY: Dict[str, type[_Specs]] = {
    "cpu": CpuSpecs,
    "motherboard": MotherboardSpecs,
    "ram": RamSpecs,
    "gpu": GpuSpecs,
    "storage": StorageSpecs,
    "case": CaseSpecs,
    "psu": PsuSpecs,
    "cooler": CoolerSpecs,
}

AnySpecs = Union[
    CpuSpecs,
    MotherboardSpecs,
    RamSpecs,
    GpuSpecs,
    StorageSpecs,
    CaseSpecs,
    PsuSpecs,
    CoolerSpecs,
]


class Component(BaseModel):
    """A catalog part. Read-only once fetched."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: Category
    name: str
    brand: str = ""
    price: float = Field(ge=0)
    specs: AnySpecs
    vendor_links: Dict[str, str] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @model_validator(mode="before")
    @classmethod
    def _typed_specs(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        spec_cls = SPECS_BY_CATEGORY.get(data.get("type"))
        if spec_cls is None:
            return data
        raw = data.get("specs")
        if isinstance(raw, spec_cls):
            return data
        if isinstance(raw, BaseModel):
            raw = raw.model_dump()
        return {**data, "specs": spec_cls.model_validate(raw or {})}


CategorySet = Dict[str, List[Component]]


class Build(BaseModel):
    cpu: Optional[Component] = None
    motherboard: Optional[Component] = None
    ram: Optional[Component] = None
    gpu: Optional[Component] = None
    storage: Optional[Component] = None
    case: Optional[Component] = None
    psu: Optional[Component] = None
    cooler: Optional[Component] = None

    def get(self, category: str) -> Optional[Component]:
        if category not in REQUIRED_CATEGORIES:
            raise ValueError(f"unknown category: {category}")
        return getattr(self, category)

    def with_part(self, category: str, component: Optional[Component]) -> "Build":
        if category not in REQUIRED_CATEGORIES:
            raise ValueError(f"unknown category: {category}")
        return self.model_copy(update={category: component})

    def is_complete(self) -> bool:
        return all(getattr(self, key) is not None for key in REQUIRED_CATEGORIES)

    def total_price(self) -> float:
        total = 0.0
        for key in REQUIRED_CATEGORIES:
            part = getattr(self, key)
            if part:
                total += part.price
        return round(total, 2)

    def as_dict(self) -> Dict[str, Optional[dict]]:
        return {
            key: getattr(self, key).model_dump() if getattr(self, key) else None
            for key in REQUIRED_CATEGORIES
        }


class CompatibilityReport(BaseModel):
    compatible: bool
    issues: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    total_tdp: int = 0
    recommended_psu: int = 0


class GenerationResult(BaseModel):
    success: bool
    build: Optional[Build] = None
    total_price: float = 0.0
    budget: float = 0.0
    compatibility_report: Optional[CompatibilityReport] = None
    alternatives: Dict[str, List[Component]] = Field(default_factory=dict)
    minimum_required_budget: float = 0.0
    error: Optional[str] = None
    strategy: Optional[str] = None

    @field_serializer("minimum_required_budget", when_used="json")
    def _finite_or_null(self, value: float) -> Optional[float]:
        # JSON 没有 Infinity，目录不完整时输出 null
        return value if math.isfinite(value) else None


class SwapResult(BaseModel):
    build: Build
    total_price: float
    budget: Optional[float] = None
    within_budget: bool = True
    compatibility_report: CompatibilityReport
    alternatives: List[Component] = Field(default_factory=list)


class GenerateRequest(BaseModel):
    budget: float = Field(gt=0)


class CompatibilityRequest(BaseModel):
    build: Build


class SwapRequest(BaseModel):
    build: Build
    category: Category
    component_id: str
    budget: Optional[float] = Field(default=None, gt=0)

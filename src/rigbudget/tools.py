"""LangChain 工具：供 Agent 调用的配置生成、兼容性检查与功耗估算，由 main.create_app 注册到 app.state.tools"""

from __future__ import annotations

from typing import List, Optional

from langchain_core.tools import tool
from pydantic import BaseModel, Field

from .builder.compatibility import estimate_system_tdp, required_psu_wattage, REPORT_PSU_HEADROOM
from .schemas import Build
from .service import BuildService


class GenerateBuildInput(BaseModel):
    budget: float = Field(gt=0, description="Total budget in USD")


class CompatibilityInput(BaseModel):
    cpu_id: str
    motherboard_id: str
    ram_id: str
    gpu_id: str
    storage_id: str
    case_id: str
    psu_id: str
    cooler_id: str


class AlternativesInput(BaseModel):
    category: str = Field(description="Part category such as cpu, gpu, motherboard")
    selected_id: Optional[str] = Field(default=None, description="Currently selected part id")
    limit: int = Field(default=3, ge=1, le=20)


class EstimatePowerInput(BaseModel):
    cpu_id: str
    gpu_id: str


class Toolset:
    def __init__(self, service: BuildService):
        self.service = service

    def register(self):
        service = self.service

        def _find(component_id: str):
            for items in service.catalog.fetch_all_grouped_by_category().values():
                for component in items:
                    if component.id == component_id:
                        return component
            return None

        @tool("generate_build", args_schema=GenerateBuildInput)
        def generate_build(budget: float) -> dict:
            """Generate a compatible PC build within the given budget."""
            return service.generate_build(budget).model_dump(mode="json")

        @tool("check_compatibility", args_schema=CompatibilityInput)
        def check_compatibility(
            cpu_id: str,
            motherboard_id: str,
            ram_id: str,
            gpu_id: str,
            storage_id: str,
            case_id: str,
            psu_id: str,
            cooler_id: str,
        ) -> dict:
            """Validate hardware compatibility of a full build given by part ids."""
            ids = {
                "cpu": cpu_id,
                "motherboard": motherboard_id,
                "ram": ram_id,
                "gpu": gpu_id,
                "storage": storage_id,
                "case": case_id,
                "psu": psu_id,
                "cooler": cooler_id,
            }
            parts = {category: _find(part_id) for category, part_id in ids.items()}
            missing = [ids[category] for category, part in parts.items() if part is None]
            if missing:
                return {"compatible": False, "issues": [f"unknown part ids: {', '.join(missing)}"]}
            return service.check_compatibility(Build(**parts)).model_dump()

        @tool("get_alternatives", args_schema=AlternativesInput)
        def get_alternatives(
            category: str,
            selected_id: Optional[str] = None,
            limit: int = 3,
        ) -> List[dict]:
            """List the cheapest alternative parts of a category, excluding the selected one."""
            return [
                c.model_dump()
                for c in service.get_alternatives(category, selected_id, limit=limit)
            ]

        @tool("estimate_power", args_schema=EstimatePowerInput)
        def estimate_power(cpu_id: str, gpu_id: str) -> dict:
            """Estimate system TDP and recommended PSU wattage for a CPU and GPU pair."""
            cpu, gpu = _find(cpu_id), _find(gpu_id)
            return {
                "total_tdp": estimate_system_tdp(cpu, gpu),
                "recommended_psu": required_psu_wattage(cpu, gpu, REPORT_PSU_HEADROOM),
            }

        return {
            "generate_build": generate_build,
            "check_compatibility": check_compatibility,
            "get_alternatives": get_alternatives,
            "estimate_power": estimate_power,
        }

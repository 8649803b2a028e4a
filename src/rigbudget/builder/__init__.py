"""Builder 模块：预算内配置生成与兼容性检查"""

from .budget import AllocationTable, allocate_budget, minimum_build_cost
from .compatibility import check_compatibility, compatible_pool
from .generator import BuildGenerator
from .picker import get_alternatives, select_component_smartly
from .scoring import score_component

__all__ = [
    "AllocationTable",
    "allocate_budget",
    "minimum_build_cost",
    "check_compatibility",
    "compatible_pool",
    "BuildGenerator",
    "get_alternatives",
    "select_component_smartly",
    "score_component",
]

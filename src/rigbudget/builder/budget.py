"""
预算分配模块 - Budget Allocation Module

定义各配件的预算分配表，以及目录最低装机成本的计算。
Allocation tables per part category, and the catalog's minimum build cost.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Dict, TYPE_CHECKING

from ..schemas import REQUIRED_CATEGORIES

if TYPE_CHECKING:
    from ..schemas import CategorySet


@dataclass(frozen=True)
class AllocationTable:
    """
    预算分配表 - Budget Allocation Table

    各类配件占总预算的比例。比例只表示相对优先级，总和不必恰好为 1。
    Fraction of the total budget per category. Fractions express relative
    priority and need not sum to exactly 1.0.

    字段说明 Field Descriptions:
    - name: 分配表名称
    - weights: 类别 -> 比例
    - jitter: 每次调用时对每个比例施加的随机偏移幅度（±jitter）
    """
    name: str
    weights: Dict[str, float]
    jitter: float = 0.0

    def resolve(self, rng: random.Random) -> Dict[str, float]:
        """
        生成本次使用的比例 - Resolve Weights for One Attempt

        jitter 为 0 时直接返回副本；否则每个比例偏移 ±jitter，以便同一预算
        多次生成得到不同配置。
        With a non-zero jitter every weight moves by up to ±jitter so that
        repeated generations at one budget vary.
        """
        if not self.jitter:
            return dict(self.weights)
        return {
            category: weight + (rng.random() - 0.5) * 2 * self.jitter
            for category, weight in self.weights.items()
        }


# 标准分配 - Standard Allocation
STANDARD_ALLOCATION = AllocationTable(
    name="standard",
    weights={
        "cpu": 0.20,
        "gpu": 0.30,
        "motherboard": 0.12,
        "ram": 0.10,
        "storage": 0.10,
        "psu": 0.08,
        "case": 0.06,
        "cooler": 0.04,
    },
    jitter=0.02,
)
"""
标准分配表 - Standard Allocation Table

显卡 30%、CPU 20% 占比最大，每次调用随机偏移 ±2%。
GPU and CPU get the largest shares; each weight jitters by ±2% per call.
"""

# 预算优化分配 - Budget-optimized Allocation
BUDGET_OPTIMIZED_ALLOCATION = AllocationTable(
    name="budget_optimized",
    weights={
        "cpu": 0.18,
        "gpu": 0.28,
        "motherboard": 0.10,
        "ram": 0.12,
        "storage": 0.12,
        "psu": 0.10,
        "case": 0.06,
        "cooler": 0.04,
    },
)

# 激进降本分配 - Aggressive Cost-cutting Allocation
AGGRESSIVE_ALLOCATION = AllocationTable(
    name="aggressive",
    weights={
        "cpu": 0.16,
        "gpu": 0.25,
        "motherboard": 0.09,
        "ram": 0.13,
        "storage": 0.14,
        "psu": 0.11,
        "case": 0.07,
        "cooler": 0.05,
    },
)


def allocate_budget(budget: float, weights: Dict[str, float]) -> Dict[str, float]:
    """
    分配预算 - Allocate Budget

    参数 Parameters:
        budget: 总预算
                Total budget
        weights: 类别比例
                 Per-category fractions

    返回 Returns:
        每个类别的理想预算金额
        Ideal amount per category
    """
    return {category: budget * weights.get(category, 0.0) for category in REQUIRED_CATEGORIES}


def minimum_build_cost(category_set: "CategorySet") -> float:
    """
    计算最低装机成本 - Minimum Build Cost

    每个必需类别取最低价相加，不考虑跨类别兼容性，因此是任何成功配置
    总价的下界。任一类别为空时返回 inf，表示目录不完整。
    Sum of the cheapest part per required category, ignoring cross-category
    compatibility, so it bounds every successful build from below. Returns
    ``math.inf`` when any category is empty (catalog incomplete).
    """
    total = 0.0
    for category in REQUIRED_CATEGORIES:
        components = category_set.get(category) or []
        if not components:
            return math.inf
        total += min(c.price for c in components)
    return round(total, 2)

"""
性能评分模块 - Component Scoring Module

按类别计算配件的性价比分数，分数越高越划算。
Category-specific performance/price score; higher means better value.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..schemas import Component


# 目录数据可能缺字段，使用默认值而不是报错
# Missing spec fields fall back to these defaults.
DEFAULT_CPU_CORES = 1
DEFAULT_CPU_THREADS = 1
DEFAULT_CPU_BOOST_CLOCK = 3.0
DEFAULT_GPU_VRAM = 4
DEFAULT_GPU_TDP = 100
DEFAULT_RAM_CAPACITY = 8
DEFAULT_RAM_SPEED = 2400
DEFAULT_STORAGE_CAPACITY = 256
DEFAULT_STORAGE_READ_SPEED = 500
DEFAULT_PSU_WATTAGE = 450
DEFAULT_SCORE_NUMERATOR = 100


def efficiency_multiplier(efficiency: str | None) -> float:
    """80+ Gold 1.2, Bronze 1.1, anything else 1.0."""
    rating = efficiency or ""
    if "Gold" in rating:
        return 1.2
    if "Bronze" in rating:
        return 1.1
    return 1.0


def score_component(component: "Component", category: str) -> float:
    """
    计算配件评分 - Score a Component

    参数 Parameters:
        component: 待评分的配件
                   Component to score
        category: 配件类别，决定评分公式
                  Category, selects the formula

    返回 Returns:
        性价比分数；价格为 0 时返回 0
        Performance/price score, 0 for a zero price
    """
    price = component.price
    if price <= 0:
        return 0.0

    specs = component.specs

    if category == "cpu":
        cores = specs.cores or DEFAULT_CPU_CORES
        threads = specs.threads or DEFAULT_CPU_THREADS
        boost_clock = specs.boost_clock or DEFAULT_CPU_BOOST_CLOCK
        return (cores * threads * boost_clock) / price

    if category == "gpu":
        vram = specs.vram or DEFAULT_GPU_VRAM
        tdp = specs.tdp or DEFAULT_GPU_TDP
        return (vram * tdp) / price

    if category == "ram":
        capacity = specs.capacity or DEFAULT_RAM_CAPACITY
        speed = specs.speed or DEFAULT_RAM_SPEED
        return (capacity * speed) / price

    if category == "storage":
        capacity = specs.capacity or DEFAULT_STORAGE_CAPACITY
        read_speed = specs.read_speed or DEFAULT_STORAGE_READ_SPEED
        return (capacity * read_speed) / price

    if category == "psu":
        wattage = specs.wattage or DEFAULT_PSU_WATTAGE
        return (wattage * efficiency_multiplier(specs.efficiency)) / price

    # 主板、机箱、散热器 - motherboard, case, cooler
    return DEFAULT_SCORE_NUMERATOR / price

"""
配件选择模块 - Part Selection Module

在兼容候选池中挑选单个配件，兼顾性价比与预算，并在优选项之间加权随机。
Pick one part from a compatible pool, balancing value score against the
budget, with weighted randomness among the best candidates.
"""

from __future__ import annotations

import random
from functools import cmp_to_key
from typing import Callable, List, Optional, Sequence, TYPE_CHECKING

from .scoring import score_component

if TYPE_CHECKING:
    from ..schemas import Component


# 每个尚未选择的类别预留剩余预算的 6%
RESERVE_PER_REMAINING_STEP = 0.06
# 分数差在此范围内视为持平，改按与目标价的距离排序
SCORE_TIE_WINDOW = 0.1
TOP_CANDIDATES = 5
MINIMUM_VIABLE_CHOICES = 3
DEFAULT_ALTERNATIVES_LIMIT = 3


def _by_price(components: Sequence["Component"]) -> List["Component"]:
    return sorted(components, key=lambda c: c.price)


def select_component_smartly(
    pool: Sequence["Component"],
    ideal_budget: float,
    remaining_budget: float,
    category: str,
    step: int,
    total_steps: int,
    rng: random.Random,
) -> Optional["Component"]:
    """
    智能选择配件 - Smart Component Selection

    选择策略 Selection Strategy:
    1. 为后续尚未选择的类别预留预算：(total_steps - step) × 6%
    2. 没有买得起的配件时退回最便宜的一个，超预算由调用方判断
    3. 按分数降序排序，分数接近（0.1 以内）时按与目标价的距离升序
    4. 前 min(5, N) 名按指数权重随机抽取一个

    参数 Parameters:
        pool: 兼容候选池
              Compatible candidate pool
        ideal_budget: 该类别的理想预算
                      Ideal spend for this category
        remaining_budget: 整体剩余预算
                          Remaining overall budget
        category: 配件类别
                  Part category
        step: 当前步骤，从 1 开始
              Current step, 1-based
        total_steps: 总步骤数
                     Total number of steps
        rng: 随机源，测试中可固定种子
             Random source, seedable in tests

    返回 Returns:
        选中的配件；候选池为空时返回 None
        Selected part, or None for an empty pool
    """
    if not pool:
        return None

    steps_remaining = max(total_steps - step, 0)
    reserved = remaining_budget * steps_remaining * RESERVE_PER_REMAINING_STEP
    available = remaining_budget - reserved

    by_price = _by_price(pool)
    affordable = [c for c in by_price if c.price <= available]
    if not affordable:
        return by_price[0]

    target_price = min(ideal_budget, available)
    scored = [
        (score_component(c, category), abs(c.price - target_price), c)
        for c in affordable
    ]

    def _compare(a, b) -> float:
        score_diff = b[0] - a[0]
        if abs(score_diff) > SCORE_TIE_WINDOW:
            return score_diff
        return a[1] - b[1]

    scored.sort(key=cmp_to_key(_compare))

    top = scored[: min(TOP_CANDIDATES, len(scored))]
    # 排名越靠前权重越大：2^n, 2^(n-1), ..., 2
    weights = [2 ** (len(top) - index) for index in range(len(top))]
    return rng.choices([item[2] for item in top], weights=weights, k=1)[0]


def pick_minimum_viable(
    pool: Sequence["Component"],
    rng: random.Random,
    fits: Optional[Callable[["Component"], bool]] = None,
) -> Optional["Component"]:
    """
    最低成本选择 - Minimum-viable Pick

    在最便宜的 3 个配件中随机选一个。给出 fits 时，只在满足条件的几个之中
    选；3 个都不满足时，按价格顺序取池中第一个满足条件的配件，没有则返回 None。
    Random pick among the 3 cheapest. With ``fits`` the draw is restricted to
    those accepted by it; when none of the three is accepted, the cheapest
    accepted part of the whole pool is returned, or ``None``.
    """
    if not pool:
        return None
    ordered = _by_price(pool)
    cheapest = ordered[:MINIMUM_VIABLE_CHOICES]
    if fits is None:
        return rng.choice(cheapest)
    fitting = [c for c in cheapest if fits(c)]
    if fitting:
        return rng.choice(fitting)
    return next((c for c in ordered[MINIMUM_VIABLE_CHOICES:] if fits(c)), None)


def get_alternatives(
    pool: Sequence["Component"],
    selected_id: Optional[str],
    limit: int = DEFAULT_ALTERNATIVES_LIMIT,
) -> List["Component"]:
    """按价格升序返回最多 limit 个备选，排除已选配件"""
    if limit <= 0:
        return []
    return _by_price([c for c in pool if c.id != selected_id])[:limit]

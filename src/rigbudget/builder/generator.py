"""
配置生成模块 - Build Generation Module

按固定依赖顺序逐类选配，失败时依次换用更保守的预算分配表，最后退回
最低成本方案。
Fill every category in dependency order; on failure retry with more
conservative allocation tables, finally falling back to a minimum-viable
assembly.
"""

from __future__ import annotations

import logging
import math
import random
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, TYPE_CHECKING

from ..schemas import REQUIRED_CATEGORIES, Build, GenerationResult
from .budget import (
    AGGRESSIVE_ALLOCATION,
    BUDGET_OPTIMIZED_ALLOCATION,
    STANDARD_ALLOCATION,
    AllocationTable,
    allocate_budget,
    minimum_build_cost,
)
from .compatibility import check_compatibility, compatible_pool
from .picker import (
    DEFAULT_ALTERNATIVES_LIMIT,
    get_alternatives,
    pick_minimum_viable,
    select_component_smartly,
)

if TYPE_CHECKING:
    from ..schemas import CategorySet, Component

logger = logging.getLogger(__name__)


# 依赖项先于被依赖项：CPU -> 主板 -> 内存；显卡 -> 机箱；CPU + 显卡 -> 电源
SELECTION_ORDER: tuple[str, ...] = (
    "cpu",
    "motherboard",
    "ram",
    "gpu",
    "case",
    "storage",
    "psu",
    "cooler",
)


@dataclass
class AttemptOutcome:
    """单次策略尝试的结果，失败不抛异常"""
    success: bool
    build: Build = field(default_factory=Build)
    total_price: float = 0.0
    alternatives: Dict[str, List["Component"]] = field(default_factory=dict)
    error: Optional[str] = None


class AllocationStrategy:
    """按分配表选配"""

    def __init__(self, table: AllocationTable):
        self.table = table
        self.name = table.name

    def attempt(
        self,
        category_set: "CategorySet",
        budget: float,
        rng: random.Random,
        alternatives_limit: int,
    ) -> AttemptOutcome:
        ideal = allocate_budget(budget, self.table.resolve(rng))
        build = Build()
        alternatives: Dict[str, List["Component"]] = {}
        total_price = 0.0
        total_steps = len(SELECTION_ORDER)

        for step, category in enumerate(SELECTION_ORDER, start=1):
            pool = compatible_pool(category_set, category, build)
            if not pool:
                return AttemptOutcome(success=False, error=f"No compatible {category} found")

            selected = select_component_smartly(
                pool,
                ideal[category],
                budget - total_price,
                category,
                step,
                total_steps,
                rng,
            )
            if selected is None:
                return AttemptOutcome(
                    success=False, error=f"Could not select {category} within budget"
                )

            build = build.with_part(category, selected)
            alternatives[category] = get_alternatives(pool, selected.id, alternatives_limit)
            total_price += selected.price

            if round(total_price, 2) > budget:
                return AttemptOutcome(success=False, error="Budget exceeded during selection")

        return AttemptOutcome(
            success=True,
            build=build,
            total_price=round(total_price, 2),
            alternatives=alternatives,
        )


def _suffix_floors(category_set: "CategorySet") -> List[float]:
    """floors[i]：SELECTION_ORDER[i:] 各类最低价之和，不考虑兼容性"""
    floors = [0.0] * (len(SELECTION_ORDER) + 1)
    for index in range(len(SELECTION_ORDER) - 1, -1, -1):
        items = category_set.get(SELECTION_ORDER[index]) or []
        floors[index] = floors[index + 1] + min((c.price for c in items), default=0.0)
    return floors


def can_complete(
    category_set: "CategorySet",
    build: Build,
    index: int,
    spent: float,
    budget: float,
    floors: Sequence[float],
) -> bool:
    """
    从 SELECTION_ORDER[index] 起，是否还能选出一组兼容配件使总价不超预算。
    Depth-first search over compatible pools in price order, pruned by the
    per-category price floors.
    """
    if index == len(SELECTION_ORDER):
        return round(spent, 2) <= budget
    category = SELECTION_ORDER[index]
    for candidate in sorted(compatible_pool(category_set, category, build), key=lambda c: c.price):
        # 价格递增，这里超了后面的也都超
        if round(spent + candidate.price + floors[index + 1], 2) > budget:
            break
        if can_complete(
            category_set,
            build.with_part(category, candidate),
            index + 1,
            spent + candidate.price,
            budget,
            floors,
        ):
            return True
    return False


class MinimumViableStrategy:
    """最后手段：忽略分配表，每类在最便宜的几个兼容配件中随机选

    只接受之后仍能补齐整机的配件；最便宜的 3 个都补不齐时改取池中最便宜
    的可行配件，因此只要目录里存在预算内的兼容整机，这一策略就不会失败。
    """

    name = "minimum_viable"

    def attempt(
        self,
        category_set: "CategorySet",
        budget: float,
        rng: random.Random,
        alternatives_limit: int,
    ) -> AttemptOutcome:
        build = Build()
        alternatives: Dict[str, List["Component"]] = {}
        total_price = 0.0
        floors = _suffix_floors(category_set)

        for index, category in enumerate(SELECTION_ORDER):
            pool = compatible_pool(category_set, category, build)
            if not pool:
                return AttemptOutcome(success=False, error=f"No compatible {category} available")

            def fits(candidate: "Component") -> bool:
                return can_complete(
                    category_set,
                    build.with_part(category, candidate),
                    index + 1,
                    total_price + candidate.price,
                    budget,
                    floors,
                )

            selected = pick_minimum_viable(pool, rng, fits)
            if selected is None:
                return AttemptOutcome(success=False, error="Minimum build exceeds budget")

            build = build.with_part(category, selected)
            alternatives[category] = get_alternatives(pool, selected.id, alternatives_limit)
            total_price += selected.price

        return AttemptOutcome(
            success=True,
            build=build,
            total_price=round(total_price, 2),
            alternatives=alternatives,
        )


DEFAULT_STRATEGIES = (
    AllocationStrategy(STANDARD_ALLOCATION),
    AllocationStrategy(BUDGET_OPTIMIZED_ALLOCATION),
    AllocationStrategy(AGGRESSIVE_ALLOCATION),
    MinimumViableStrategy(),
)


class BuildGenerator:
    """在预算内生成一套兼容配置

    每次调用的中间状态都是局部变量，同一实例可被多个请求共用。注入的
    随机源只在加锁后为每次调用取一个种子，调用之间不共享随机状态；固定
    种子时按调用顺序可复现。
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        strategies: Sequence = DEFAULT_STRATEGIES,
        alternatives_limit: int = DEFAULT_ALTERNATIVES_LIMIT,
    ):
        self.rng = rng or random.Random()
        self._rng_lock = threading.Lock()
        self.strategies = list(strategies)
        self.alternatives_limit = alternatives_limit

    def _call_rng(self) -> random.Random:
        with self._rng_lock:
            seed = self.rng.getrandbits(64)
        return random.Random(seed)

    def generate(self, category_set: "CategorySet", budget: float) -> GenerationResult:
        minimum_cost = minimum_build_cost(category_set)

        if not math.isfinite(minimum_cost):
            missing = [c for c in REQUIRED_CATEGORIES if not category_set.get(c)]
            logger.warning("catalog incomplete, empty categories: %s", ", ".join(missing))
            return GenerationResult(
                success=False,
                budget=budget,
                error="Component inventory is incomplete. Please add more parts before generating builds.",
                minimum_required_budget=minimum_cost,
            )

        if budget < minimum_cost:
            return GenerationResult(
                success=False,
                budget=budget,
                error=(
                    f"The minimum build cost with the current inventory is ${minimum_cost:.2f}. "
                    "Increase your budget to continue."
                ),
                minimum_required_budget=minimum_cost,
            )

        rng = self._call_rng()
        for strategy in self.strategies:
            outcome = strategy.attempt(category_set, budget, rng, self.alternatives_limit)
            if outcome.success:
                logger.info(
                    "generated build with strategy %s: %.2f of %.2f",
                    strategy.name,
                    outcome.total_price,
                    budget,
                )
                return GenerationResult(
                    success=True,
                    build=outcome.build,
                    total_price=outcome.total_price,
                    budget=budget,
                    compatibility_report=check_compatibility(outcome.build),
                    alternatives=outcome.alternatives,
                    minimum_required_budget=minimum_cost,
                    strategy=strategy.name,
                )
            logger.debug("strategy %s failed: %s", strategy.name, outcome.error)

        logger.warning("all strategies exhausted for budget %.2f", budget)
        return GenerationResult(
            success=False,
            budget=budget,
            error=(
                f"Unable to generate a build within ${budget:.2f} budget. "
                f"Try increasing your budget to at least ${minimum_cost:.2f}."
            ),
            minimum_required_budget=minimum_cost,
        )

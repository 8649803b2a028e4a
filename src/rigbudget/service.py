from __future__ import annotations

import logging
from typing import List, Optional

from .builder.compatibility import check_compatibility, compatible_pool
from .builder.generator import BuildGenerator
from .builder.picker import DEFAULT_ALTERNATIVES_LIMIT, get_alternatives
from .catalog import CatalogAccessor
from .schemas import (
    REQUIRED_CATEGORIES,
    Build,
    CategorySet,
    CompatibilityReport,
    Component,
    GenerationResult,
    SwapResult,
)

logger = logging.getLogger(__name__)


def _norm(value: str) -> str:
    return value.strip().lower()


class BuildService:
    """面向调用方的入口：生成配置、检查兼容性、替换配件

    每次调用从目录取一份快照，调用之间不共享可变状态。
    """

    def __init__(
        self,
        catalog: CatalogAccessor,
        generator: BuildGenerator | None = None,
        alternatives_limit: int = DEFAULT_ALTERNATIVES_LIMIT,
    ):
        self.catalog = catalog
        self.alternatives_limit = alternatives_limit
        self.generator = generator or BuildGenerator(alternatives_limit=alternatives_limit)

    def generate_build(self, budget: float) -> GenerationResult:
        # 目录 I/O 错误直接向上抛出，这里只处理配置层面的失败
        category_set = self.catalog.fetch_all_grouped_by_category()
        result = self.generator.generate(category_set, budget)
        if not result.success:
            logger.info("build generation failed for budget %.2f: %s", budget, result.error)
        return result

    def check_compatibility(self, build: Build) -> CompatibilityReport:
        return check_compatibility(build)

    def get_alternatives(
        self,
        category: str,
        selected_id: Optional[str] = None,
        build: Build | None = None,
        limit: Optional[int] = None,
    ) -> List[Component]:
        """返回某类别的备选配件；给出 build 时只返回与其余配件兼容的"""
        if category not in REQUIRED_CATEGORIES:
            raise ValueError(f"unknown category: {category}")
        category_set = self.catalog.fetch_all_grouped_by_category()
        pool = self._pool_for(category_set, category, build)
        return get_alternatives(
            pool,
            selected_id,
            self.alternatives_limit if limit is None else limit,
        )

    def swap_component(
        self,
        build: Build,
        category: str,
        component_id: str,
        budget: Optional[float] = None,
    ) -> SwapResult:
        """替换某类别的配件并重新计算总价与兼容性报告

        不会拒绝不兼容的替换，问题写进报告由调用方展示。
        """
        if category not in REQUIRED_CATEGORIES:
            raise ValueError(f"unknown category: {category}")
        category_set = self.catalog.fetch_all_grouped_by_category()
        replacement = self._find(category_set, component_id)
        if replacement is None:
            raise LookupError(f"component not found: {component_id}")
        if replacement.type != category:
            raise ValueError(
                f"component {component_id} is a {replacement.type}, not a {category}"
            )

        updated = build.with_part(category, replacement)
        total_price = updated.total_price()
        report = check_compatibility(updated)
        logger.info(
            "swapped %s to %s, compatible=%s", category, component_id, report.compatible
        )
        return SwapResult(
            build=updated,
            total_price=total_price,
            budget=budget,
            within_budget=budget is None or total_price <= budget,
            compatibility_report=report,
            alternatives=get_alternatives(
                self._pool_for(category_set, category, updated),
                replacement.id,
                self.alternatives_limit,
            ),
        )

    def list_components(
        self,
        category: Optional[str] = None,
        min_price: float = 0,
        max_price: Optional[float] = None,
        brand: Optional[str] = None,
    ) -> List[Component]:
        """按类别、价格区间、品牌过滤配件，价格升序"""
        if category is not None and category not in REQUIRED_CATEGORIES:
            raise ValueError(f"unknown category: {category}")
        category_set = self.catalog.fetch_all_grouped_by_category()
        categories = [category] if category else list(REQUIRED_CATEGORIES)
        brand_norm = _norm(brand) if brand else ""
        items = [
            c
            for key in categories
            for c in category_set.get(key) or []
            if c.price >= min_price
            and (max_price is None or c.price <= max_price)
            and (not brand_norm or _norm(c.brand) == brand_norm)
        ]
        items.sort(key=lambda c: (c.price, c.type))
        return items

    def _pool_for(
        self,
        category_set: CategorySet,
        category: str,
        build: Build | None,
    ) -> List[Component]:
        if build is None:
            return list(category_set.get(category) or [])
        # 除去本类别本身，只按其他已选配件过滤
        return compatible_pool(category_set, category, build.with_part(category, None))

    @staticmethod
    def _find(category_set: CategorySet, component_id: str) -> Component | None:
        for items in category_set.values():
            for component in items:
                if component.id == component_id:
                    return component
        return None

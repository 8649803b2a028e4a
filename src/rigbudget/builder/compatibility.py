"""兼容性检查模块"""

from __future__ import annotations

import math
from typing import List, Optional, TYPE_CHECKING

from ..schemas import CompatibilityReport

if TYPE_CHECKING:
    from ..schemas import Build, CategorySet, Component


# 其余配件（主板、内存、硬盘、风扇）的基础功耗
BASELINE_DRAW_WATTS = 100
# 选配电源时的余量，预算紧张时放宽
SELECTION_PSU_HEADROOM = 1.2
# 报告中的推荐余量，与选配余量刻意区分
REPORT_PSU_HEADROOM = 1.3
# 机箱未标注显卡限长时的默认值
DEFAULT_MAX_GPU_LENGTH_MM = 400


def _tdp(part: Optional["Component"]) -> int:
    if part is None:
        return 0
    return part.specs.tdp or 0


def _gpu_length(gpu: "Component") -> int:
    return gpu.specs.length or 0


def _max_gpu_length(case: "Component") -> int:
    return case.specs.max_gpu_length or DEFAULT_MAX_GPU_LENGTH_MM


def estimate_system_tdp(cpu: Optional["Component"], gpu: Optional["Component"]) -> int:
    """估算整机功耗：CPU + 显卡 + 100W 基础功耗"""
    return _tdp(cpu) + _tdp(gpu) + BASELINE_DRAW_WATTS


def required_psu_wattage(
    cpu: Optional["Component"],
    gpu: Optional["Component"],
    headroom: float = SELECTION_PSU_HEADROOM,
) -> int:
    """按余量计算电源最低功率"""
    # 先消除浮点误差，避免 400 * 1.3 向上取整成 521
    return math.ceil(round(estimate_system_tdp(cpu, gpu) * headroom, 6))


def compatible_pool(
    category_set: "CategorySet",
    category: str,
    build: "Build",
) -> List["Component"]:
    """根据已选配件过滤某类别的候选池

    只在前置配件已选时才过滤，否则原样返回整个类别。

    Args:
        category_set: 按类别分组的目录快照
        category: 待选类别
        build: 当前已选的部分配置

    Returns:
        兼容的候选列表，可能为空
    """
    pool = list(category_set.get(category) or [])

    if category == "motherboard":
        if build.cpu:
            return [mb for mb in pool if mb.specs.socket == build.cpu.specs.socket]
        return pool

    if category == "ram":
        if build.motherboard:
            return [ram for ram in pool if ram.specs.type == build.motherboard.specs.ram_type]
        return pool

    if category == "case":
        if build.gpu:
            gpu_length = _gpu_length(build.gpu)
            return [c for c in pool if _max_gpu_length(c) >= gpu_length]
        return pool

    if category == "psu":
        if build.cpu and build.gpu:
            needed = required_psu_wattage(build.cpu, build.gpu)
            return [psu for psu in pool if (psu.specs.wattage or 0) >= needed]
        return pool

    if category == "cooler":
        if build.cpu:
            socket = build.cpu.specs.socket
            return [c for c in pool if socket in c.specs.socket_support]
        return pool

    return pool


def check_compatibility(build: "Build") -> CompatibilityReport:
    """检查整机兼容性

    只检查已存在的配件组合，部分配置也可以检查。issues 为硬性问题，
    warnings 为风险提示。

    Args:
        build: 配置方案（生成的或手动替换过的）

    Returns:
        兼容性报告
    """
    issues: List[str] = []
    warnings: List[str] = []
    cpu, gpu = build.cpu, build.gpu

    # 1. CPU 与主板插槽
    if cpu and build.motherboard:
        if cpu.specs.socket != build.motherboard.specs.socket:
            issues.append("CPU socket does not match motherboard socket")

    # 2. 内存代数与主板
    if build.ram and build.motherboard:
        if build.ram.specs.type != build.motherboard.specs.ram_type:
            issues.append("RAM type does not match motherboard")

    # 3. 显卡长度与机箱
    if gpu and build.case:
        gpu_length = _gpu_length(gpu)
        max_length = _max_gpu_length(build.case)
        if gpu_length > max_length:
            issues.append(f"GPU ({gpu_length}mm) does not fit in case (max {max_length}mm)")

    # 4. 电源功率
    total_tdp = estimate_system_tdp(cpu, gpu)
    recommended = required_psu_wattage(cpu, gpu, REPORT_PSU_HEADROOM)
    if cpu and gpu and build.psu:
        psu_wattage = build.psu.specs.wattage or 0
        if psu_wattage < total_tdp:
            issues.append(
                f"PSU wattage ({psu_wattage}W) is insufficient for system TDP ({total_tdp}W)"
            )
        elif psu_wattage < recommended:
            warnings.append(
                f"PSU wattage ({psu_wattage}W) is lower than recommended ({recommended}W)"
            )

    # 5. 散热器插槽与解热能力
    if build.cooler and cpu:
        if cpu.specs.socket not in build.cooler.specs.socket_support:
            issues.append("Cooler does not support CPU socket")
        cooler_rating = build.cooler.specs.tdp_rating or 0
        cpu_tdp = _tdp(cpu)
        if cooler_rating < cpu_tdp:
            warnings.append(
                f"Cooler TDP rating ({cooler_rating}W) is lower than CPU TDP ({cpu_tdp}W)"
            )

    return CompatibilityReport(
        compatible=not issues,
        issues=issues,
        warnings=warnings,
        total_tdp=total_tdp,
        recommended_psu=recommended,
    )

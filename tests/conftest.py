import pytest

from rigbudget.catalog import InMemoryCatalog, group_by_category
from rigbudget.schemas import Build, Component


def part(part_id, category, price, **specs):
    return Component(
        id=part_id,
        type=category,
        name=part_id.upper(),
        brand=specs.pop("brand", "Generic"),
        price=price,
        specs=specs,
    )


def cheap_catalog():
    """Cheapest part per category sums to 150."""
    return [
        part("cpu-a", "cpu", 30, cores=4, threads=8, boost_clock=4.0, socket="AM4", tdp=65),
        part("cpu-b", "cpu", 60, cores=6, threads=12, boost_clock=4.4, socket="AM4", tdp=65),
        part("mb-a", "motherboard", 25, socket="AM4", ram_type="DDR4"),
        part("mb-b", "motherboard", 40, socket="AM4", ram_type="DDR4"),
        part("ram-a", "ram", 15, type="DDR4", capacity=8, speed=3200),
        part("ram-b", "ram", 30, type="DDR4", capacity=16, speed=3200),
        part("gpu-a", "gpu", 40, vram=4, tdp=75, length=200),
        part("gpu-b", "gpu", 90, vram=8, tdp=130, length=250),
        part("ssd-a", "storage", 10, capacity=256, read_speed=500),
        part("ssd-b", "storage", 25, capacity=512, read_speed=3500),
        part("case-a", "case", 10, max_gpu_length=300),
        part("case-b", "case", 20, max_gpu_length=380),
        part("psu-a", "psu", 15, wattage=600, efficiency="80+ Bronze"),
        part("psu-b", "psu", 35, wattage=750, efficiency="80+ Gold"),
        part("cooler-a", "cooler", 5, socket_support=["AM4", "AM5"], tdp_rating=95),
        part("cooler-b", "cooler", 12, socket_support=["AM4"], tdp_rating=150),
    ]


def compatible_catalog():
    """Every combination is compatible; four parts per category, integer prices."""
    components = []
    for i in range(4):
        step = i + 1
        components += [
            part(f"cpu-{i}", "cpu", 80 * step, cores=4 + 2 * i, threads=8 + 4 * i, boost_clock=4.0, socket="AM5", tdp=65),
            part(f"mb-{i}", "motherboard", 60 * step, socket="AM5", ram_type="DDR5"),
            part(f"ram-{i}", "ram", 30 * step, type="DDR5", capacity=16 * step, speed=5200),
            part(f"gpu-{i}", "gpu", 150 * step, vram=8 * step, tdp=150, length=250),
            part(f"ssd-{i}", "storage", 25 * step, capacity=500 * step, read_speed=3500),
            part(f"case-{i}", "case", 40 * step, max_gpu_length=360),
            part(f"psu-{i}", "psu", 45 * step, wattage=850, efficiency="80+ Gold"),
            part(f"cooler-{i}", "cooler", 20 * step, socket_support=["AM5"], tdp_rating=200),
        ]
    return components


def full_build(**overrides):
    parts = {
        "cpu": part("cpu", "cpu", 200, socket="AM5", tdp=65),
        "motherboard": part("mb", "motherboard", 150, socket="AM5", ram_type="DDR5"),
        "ram": part("ram", "ram", 90, type="DDR5", capacity=32, speed=6000),
        "gpu": part("gpu", "gpu", 500, vram=12, tdp=220, length=300),
        "storage": part("ssd", "storage", 80, capacity=1000, read_speed=7000),
        "case": part("case", "case", 90, max_gpu_length=360),
        "psu": part("psu", "psu", 100, wattage=750, efficiency="80+ Gold"),
        "cooler": part("cooler", "cooler", 35, socket_support=["AM4", "AM5"], tdp_rating=200),
    }
    parts.update(overrides)
    return Build(**parts)


@pytest.fixture
def cheap_set():
    return group_by_category(cheap_catalog())


@pytest.fixture
def compatible_set():
    return group_by_category(compatible_catalog())


@pytest.fixture
def compatible_store():
    return InMemoryCatalog(compatible_catalog())

from conftest import full_build, part

from rigbudget.builder.compatibility import (
    check_compatibility,
    compatible_pool,
    required_psu_wattage,
)
from rigbudget.catalog import group_by_category
from rigbudget.schemas import Build


def test_motherboard_pool_empty_when_no_socket_matches():
    category_set = group_by_category([
        part("mb-1", "motherboard", 120, socket="LGA1700", ram_type="DDR5"),
        part("mb-2", "motherboard", 150, socket="LGA1700", ram_type="DDR4"),
    ])
    build = Build(cpu=part("cpu", "cpu", 150, socket="AM4", tdp=65))

    assert compatible_pool(category_set, "motherboard", build) == []


def test_pool_unfiltered_without_prerequisite():
    boards = [
        part("mb-1", "motherboard", 120, socket="LGA1700"),
        part("mb-2", "motherboard", 150, socket="AM5"),
    ]
    pool = compatible_pool(group_by_category(boards), "motherboard", Build())

    assert [p.id for p in pool] == ["mb-1", "mb-2"]


def test_ram_pool_matches_motherboard_ram_type():
    category_set = group_by_category([
        part("ram-4", "ram", 40, type="DDR4"),
        part("ram-5", "ram", 90, type="DDR5"),
    ])
    build = Build(motherboard=part("mb", "motherboard", 150, socket="AM5", ram_type="DDR5"))

    assert [p.id for p in compatible_pool(category_set, "ram", build)] == ["ram-5"]


def test_case_pool_excludes_cases_shorter_than_gpu():
    category_set = group_by_category([
        part("case-300", "case", 60, max_gpu_length=300),
        part("case-400", "case", 80, max_gpu_length=400),
        part("case-unknown", "case", 70),
    ])
    build = Build(gpu=part("gpu", "gpu", 400, length=350, tdp=200))

    ids = [p.id for p in compatible_pool(category_set, "case", build)]

    assert "case-300" not in ids
    assert set(ids) == {"case-400", "case-unknown"}


def test_psu_pool_requires_twenty_percent_headroom():
    cpu = part("cpu", "cpu", 200, socket="AM5", tdp=65)
    gpu = part("gpu", "gpu", 500, tdp=220)
    category_set = group_by_category([
        part("psu-450", "psu", 50, wattage=450),
        part("psu-462", "psu", 55, wattage=462),
        part("psu-650", "psu", 80, wattage=650),
    ])

    pool = compatible_pool(category_set, "psu", Build(cpu=cpu, gpu=gpu))

    assert required_psu_wattage(cpu, gpu) == 462
    assert [p.id for p in pool] == ["psu-462", "psu-650"]


def test_psu_pool_unfiltered_until_cpu_and_gpu_chosen():
    category_set = group_by_category([part("psu-300", "psu", 30, wattage=300)])
    build = Build(cpu=part("cpu", "cpu", 200, socket="AM5", tdp=125))

    assert len(compatible_pool(category_set, "psu", build)) == 1


def test_cooler_pool_requires_socket_support():
    category_set = group_by_category([
        part("cooler-am4", "cooler", 20, socket_support=["AM4"]),
        part("cooler-multi", "cooler", 35, socket_support="AM4, AM5, LGA1700"),
    ])
    build = Build(cpu=part("cpu", "cpu", 200, socket="LGA1700", tdp=65))

    assert [p.id for p in compatible_pool(category_set, "cooler", build)] == ["cooler-multi"]


def test_report_psu_below_recommended_is_warning_only():
    build = full_build(
        cpu=part("cpu", "cpu", 200, socket="AM5", tdp=65),
        gpu=part("gpu", "gpu", 500, tdp=220, length=300),
        psu=part("psu", "psu", 50, wattage=450),
    )

    report = check_compatibility(build)

    assert report.total_tdp == 385
    assert report.recommended_psu == 501
    assert report.issues == []
    assert len(report.warnings) == 1
    assert "lower than recommended (501W)" in report.warnings[0]
    assert report.compatible is True


def test_report_psu_below_system_tdp_is_issue():
    build = full_build(psu=part("psu", "psu", 30, wattage=300))

    report = check_compatibility(build)

    assert report.compatible is False
    assert any("insufficient for system TDP (385W)" in i for i in report.issues)


def test_report_collects_hard_issues():
    build = full_build(
        motherboard=part("mb", "motherboard", 150, socket="LGA1700", ram_type="DDR4"),
        case=part("case", "case", 60, max_gpu_length=280),
        cooler=part("cooler", "cooler", 20, socket_support=["AM4"], tdp_rating=200),
    )

    report = check_compatibility(build)

    assert report.compatible is False
    assert "CPU socket does not match motherboard socket" in report.issues
    assert "RAM type does not match motherboard" in report.issues
    assert "GPU (300mm) does not fit in case (max 280mm)" in report.issues
    assert "Cooler does not support CPU socket" in report.issues


def test_report_weak_cooler_is_warning():
    build = full_build(
        cpu=part("cpu", "cpu", 300, socket="AM5", tdp=170),
        cooler=part("cooler", "cooler", 20, socket_support=["AM5"], tdp_rating=120),
        psu=part("psu", "psu", 120, wattage=850),
    )

    report = check_compatibility(build)

    assert report.compatible is True
    assert report.warnings == ["Cooler TDP rating (120W) is lower than CPU TDP (170W)"]


def test_compatible_iff_no_issues():
    for build in (full_build(), full_build(psu=part("psu", "psu", 30, wattage=200))):
        report = check_compatibility(build)
        assert report.compatible == (len(report.issues) == 0)


def test_report_is_idempotent():
    build = full_build(psu=part("psu", "psu", 50, wattage=450))

    assert check_compatibility(build) == check_compatibility(build)


def test_report_on_partial_build_still_has_power_metrics():
    report = check_compatibility(Build(cpu=part("cpu", "cpu", 200, socket="AM5", tdp=65)))

    assert report.compatible is True
    assert report.total_tdp == 165
    assert report.recommended_psu == 215

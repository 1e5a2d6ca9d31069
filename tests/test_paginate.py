import pytest

from conftest import make_entry
from layout.paginate import education_weight, entry_weight, estimated_lines, paginate, paginate_result
from schemas import ExperienceEntry, PaginationConfig

EDU = ["TESOL Certificate, ABC Institute (2019)"]


def flatten(pages):
    return [paged.entry for page in pages for paged in page.entries]


def test_estimated_lines():
    assert estimated_lines("", 75) == 1
    assert estimated_lines("a" * 75, 75) == 1
    assert estimated_lines("a" * 76, 75) == 2
    assert estimated_lines("a" * 160, 75) == 3


def test_entry_weight_counts_wrapped_lines():
    cfg = PaginationConfig()
    entry = make_entry(n_points=3, point_len=80)
    assert entry_weight(entry, cfg) == 12 + 3 * 2 * 6


def test_entry_without_points_still_costs_a_line():
    cfg = PaginationConfig()
    entry = ExperienceEntry(title="Teacher", company="X", period="2020", points=[])
    assert entry_weight(entry, cfg) == 12 + 6


def test_education_weight():
    cfg = PaginationConfig()
    assert education_weight([], cfg) == 0
    assert education_weight(EDU * 3, cfg) == 20 + 3 * 5


def test_scenario_a_fits_on_one_page():
    experience = [make_entry(n_points=2, point_len=60) for _ in range(3)]
    pages = paginate(EDU, experience)
    assert len(pages) == 1
    assert pages[0].show_education is True
    assert flatten(pages) == experience


def test_scenario_b_spills_over_preserving_order():
    experience = [make_entry(n_points=3, point_len=80, title=f"Role {i}") for i in range(8)]
    pages = paginate(EDU, experience)

    assert len(pages) >= 2
    assert pages[0].show_education is True
    assert all(not p.show_education for p in pages[1:])
    assert [e.title for e in flatten(pages)] == [f"Role {i}" for i in range(8)]
    # 25 + 3 * 48 fits the first page, a fourth entry does not
    assert len(pages[0].entries) == 3
    assert len(pages[1].entries) == 4


def test_scenario_c_empty_input_gives_one_blank_page():
    pages = paginate([], [])
    assert len(pages) == 1
    assert pages[0].entries == []
    assert pages[0].show_education is False


def test_empty_experience_with_education_shows_education():
    pages = paginate(EDU, [])
    assert len(pages) == 1
    assert pages[0].show_education is True


def test_scenario_d_oversized_entry_is_not_dropped():
    big = make_entry(n_points=50, point_len=100)
    pages = paginate(EDU, [big])
    assert len(pages) == 1
    assert pages[0].entries[0].entry.points == big.points


def test_oversized_entry_between_small_ones_gets_own_page():
    experience = [make_entry(), make_entry(n_points=50, point_len=100), make_entry()]
    pages = paginate(EDU, experience)
    assert [len(p.entries) for p in pages] == [1, 1, 1]
    assert flatten(pages) == experience


def test_no_education_never_flagged():
    experience = [make_entry(n_points=3, point_len=80) for _ in range(8)]
    pages = paginate([], experience)
    assert not any(p.show_education for p in pages)


def test_indexes_point_back_into_source_list():
    experience = [make_entry(n_points=3, point_len=80, title=f"Role {i}") for i in range(8)]
    pages = paginate(EDU, experience)
    indexes = [paged.index for page in pages for paged in page.entries]
    assert indexes == list(range(8))
    assert [p.page_index for p in pages] == list(range(len(pages)))


@pytest.mark.parametrize("count", [1, 2, 5, 13, 40])
def test_coverage_and_single_education(count):
    experience = [make_entry(n_points=(i % 4) + 1, point_len=30 + 17 * i) for i in range(count)]
    pages = paginate(EDU, experience)
    assert flatten(pages) == experience
    assert sum(p.show_education for p in pages) == 1
    assert pages[0].show_education


def test_deterministic():
    experience = [make_entry(n_points=(i % 5) + 1, point_len=20 * i + 5) for i in range(12)]
    first = paginate(EDU, experience)
    second = paginate(EDU, experience)
    assert [p.model_dump() for p in first] == [p.model_dump() for p in second]


def test_custom_config_changes_density():
    experience = [make_entry(n_points=2, point_len=60) for _ in range(3)]
    tight = PaginationConfig(page_one_limit=40, other_page_limit=40)
    assert len(paginate(EDU, experience, tight)) == 3


def test_paginate_result(result):
    pages = paginate_result(result)
    assert len(pages) == 1
    assert flatten(pages) == result.experience

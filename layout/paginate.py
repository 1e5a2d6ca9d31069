import math
from typing import List, Optional, Sequence

from schemas import CVResult, ExperienceEntry, Page, PagedEntry, PaginationConfig


def estimated_lines(point: str, chars_per_line: int) -> int:
    """Rendered lines a bullet is expected to wrap to (at least one)."""
    return max(1, math.ceil(len(point) / chars_per_line))


def entry_weight(entry: ExperienceEntry, config: PaginationConfig) -> float:
    if not entry.points:
        # header still takes a line of space
        return config.experience_header_weight + config.line_weight
    lines = sum(estimated_lines(p, config.chars_per_line) for p in entry.points)
    return config.experience_header_weight + lines * config.line_weight


def education_weight(education: Sequence[str], config: PaginationConfig) -> float:
    if not education:
        return 0
    return config.education_header_weight + len(education) * config.education_line_weight


def paginate(
    education: Sequence[str],
    experience: Sequence[ExperienceEntry],
    config: Optional[PaginationConfig] = None,
) -> List[Page]:
    """
    Split experience entries into template pages by estimated height.

    Greedy forward fill: an entry goes on the current page unless it would push
    the page over its limit and the page already holds something. Entries are
    never split, so an oversized entry gets a page to itself. Education is
    drawn on the first page only. Always returns at least one page.
    """
    config = config or PaginationConfig()
    pages: List[Page] = []

    current: List[PagedEntry] = []
    current_weight = education_weight(education, config)
    is_first_page = True
    has_education = bool(education)

    for idx, entry in enumerate(experience):
        weight = entry_weight(entry, config)
        limit = config.page_one_limit if is_first_page else config.other_page_limit

        if current_weight + weight > limit and current:
            pages.append(Page(page_index=len(pages), show_education=is_first_page and has_education, entries=current))
            current = [PagedEntry(index=idx, entry=entry)]
            current_weight = weight
            is_first_page = False
        else:
            current.append(PagedEntry(index=idx, entry=entry))
            current_weight += weight

    if current:
        pages.append(Page(page_index=len(pages), show_education=is_first_page and has_education, entries=current))

    if not pages:
        pages.append(Page(page_index=0, show_education=has_education, entries=[]))

    return pages


def paginate_result(result: CVResult, config: Optional[PaginationConfig] = None) -> List[Page]:
    return paginate(result.education, result.experience, config)

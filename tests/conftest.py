import pytest
import fitz

from schemas import CVResult, ExperienceEntry, SidebarInfo


def make_entry(n_points=2, point_len=40, title="ESL Teacher", company="ABC School", period="2020 - 2022"):
    return ExperienceEntry(
        title=title,
        company=company,
        period=period,
        points=["x" * point_len for _ in range(n_points)],
    )


def make_result(**overrides) -> CVResult:
    data = dict(
        match_score=82,
        sidebar_info=SidebarInfo(name="Jane Doe", nationality="British", gender="Female"),
        education=["TESOL Certificate, ABC Institute (2019)", "BA English, University of Leeds (2017)"],
        experience=[
            ExperienceEntry(
                title="ESL Teacher",
                company="ILA Vietnam",
                period="2021 - Present",
                points=["Taught young learners aged 6-12", "Planned CEFR-aligned lessons"],
            ),
            ExperienceEntry(
                title="English Tutor",
                company="Freelance",
                period="2019 - 2021",
                points=["One-to-one IELTS preparation"],
            ),
        ],
        optimized_cv="JANE DOE\nESL Teacher",
        key_changes=["Reordered experience"],
        suggested_keywords=["TESOL"],
        missing_skills=["IELTS examiner"],
        strengths=["Young learners"],
    )
    data.update(overrides)
    return CVResult(**data)


@pytest.fixture
def result() -> CVResult:
    return make_result()


@pytest.fixture
def png_bytes() -> bytes:
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, 8, 8), False)
    pix.clear_with(200)
    return pix.tobytes("png")

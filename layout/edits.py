"""
Edit operations on a CVResult.

Every function returns a new CVResult and leaves its argument untouched, so a
caller can hold on to the previous version (undo, failed refine, ...).
"""
from typing import Optional

from schemas import CVResult, EditOp, ExperienceEntry

SIDEBAR_FIELDS = ("name", "nationality", "gender")
EXPERIENCE_FIELDS = ("title", "company", "period")


def _copy(result: CVResult) -> CVResult:
    return result.model_copy(deep=True)


def _check_index(items, index: int, what: str) -> None:
    if index < 0 or index >= len(items):
        raise IndexError(f"{what} index {index} out of range (0..{len(items) - 1})")


def update_sidebar(result: CVResult, field: str, value: str) -> CVResult:
    if field not in SIDEBAR_FIELDS:
        raise ValueError(f"Unknown sidebar field: {field}")
    new = _copy(result)
    setattr(new.sidebar_info, field, value)
    return new


def update_education(result: CVResult, index: int, text: str) -> CVResult:
    _check_index(result.education, index, "Education")
    new = _copy(result)
    new.education[index] = text
    return new


def add_education(result: CVResult, text: str = "") -> CVResult:
    new = _copy(result)
    new.education.append(text)
    return new


def delete_education(result: CVResult, index: int) -> CVResult:
    _check_index(result.education, index, "Education")
    new = _copy(result)
    del new.education[index]
    return new


def update_experience(result: CVResult, index: int, field: str, value: str) -> CVResult:
    if field not in EXPERIENCE_FIELDS:
        raise ValueError(f"Unknown experience field: {field}")
    _check_index(result.experience, index, "Experience")
    new = _copy(result)
    setattr(new.experience[index], field, value)
    return new


def add_experience(result: CVResult, entry: Optional[ExperienceEntry] = None) -> CVResult:
    new = _copy(result)
    if entry is None:
        entry = ExperienceEntry(title="New position", company="Company", period="Year - Year", points=[""])
    new.experience.append(entry.model_copy(deep=True))
    return new


def delete_experience(result: CVResult, index: int) -> CVResult:
    _check_index(result.experience, index, "Experience")
    new = _copy(result)
    del new.experience[index]
    return new


def update_point(result: CVResult, exp_index: int, point_index: int, text: str) -> CVResult:
    """Replace a bullet's text. A blank bullet is removed instead."""
    _check_index(result.experience, exp_index, "Experience")
    _check_index(result.experience[exp_index].points, point_index, "Bullet")
    if not text.strip():
        return delete_point(result, exp_index, point_index)
    new = _copy(result)
    new.experience[exp_index].points[point_index] = text
    return new


def add_point(result: CVResult, exp_index: int, text: str = "") -> CVResult:
    _check_index(result.experience, exp_index, "Experience")
    new = _copy(result)
    new.experience[exp_index].points.append(text)
    return new


def delete_point(result: CVResult, exp_index: int, point_index: int) -> CVResult:
    _check_index(result.experience, exp_index, "Experience")
    _check_index(result.experience[exp_index].points, point_index, "Bullet")
    new = _copy(result)
    del new.experience[exp_index].points[point_index]
    return new


def _require(value, name: str, op: str):
    if value is None:
        raise ValueError(f"'{name}' is required for {op}")
    return value


def apply_edit(result: CVResult, edit: EditOp) -> CVResult:
    """Dispatch a serialized edit to the matching function."""
    op = edit.op
    text = edit.text if edit.text is not None else ""

    if op == "update_sidebar":
        return update_sidebar(result, _require(edit.field, "field", op), text)
    if op == "update_education":
        return update_education(result, _require(edit.index, "index", op), text)
    if op == "add_education":
        return add_education(result, text)
    if op == "delete_education":
        return delete_education(result, _require(edit.index, "index", op))
    if op == "update_experience":
        return update_experience(
            result, _require(edit.index, "index", op), _require(edit.field, "field", op), text
        )
    if op == "add_experience":
        return add_experience(result)
    if op == "delete_experience":
        return delete_experience(result, _require(edit.index, "index", op))
    if op == "update_point":
        return update_point(
            result, _require(edit.index, "index", op), _require(edit.point_index, "point_index", op), text
        )
    if op == "add_point":
        return add_point(result, _require(edit.index, "index", op), text)
    if op == "delete_point":
        return delete_point(
            result, _require(edit.index, "index", op), _require(edit.point_index, "point_index", op)
        )
    raise ValueError(f"Unknown edit operation: {op}")

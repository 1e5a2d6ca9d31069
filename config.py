import os
import logging
from dotenv import load_dotenv

load_dotenv()

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-pro")
GEMINI_IMAGE_MODEL = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image")
GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_TIMEOUT = float(os.getenv("GEMINI_TIMEOUT", "120"))

EXPORT_DPI = int(os.getenv("EXPORT_DPI", "200"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Env name -> PaginationConfig field
PAGINATION_ENV = {
    "PAGINATION_PAGE_ONE_LIMIT": "page_one_limit",
    "PAGINATION_OTHER_PAGE_LIMIT": "other_page_limit",
    "PAGINATION_EXPERIENCE_HEADER_WEIGHT": "experience_header_weight",
    "PAGINATION_LINE_WEIGHT": "line_weight",
    "PAGINATION_CHARS_PER_LINE": "chars_per_line",
    "PAGINATION_EDUCATION_HEADER_WEIGHT": "education_header_weight",
    "PAGINATION_EDUCATION_LINE_WEIGHT": "education_line_weight",
}


def pagination_overrides() -> dict:
    """Collect pagination weights set in the environment."""
    overrides = {}
    for env_name, field in PAGINATION_ENV.items():
        raw = os.getenv(env_name)
        if raw:
            overrides[field] = float(raw)
    return overrides


def setup_logging(level: str = None) -> None:
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

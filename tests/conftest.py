"""Pytest configuration and shared fixtures for EnrichHub.

An optional .enrich_env at the repository root is loaded before the package
is imported, so local overrides (LOG_LEVEL, ENRICH_*) apply to the whole run.
"""

from pathlib import Path

from dotenv import load_dotenv

_ENRICH_ENV_FILE = Path(__file__).parent.parent / ".enrich_env"
if _ENRICH_ENV_FILE.exists():
    load_dotenv(_ENRICH_ENV_FILE, override=True)

import json
from typing import List

import pytest

from enrich_hub.config.settings import Settings
from enrich_hub.domain.company_enrichment.models import CompanyRecord


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from .env files and ENRICH_* variables."""
    return Settings(_env_file=None, row_ceiling=100, progress_interval=2, max_workers=1)


@pytest.fixture
def companies() -> List[CompanyRecord]:
    return [
        CompanyRecord.model_validate(
            {
                "domain": "x.com",
                "name": "X Jewelry",
                "email": "hello@x.com",
                "phone": 5551234,
                "summary": {
                    "company_summary": "Handmade jewelry studio",
                    "company_industry": "Jewelry",
                    "sales_opener_sentence": "Loved your new ring collection!",
                    "classification": "QUALIFIED",
                    "confidence_score": 0.9,
                    "product_types": ["rings", "necklaces", "bracelets"],
                    "sales_action": "PROCEED",
                },
            }
        ),
        CompanyRecord.model_validate(
            {
                "domain": "https://www.y.com/",
                "name": "Y Goods",
                "social_handle": "@ygoods",
                "summary": {
                    "profile_summary": "General goods retailer",
                    "profile_industry": "Retail",
                    "confidence_score": 7.0,
                    "product_types": ["mugs"],
                },
            }
        ),
        CompanyRecord.model_validate({"domain": "z.com", "name": "Z without summary"}),
        CompanyRecord.model_validate({"name": "No domain"}),
    ]


@pytest.fixture
def companies_file(tmp_path: Path, companies: List[CompanyRecord]) -> Path:
    path = tmp_path / "companies.json"
    payload = [c.model_dump(exclude_none=True) for c in companies]
    path.write_text(json.dumps({"companies": payload}), encoding="utf-8")
    return path


@pytest.fixture
def leads_csv() -> str:
    return (
        "Name,Email,Notes\n"
        "Ann,a@x.com,\"likes rings, gold\"\n"
        "Bob,https://y.com/page,\n"
        "Cid,,\"said \"\"call later\"\"\"\n"
    )

"""Pydantic models for the JSON payloads served by the portfolio API.

Field names are snake_case; the wire format is camelCase, handled by the
shared alias generator. Unknown keys are ignored so the API can grow fields
without breaking older terminals.
"""

from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DataSource = Literal["supabase", "fallback"]


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class SourceMeta(ApiModel):
    source: DataSource


class BioFieldItem(ApiModel):
    kind: Literal["field"]
    label: str
    value: str


class BioBulletItem(ApiModel):
    kind: Literal["bullet"]
    text: str


class BioSection(ApiModel):
    title: str
    items: List[Union[BioFieldItem, BioBulletItem]] = Field(default_factory=list)


class BioSnapshot(ApiModel):
    sections: List[BioSection] = Field(default_factory=list)
    updated_at: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    raw_body: Optional[str] = None


class CvMetadata(ApiModel):
    download_url: Optional[str] = None
    file_name: str = ""
    last_updated: Optional[str] = None
    file_size_bytes: Optional[float] = None
    checksum: Optional[str] = None


class LinkRecord(ApiModel):
    id: str
    category: Literal["social", "site", "other"]
    label: str
    url: str
    order: Optional[float] = None


class LinksResponse(ApiModel):
    links: List[LinkRecord]
    meta: Optional[SourceMeta] = None


class ProjectAction(ApiModel):
    kind: Literal["internal", "external"]
    href: str
    label: str


class ProjectSummary(ApiModel):
    id: str
    slug: Optional[str]
    title: str
    blurb: str
    tags: List[str]
    actions: List[ProjectAction]
    has_case_study: Optional[bool] = None
    updated_at: Optional[str] = None


class ProjectsResponse(ApiModel):
    projects: List[ProjectSummary]


class WritingSummary(ApiModel):
    id: str
    slug: str
    title: str
    subtitle: Optional[str]
    published_at: Optional[str] = None


class WritingListResponse(ApiModel):
    articles: List[WritingSummary]
    meta: SourceMeta


class InvestmentRecord(ApiModel):
    id: str
    ticker: str
    label: Optional[str]
    order: float
    provider: Literal["stooq", "alphavantage"]
    provider_symbol: Optional[str]
    perf6m_percent: Optional[float] = Field(alias="perf6mPercent")
    perf_last_fetched: Optional[str]
    source: Literal["cache", "stooq", "alphavantage", "missing"]


class InvestmentResponse(ApiModel):
    investments: List[InvestmentRecord]


class CurrentlySection(ApiModel):
    title: str
    items: List[str] = Field(default_factory=list)


class CurrentlySnapshot(ApiModel):
    sections: List[CurrentlySection] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    updated_at: Optional[str] = None
    raw_body: Optional[str] = None


class ContactInfo(ApiModel):
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    phone: Optional[str] = None
    discord: Optional[str] = None


class ReelItem(ApiModel):
    id: str
    url: str
    order: float
    caption: Optional[str] = None


class ReelResponse(ApiModel):
    images: List[ReelItem]
    meta: Optional[SourceMeta] = None

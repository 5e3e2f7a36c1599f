from typing import List, Optional

from pydantic import Field

from thesislens.schemas.article import CamelModel


class SynthesisRequest(CamelModel):
    tag: Optional[str] = Field(None, description="Restrict the synthesis to one tag; all articles when omitted")


class ReportResponse(CamelModel):
    kind: str = Field(..., description="'synthesis' or 'comparative'")
    report: str
    error: Optional[str] = Field(None, description="Error tag when the report is the fallback text")


class ReportsResponse(CamelModel):
    synth_report: Optional[str] = None
    comp_report: Optional[str] = None


class BibliographyResponse(CamelModel):
    entries: List[str]

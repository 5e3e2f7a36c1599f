from typing import Optional

from thesislens.schemas.article import CamelModel
from thesislens.schemas.workspace import TaxonomyMode


class ThesisUpdate(CamelModel):
    user_guide: Optional[str] = None
    taxonomy_mode: Optional[TaxonomyMode] = None


class ThesisResponse(CamelModel):
    user_guide: str
    taxonomy_mode: TaxonomyMode

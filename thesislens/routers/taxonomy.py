from fastapi import APIRouter, HTTPException, status

from thesislens.dependencies import ControllerDep
from thesislens.schemas.api.articles import TagRequest
from thesislens.schemas.api.taxonomy import TagCount, TagDeleteResponse, TaxonomyResponse, TopicsResponse

router = APIRouter(prefix="/taxonomy", tags=["taxonomy"])


def _taxonomy(controller) -> TaxonomyResponse:
    counts = controller.store.tag_counts()
    return TaxonomyResponse(tags=[TagCount(tag=t, count=c) for t, c in counts.items()])


@router.get("/", response_model=TaxonomyResponse)
def get_taxonomy(controller: ControllerDep):
    """Taxonomy tags with the number of articles carrying each."""
    return _taxonomy(controller)


@router.post("/", response_model=TaxonomyResponse, status_code=status.HTTP_201_CREATED)
def create_tag(body: TagRequest, controller: ControllerDep):
    if not controller.store.add_taxonomy_tag(body.tag):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Tag '{body.tag}' already exists")
    return _taxonomy(controller)


@router.delete("/{tag:path}", response_model=TagDeleteResponse)
def delete_tag(tag: str, controller: ControllerDep):
    """Remove the tag from the taxonomy and from every article."""
    if tag not in controller.store.taxonomy and tag not in controller.store.unique_tags():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Tag '{tag}' not found")
    affected = controller.store.delete_tag(tag)
    return TagDeleteResponse(tag=tag, articles_affected=affected)


@router.get("/topics", response_model=TopicsResponse)
def get_topics(controller: ControllerDep):
    return TopicsResponse(topics=controller.store.unique_tags())

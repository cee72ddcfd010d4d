from fastapi import APIRouter, Depends

from toonshelf.adapters.sqlite.repos import SQLiteTagRepo
from toonshelf.api.deps import get_tag_repo
from toonshelf.api.errors import to_http_exception
from toonshelf.api.schemas import TagResponse
from toonshelf.domain.errors import DomainError

router = APIRouter()


@router.get("", response_model=list[TagResponse])
def list_tags(repo: SQLiteTagRepo = Depends(get_tag_repo)) -> list[TagResponse]:
    try:
        tags = repo.list_all()
    except DomainError as e:
        raise to_http_exception(e) from e
    return [TagResponse.model_validate(t) for t in tags]

import pytest
from app.repo import InMemoryRepo, RepoError
from app.service import CatalogService, QueryError, NotFoundError

class BrokenRepo(InMemoryRepo):
    """Every read fails like a dropped store connection."""
    def list_titles(self, *args, **kwargs):
        raise RepoError("connection reset")
    def list_directors(self, *args, **kwargs):
        raise RepoError("connection reset")
    def get_title(self, tid):
        raise RepoError("connection reset")
    def get_director(self, did):
        raise RepoError("connection reset")

@pytest.fixture
def svc():
    return CatalogService(BrokenRepo())

def test_list_titles_wraps_store_error(svc):
    with pytest.raises(QueryError, match="no results"):
        svc.list_titles()

def test_titles_by_year_wraps_store_error(svc):
    with pytest.raises(QueryError):
        svc.titles_by_year("2019")

def test_titles_by_cast_wraps_store_error(svc):
    with pytest.raises(QueryError):
        svc.titles_by_cast("bob")

def test_find_directors_wraps_store_error(svc):
    with pytest.raises(QueryError):
        svc.find_directors("jane")
    with pytest.raises(QueryError):
        svc.find_directors()

def test_get_title_and_director_wrap_store_error(svc):
    with pytest.raises(QueryError):
        svc.get_title("1")
    with pytest.raises(QueryError):
        svc.get_director("1")

def test_non_numeric_year_is_query_error():
    s = CatalogService(InMemoryRepo())
    with pytest.raises(QueryError):
        s.titles_by_year("nineteen")

def test_titles_for_director_error_on_titles_step():
    class TitlesDown(InMemoryRepo):
        def list_titles(self, *args, **kwargs):
            raise RepoError("timeout")
    repo = TitlesDown()
    from app.models import Director
    d = repo.create_director(Director(None, "Jane Doe"))
    with pytest.raises(QueryError):
        CatalogService(repo).titles_for_director(str(d.id))

def test_titles_for_director_malformed_is_not_found():
    with pytest.raises(NotFoundError, match="director not found"):
        CatalogService(InMemoryRepo()).titles_for_director("??")

def test_titles_for_director_error_on_director_step(svc):
    with pytest.raises(QueryError):
        svc.titles_for_director("1")

# app/service.py
from typing import List, Optional
from app.models import Director, Title
from app.repo import RepoError, InvalidIdError
import logging

logger = logging.getLogger(__name__)

# Exceptions
class QueryError(Exception):
    """Raised when the store fails to answer a read."""
    pass

class NotFoundError(Exception):
    """Raised when an entity is not found."""
    pass

class InvalidRequestError(Exception):
    """Raised when an identifier is malformed."""
    pass

def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()

class CatalogService:
    """
    Read-only queries over the title/director catalog.
    The service expects a repository object exposing the methods used below
    (SqliteRepo or InMemoryRepo from app.repo).
    """

    def __init__(self, repo):
        """
        Initialize service with a repository instance (injected).
        """
        self.repo = repo
        logger.debug("CatalogService initialized with repo %s", type(repo).__name__)

    def is_available(self) -> bool:
        return self.repo.ping()

    # ---- Titles ----
    def list_titles(self) -> List[Title]:
        """Every title with its director joined."""
        try:
            titles = self.repo.list_titles()
        except RepoError as e:
            logger.warning("list_titles failed: %s", e)
            raise QueryError("no results") from e
        logger.debug("list_titles: %d titles", len(titles))
        return titles

    def titles_by_year(self, year: Optional[str]) -> List[Title]:
        """Titles released in `year`; a missing year returns every title."""
        if _blank(year):
            logger.debug("titles_by_year: no year given, returning all titles")
            return self.list_titles()
        try:
            titles = self.repo.list_titles(release_year=str(year).strip())
        except RepoError as e:
            logger.warning("titles_by_year(%r) failed: %s", year, e)
            raise QueryError("no results") from e
        logger.debug("titles_by_year(%r): %d titles", year, len(titles))
        return titles

    def titles_by_cast(self, name: Optional[str]) -> List[Title]:
        """Titles whose cast contains `name` (case-insensitive); missing name returns every title."""
        if _blank(name):
            logger.debug("titles_by_cast: no name given, returning all titles")
            return self.list_titles()
        try:
            titles = self.repo.list_titles(cast_contains=str(name).strip())
        except RepoError as e:
            logger.warning("titles_by_cast(%r) failed: %s", name, e)
            raise QueryError("no results") from e
        logger.debug("titles_by_cast(%r): %d titles", name, len(titles))
        return titles

    def get_title(self, title_id: str) -> Title:
        """Get a title by id or raise NotFoundError / InvalidRequestError."""
        try:
            t = self.repo.get_title(title_id)
        except InvalidIdError as e:
            logger.debug("get_title: malformed id %r", title_id)
            raise InvalidRequestError("invalid id") from e
        except RepoError as e:
            logger.warning("get_title(%r) failed: %s", title_id, e)
            raise QueryError("no results") from e
        if not t:
            logger.debug("get_title: title %s not found", title_id)
            raise NotFoundError("title not found")
        return t

    # ---- Directors ----
    def find_directors(self, name: Optional[str] = None) -> List[Director]:
        """Directors whose name contains `name`; all directors when no name is given."""
        try:
            if _blank(name):
                found = self.repo.list_directors()
            else:
                found = self.repo.list_directors(name_contains=str(name).strip())
        except RepoError as e:
            logger.warning("find_directors(%r) failed: %s", name, e)
            raise QueryError("no results") from e
        logger.debug("find_directors(%r): %d directors", name, len(found))
        return found

    def get_director(self, director_id: str) -> Director:
        try:
            d = self.repo.get_director(director_id)
        except InvalidIdError as e:
            logger.debug("get_director: malformed id %r", director_id)
            raise InvalidRequestError("invalid id") from e
        except RepoError as e:
            logger.warning("get_director(%r) failed: %s", director_id, e)
            raise QueryError("no results") from e
        if not d:
            logger.debug("get_director: director %s not found", director_id)
            raise NotFoundError("director not found")
        return d

    def titles_for_director(self, director_id: str) -> List[Title]:
        """
        Titles referencing a director. The director must exist; a malformed id
        is reported as not found, like a missing one.
        """
        try:
            d = self.get_director(director_id)
        except InvalidRequestError as e:
            raise NotFoundError("director not found") from e
        try:
            titles = self.repo.list_titles(director_id=d.id)
        except RepoError as e:
            logger.warning("titles_for_director(%s) failed: %s", d.id, e)
            raise QueryError("no results") from e
        logger.debug("titles_for_director(%s): %d titles", d.id, len(titles))
        return titles

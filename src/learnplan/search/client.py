"""Educational resource search over the Tavily API.

Searches are restricted to an allow-list of trusted education sites. Search
never fails from the caller's point of view: without an API key, or on any
HTTP/network error, a fixed fallback list mentioning the requested need is
returned instead.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

import httpx
import structlog

from learnplan.config import SearchSettings
from learnplan.core.models import Resource, ResourceType
from learnplan.core.prompt_builder import build_resource_query, build_strategy_query
from learnplan.errors import UpstreamError, UpstreamTimeoutError

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

RESOURCE_DOMAINS = [
    "understood.org",
    "edutopia.org",
    "teachthought.com",
    "scholastic.com",
    "readingrockets.org",
    "ldaamerica.org",
    "chadd.org",
    "autismspeaks.org",
]

STRATEGY_DOMAINS = [
    "edutopia.org",
    "teachthought.com",
    "scholastic.com",
    "readingrockets.org",
    "understood.org",
    "teachervision.com",
    "interventioncentral.org",
]

DESCRIPTION_CHARS = 200
DEFAULT_TITLE = "Educational Resource"
DEFAULT_URL = "https://www.understood.org"
DEFAULT_DESCRIPTION = "Educational resource for students with learning differences."
DEFAULT_SOURCE = "educational-resource.org"


def infer_resource_type(title: str | None, url: str | None) -> ResourceType:
    """Guess a resource's type from its title and URL."""
    if not title or not url:
        return ResourceType.ARTICLE

    title = title.lower()
    url = url.lower()

    if "youtube.com" in url or "vimeo.com" in url or "video" in title:
        return ResourceType.VIDEO
    if "worksheet" in title or "printable" in title or "pdf" in url:
        return ResourceType.WORKSHEET
    if "game" in title or "interactive" in title or "activity" in title:
        return ResourceType.INTERACTIVE
    return ResourceType.ARTICLE


def _source_from_url(url: str | None) -> str:
    if not url:
        return DEFAULT_SOURCE
    host = urlparse(url).hostname or ""
    if host.startswith("www."):
        host = host[4:]
    return host or DEFAULT_SOURCE


def format_results(results: Any) -> list[Resource]:
    """Map raw search results to Resource records."""
    if not isinstance(results, list):
        logger.warning("search_results_invalid", kind=type(results).__name__)
        return []

    resources = []
    for result in results:
        if not isinstance(result, dict):
            continue
        title = result.get("title") or DEFAULT_TITLE
        url = result.get("url") or DEFAULT_URL
        content = result.get("content")
        resources.append(
            Resource(
                title=title,
                description=f"{content[:DESCRIPTION_CHARS]}..." if content else DEFAULT_DESCRIPTION,
                url=url,
                source=_source_from_url(result.get("url")),
                type=infer_resource_type(result.get("title"), result.get("url")),
            )
        )
    return resources


def fallback_resources(needs: str) -> list[Resource]:
    """Fixed resource list used when search is unavailable."""
    return [
        Resource(
            title=f"Understanding {needs} in the Classroom",
            description=(
                f"A comprehensive guide for educators working with students who have {needs}. "
                "Includes practical strategies, accommodations, and resources."
            ),
            url="https://www.understood.org/articles/en/classroom-accommodations-guide",
            source="understood.org",
        ),
        Resource(
            title=f"Visual Supports for Students with {needs}",
            description=(
                f"Learn how to create and implement visual supports to help students with "
                f"{needs} succeed in the classroom."
            ),
            url="https://www.edutopia.org/article/visual-supports-students-special-needs",
            source="edutopia.org",
            difficulty="beginner",
        ),
        Resource(
            title=f"Assistive Technology Tools for {needs}",
            description=(
                f"Discover the latest assistive technology tools that can help students with "
                f"{needs} access the curriculum and demonstrate their knowledge."
            ),
            url="https://www.readingrockets.org/article/assistive-technology-kids-learning-disabilities",
            source="readingrockets.org",
        ),
    ]


def fallback_strategies(challenge: str) -> list[Resource]:
    """Fixed strategy list used when search is unavailable."""
    return [
        Resource(
            title=f"Evidence-Based Strategies for {challenge}",
            description=(
                f"Research-backed teaching strategies specifically designed for students with "
                f"{challenge}. Includes classroom implementation tips."
            ),
            url="https://www.interventioncentral.org/academic-interventions",
            source="interventioncentral.org",
        ),
        Resource(
            title=f"Differentiated Instruction for {challenge}",
            description=(
                f"Learn how to differentiate instruction to meet the needs of students with "
                f"{challenge} in inclusive classrooms."
            ),
            url="https://www.teachthought.com/pedagogy/differentiation/",
            source="teachthought.com",
        ),
        Resource(
            title=f"Behavior Management Strategies for {challenge}",
            description=(
                f"Effective behavior management approaches for supporting students with "
                f"{challenge} in the classroom."
            ),
            url="https://www.scholastic.com/teachers/articles/teaching-content/behavior-management-strategies/",
            source="scholastic.com",
        ),
    ]


# =============================================================================
# SEARCH CLIENT
# =============================================================================


class ResourceSearchClient:
    """Tavily search client with deterministic fallback lists."""

    def __init__(
        self,
        settings: SearchSettings | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize search client.

        Args:
            settings: Search API settings (defaults: no key, fallback only)
            transport: Optional httpx transport (used by tests)
        """
        self.settings = settings or SearchSettings()
        self._client = httpx.Client(timeout=self.settings.timeout, transport=transport)

    @property
    def is_configured(self) -> bool:
        return self.settings.configured

    def close(self) -> None:
        self._client.close()

    def _search(self, query: str, domains: list[str]) -> list[Resource]:
        """Run one search request.

        Raises:
            UpstreamTimeoutError: On timeout
            UpstreamError: On non-2xx status, network error or bad payload
        """
        payload = {
            "api_key": self.settings.api_key,
            "query": query,
            "search_depth": "advanced",
            "include_domains": domains,
            "max_results": self.settings.max_results,
        }
        try:
            response = self._client.post(self.settings.base_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"Search timed out after {self.settings.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise UpstreamError(f"Search returned HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamError(f"Search request failed: {e}") from e

        return format_results(data.get("results") if isinstance(data, dict) else None)

    def search_resources(self, needs: str) -> list[Resource]:
        """Search educational resources for a student's needs.

        Args:
            needs: Free-text need (usually the diagnosis)

        Returns:
            Up to ``max_results`` resources, or the fallback list
        """
        if not self.is_configured:
            logger.info("search_fallback_used", reason="not_configured", needs=needs)
            return fallback_resources(needs)
        try:
            resources = self._search(build_resource_query(needs), RESOURCE_DOMAINS)
        except UpstreamError as e:
            logger.warning("search_fallback_used", reason="upstream_error", needs=needs, error=str(e))
            return fallback_resources(needs)

        logger.info("search_resources_found", needs=needs, count=len(resources))
        return resources

    def search_strategies(self, challenge: str) -> list[Resource]:
        """Search evidence-based teaching strategies for a learning challenge."""
        if not self.is_configured:
            logger.info("strategy_fallback_used", reason="not_configured", challenge=challenge)
            return fallback_strategies(challenge)
        try:
            strategies = self._search(build_strategy_query(challenge), STRATEGY_DOMAINS)
        except UpstreamError as e:
            logger.warning(
                "strategy_fallback_used", reason="upstream_error", challenge=challenge, error=str(e)
            )
            return fallback_strategies(challenge)

        logger.info("search_strategies_found", challenge=challenge, count=len(strategies))
        return strategies

"""Read-only functions the language model may call during a chat turn."""

from typing import Any, Callable, Dict, List, Optional
from loguru import logger

from scenerag.catalog import CampaignCatalog
from scenerag.exceptions import ResourceNotFoundException, UnknownFunctionError, ValidationException
from scenerag.retrieval.search_service import SearchService


def _function(name: str, description: str, properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {"type": "object", "properties": properties, "required": required},
        },
    }


_CAMPAIGN_ID = {"type": "string", "description": "The ID of the campaign"}

TOOL_DECLARATIONS: List[Dict[str, Any]] = [
    _function("count_campaigns", "Get the total number of campaigns in the system", {}, []),
    _function(
        "list_campaigns",
        "Get a list of all campaigns with their names and metadata",
        {"limit": {"type": "integer", "description": "Maximum number of campaigns to return (default: 50)"}},
        [],
    ),
    _function(
        "get_campaign_details",
        "Get detailed information about a specific campaign including stats",
        {"campaignId": _CAMPAIGN_ID},
        ["campaignId"],
    ),
    _function(
        "get_campaign_analytics",
        "Get analytics and statistics for a campaign (scenes, moods, products, visual elements)",
        {"campaignId": _CAMPAIGN_ID},
        ["campaignId"],
    ),
    _function(
        "search_scenes",
        "Search for video scenes by content, visual elements, or semantic meaning",
        {
            "query": {"type": "string", "description": "The search query describing what scenes to find"},
            "campaignId": {"type": "string", "description": "Optional campaign ID to limit search to specific campaign"},
            "limit": {"type": "integer", "description": "Maximum number of scenes to return (default: 10)"},
        },
        ["query"],
    ),
    _function(
        "count_videos",
        "Count total number of videos across all campaigns or in a specific campaign",
        {"campaignId": {"type": "string", "description": "Optional campaign ID to count videos for"}},
        [],
    ),
    _function(
        "count_scenes",
        "Count total number of scenes across all campaigns or in a specific campaign",
        {"campaignId": {"type": "string", "description": "Optional campaign ID to count scenes for"}},
        [],
    ),
]

TOOL_NAMES = frozenset(tool["function"]["name"] for tool in TOOL_DECLARATIONS)


def _require(args: Dict[str, Any], key: str) -> str:
    value = args.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationException(f"{key} is required")
    return value


def _limit(args: Dict[str, Any], default: int) -> int:
    value = args.get("limit")
    if value is None:
        return default
    try:
        limit = int(value)
    except (TypeError, ValueError):
        raise ValidationException(f"limit must be an integer, got {value!r}")
    if limit < 1:
        raise ValidationException("limit must be at least 1")
    return limit


class ToolExecutor:
    """Dispatches model function calls to the catalog and search service.

    Missing resources and bad arguments come back as ``{"error": ...}`` so the
    model can correct itself. Undeclared function names raise
    UnknownFunctionError.
    """

    def __init__(self, catalog: CampaignCatalog, search_service: SearchService):
        self.catalog = catalog
        self.search_service = search_service
        self._handlers: Dict[str, Callable] = {
            "count_campaigns": self._count_campaigns,
            "list_campaigns": self._list_campaigns,
            "get_campaign_details": self._get_campaign_details,
            "get_campaign_analytics": self._get_campaign_analytics,
            "search_scenes": self._search_scenes,
            "count_videos": self._count_videos,
            "count_scenes": self._count_scenes,
        }

    @property
    def declarations(self) -> List[Dict[str, Any]]:
        return TOOL_DECLARATIONS

    def check(self, name: str) -> None:
        if name not in self._handlers:
            raise UnknownFunctionError(name)

    async def execute(
        self, name: str, args: Optional[Dict[str, Any]] = None, campaign_scope: Optional[str] = None
    ) -> Dict[str, Any]:
        self.check(name)
        args = args or {}
        logger.info(f"Executing function {name} with args {args}")
        try:
            return await self._handlers[name](args, campaign_scope)
        except (ResourceNotFoundException, ValidationException) as e:
            logger.warning(f"Function {name} returned error to model: {e.message}")
            return {"error": e.message}

    async def _count_campaigns(self, args, scope):
        return {"count": await self.catalog.count_campaigns()}

    async def _list_campaigns(self, args, scope):
        campaigns = await self.catalog.list_campaigns(_limit(args, 50))
        return {
            "campaigns": [
                campaign.model_dump(
                    mode="json",
                    by_alias=True,
                    include={"id", "name", "description", "video_count", "total_duration", "created_at"},
                )
                for campaign in campaigns
            ]
        }

    async def _get_campaign_details(self, args, scope):
        campaign = await self.catalog.get_campaign(_require(args, "campaignId"))
        return campaign.to_document()

    async def _get_campaign_analytics(self, args, scope):
        analytics = await self.catalog.get_campaign_analytics(_require(args, "campaignId"))
        return analytics.to_document()

    async def _search_scenes(self, args, scope):
        query = _require(args, "query")
        # A campaign-scoped conversation never searches outside its campaign
        campaign_id = scope or args.get("campaignId")
        results = await self.search_service.query_scenes(query, campaign_id=campaign_id, limit=_limit(args, 10))
        return {
            "scenes": [
                {
                    "sceneId": result.scene.id,
                    "videoId": result.scene.video_id,
                    "campaignId": result.scene.campaign_id,
                    "startTime": result.scene.start_time,
                    "endTime": result.scene.end_time,
                    "description": result.scene.description,
                    "transcript": result.scene.transcript,
                    "visualElements": result.scene.analysis.visual_elements,
                    "mood": result.scene.analysis.mood,
                    "product": result.scene.analysis.product,
                    "score": result.score,
                }
                for result in results
            ]
        }

    async def _count_videos(self, args, scope):
        return {"count": await self.catalog.count_videos(args.get("campaignId"))}

    async def _count_scenes(self, args, scope):
        return {"count": await self.catalog.count_scenes(args.get("campaignId"))}

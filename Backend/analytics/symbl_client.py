# Backend/analytics/symbl_client.py
import aiohttp
from typing import Dict, Any, List, Optional
import logging
from config.settings import Settings
from core.constants import SYMBL_TOKEN_PATH, SYMBL_CONVERSATIONS_PATH
from core.exceptions import AnalyticsClientError

logger = logging.getLogger(__name__)

class SymblClient:
    """REST client for the Symbl conversation intelligence API

    The client holds only an access token. Every request opens its own
    HTTP session, so there is nothing to tear down when it is replaced.
    """

    def __init__(self, access_token: str, base_url: str, timeout: int = 30):
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    @classmethod
    async def create(cls, settings: Settings) -> "SymblClient":
        """Authenticate with the app credentials and return a ready client"""
        if not settings.symbl_app_id:
            logger.error("SYMBL_APP_ID not found")
            raise AnalyticsClientError("SYMBL_APP_ID is required")
        if not settings.symbl_app_secret:
            logger.error("SYMBL_APP_SECRET not found")
            raise AnalyticsClientError("SYMBL_APP_SECRET is required")

        base_url = settings.symbl_api_url.rstrip("/")
        timeout = aiohttp.ClientTimeout(total=settings.symbl_timeout)
        body = {
            "type": "application",
            "appId": settings.symbl_app_id,
            "appSecret": settings.symbl_app_secret,
        }

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(f"{base_url}{SYMBL_TOKEN_PATH}", json=body) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise AnalyticsClientError(
                            f"token request failed with status {response.status}: {error_text[:200]}"
                        )
                    data = await response.json()
        except AnalyticsClientError:
            raise
        except Exception as e:
            logger.error(f"Symbl authentication failed: {e}")
            raise AnalyticsClientError(str(e), cause=e) from e

        access_token = data.get("accessToken")
        if not access_token:
            raise AnalyticsClientError("token response did not contain accessToken")

        logger.info("Symbl client authenticated")
        return cls(access_token, base_url, timeout=settings.symbl_timeout)

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {self.access_token}",
            "User-Agent": "ConversationAnalyzer/1.0"
        }

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.get(url, headers=self._headers(), params=params) as response:
                response.raise_for_status()
                return await response.json()

    async def get_conversation(self, conversation_id: str) -> Dict[str, Any]:
        """Get conversation metadata"""
        return await self._get(f"{SYMBL_CONVERSATIONS_PATH}/{conversation_id}")

    async def get_messages(self, conversation_id: str, sentiment: bool = False) -> List[Dict[str, Any]]:
        """Get transcript messages for a conversation"""
        params = {"sentiment": "true"} if sentiment else None
        data = await self._get(f"{SYMBL_CONVERSATIONS_PATH}/{conversation_id}/messages", params)
        return data.get("messages", [])

    async def get_topics(self, conversation_id: str) -> List[Dict[str, Any]]:
        data = await self._get(f"{SYMBL_CONVERSATIONS_PATH}/{conversation_id}/topics")
        return data.get("topics", [])

    async def get_entities(self, conversation_id: str) -> List[Dict[str, Any]]:
        data = await self._get(f"{SYMBL_CONVERSATIONS_PATH}/{conversation_id}/entities")
        return data.get("entities", [])

    async def get_trackers(self, conversation_id: str) -> List[Dict[str, Any]]:
        data = await self._get(f"{SYMBL_CONVERSATIONS_PATH}/{conversation_id}/trackers")
        return data.get("trackers", [])

    async def get_questions(self, conversation_id: str) -> List[Dict[str, Any]]:
        data = await self._get(f"{SYMBL_CONVERSATIONS_PATH}/{conversation_id}/questions")
        return data.get("questions", [])

    async def get_action_items(self, conversation_id: str) -> List[Dict[str, Any]]:
        data = await self._get(f"{SYMBL_CONVERSATIONS_PATH}/{conversation_id}/action-items")
        return data.get("actionItems", [])

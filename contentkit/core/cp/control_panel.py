"""
Control Panel
=============

Control panel client: alerts, license transfer, and update checks, all sent
through a single action queue.
"""

from typing import Any, List, Optional

from pydantic import ValidationError

from contentkit.config.logging import get_logger
from contentkit.core.cp.action_queue import ActionClient, ActionQueue
from contentkit.core.cp.notifications import NotificationCenter
from contentkit.core.events import Component, Event
from contentkit.models.schemas import ActionResponse, UpdateInfo

logger = get_logger(__name__)

EVENT_CHECK_FOR_UPDATES = "checkForUpdates"


def update_badge_text(info: UpdateInfo) -> Optional[str]:
    """Header badge text for the available updates, if any."""
    if not info.total:
        return None
    if info.total == 1:
        return "1 update available"
    return f"{info.total} updates available"


def _response_error(response: ActionResponse) -> Optional[str]:
    if isinstance(response.data, dict):
        return response.data.get("error")
    return None


def _succeeded(response: ActionResponse) -> bool:
    return response.ok and isinstance(response.data, dict) and bool(response.data.get("success"))


class ControlPanel(Component):
    """
    Control panel client.

    Args:
        client: Object with an async ``post(action, data)`` method
        notifications: Notification center, created from settings if omitted
    """

    def __init__(
        self,
        client: Any = None,
        notifications: Optional[NotificationCenter] = None,
    ) -> None:
        self.logger: Any = logger.bind(component="control_panel")
        self.client = client or ActionClient()
        self.queue = ActionQueue(self.client)
        self.notifications = notifications or NotificationCenter()
        self.alerts: List[str] = []
        self.update_info: Optional[UpdateInfo] = None
        self.badge_text: Optional[str] = None

    def post_action_request(self, action: str, data: Any = None, callback: Any = None) -> None:
        self.queue.post_action_request(action, data, callback)

    async def join(self) -> None:
        await self.queue.join()

    def display_notice(self, message: str) -> None:
        self.notifications.display_notice(message)

    def display_error(self, message: Optional[str] = None) -> None:
        self.notifications.display_error(message)

    # Alerts
    # -------------------------------------------------------------------------

    def fetch_alerts(self, path: str = "") -> None:
        self.post_action_request("app/getCpAlerts", {"path": path}, self.display_alerts)

    def display_alerts(self, response: ActionResponse) -> None:
        if not response.ok:
            self.display_error(_response_error(response))
            return
        if isinstance(response.data, list) and response.data:
            self.alerts = [str(alert) for alert in response.data]
            self.logger.info("Alerts displayed", count=len(self.alerts))

    def shun_alert(self, message: str) -> None:
        def handle(response: ActionResponse) -> None:
            if _succeeded(response):
                self.alerts = [alert for alert in self.alerts if alert != message]
            else:
                self.display_error(_response_error(response))

        self.post_action_request("app/shunCpAlert", {"message": message}, handle)

    def transfer_license(self) -> None:
        def handle(response: ActionResponse) -> None:
            if _succeeded(response):
                self.display_notice("License transferred.")
            else:
                self.display_error(_response_error(response))

        self.post_action_request("app/transferLicenseToCurrentDomain", {}, handle)

    # Updates
    # -------------------------------------------------------------------------

    def check_for_updates(self) -> None:
        self.post_action_request("app/checkForUpdates", {}, self.display_update_info)

    def display_update_info(self, response: ActionResponse) -> None:
        if not response.ok:
            self.display_error(_response_error(response))
            self.trigger(EVENT_CHECK_FOR_UPDATES, Event(update_info=None))
            return

        try:
            info = UpdateInfo.model_validate(response.data or {})
        except ValidationError as e:
            self.logger.warning("Invalid update info", error=str(e))
            self.display_error()
            self.trigger(EVENT_CHECK_FOR_UPDATES, Event(update_info=None))
            return

        self.update_info = info
        self.badge_text = update_badge_text(info)
        self.trigger(EVENT_CHECK_FOR_UPDATES, Event(update_info=info))

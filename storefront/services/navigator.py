"""
Navigation sink

Services never perform route changes themselves; they hand them to a
Navigator. The HTTP layer turns what was recorded into a redirect (admin
views) or a ``navigate_to`` field (chat widget).
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class NavigationRequest:
    """One requested route change"""
    path: str
    replace: bool = False


class Navigator:
    """Records route changes in the order they were requested"""

    def __init__(self):
        self.requests: List[NavigationRequest] = []

    def navigate(self, path: str, replace: bool = False) -> None:
        """
        Request a route change

        Args:
            path: Target route, not validated here
            replace: Replace the current history entry instead of pushing
        """
        logger.info(f"Navigate to {path} (replace={replace})")
        self.requests.append(NavigationRequest(path=path, replace=replace))

    @property
    def last(self) -> Optional[NavigationRequest]:
        return self.requests[-1] if self.requests else None

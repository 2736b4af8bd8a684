"""Models package."""

from .user import User
from .idea import Idea
from .comment import Comment
from .project_link import ProjectLink
from .page_view import PageView
from .metric import Metric
from .news_banner import NewsBanner

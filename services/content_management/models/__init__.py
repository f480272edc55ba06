from .posts import Post, Comment, Reaction, ReactionType
from .projects import Project
from .moderation import ModerationItem, ModerationStatus

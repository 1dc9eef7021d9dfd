# Models package init
"""
Importing this package registers every table with `Base.metadata`, which is
what `init_database()` and Alembic's autogenerate both read.
"""

from teamspace.models.user import User
from teamspace.models.note import Note
from teamspace.models.team import Team, TeamMember
from teamspace.models.event import Event
from teamspace.models.messaging import Conversation, ConversationMember, Message

__all__ = [
    "User",
    "Note",
    "Team",
    "TeamMember",
    "Event",
    "Conversation",
    "ConversationMember",
    "Message",
]

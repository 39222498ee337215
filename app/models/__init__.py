from .user import User
from .job import Job
from .review import Review, ReviewHelpfulVote
from .notification import Notification

__all__ = [
    'User', 'Job', 'Review', 'ReviewHelpfulVote', 'Notification'
]

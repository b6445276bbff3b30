"""Domain layer: value objects, the Learner aggregate and its event.

Nothing here imports messaging or persistence code.
"""

from learner_progress.domain.average import Average
from learner_progress.domain.credits import Credits
from learner_progress.domain.events import CourseCompletedEvent
from learner_progress.domain.learner import Learner

__all__ = ["Average", "Credits", "CourseCompletedEvent", "Learner"]

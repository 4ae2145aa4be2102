"""Services for irrigation-app.

Provides the section list manager, the manual timer controller and the
weekday selector used while composing sections.
"""

from irrigation_manager.app.services.day_selector import DaySelector
from irrigation_manager.app.services.sections import SectionDraft, SectionListManager
from irrigation_manager.app.services.timers import IntervalTrigger, TimerController

__all__ = ["DaySelector", "IntervalTrigger", "SectionDraft", "SectionListManager", "TimerController"]

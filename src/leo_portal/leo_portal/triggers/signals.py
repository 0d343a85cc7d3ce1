"""Domain signals fired by services after a successful write.

Handlers in ``triggers.handlers`` subscribe to these; services never call
integrations directly. Every signal is sent with the service as sender and
the affected record as a keyword argument.
"""

from __future__ import annotations

from blinker import Namespace

portal_signals = Namespace()

# user=User
user_changed = portal_signals.signal("user-changed")
user_approved = portal_signals.signal("user-approved")
user_rejected = portal_signals.signal("user-rejected")
# user_id=int
user_deleted = portal_signals.signal("user-deleted")

# event=Event
event_created = portal_signals.signal("event-created")

# record=AttendanceRecord, event=Event
attendance_created = portal_signals.signal("attendance-created")

# idea=ProjectIdea
project_idea_submitted = portal_signals.signal("project-idea-submitted")

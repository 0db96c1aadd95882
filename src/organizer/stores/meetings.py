"""Meeting and meeting-category stores."""

from organizer.core.meetings import Meeting, MeetingCategory
from organizer.core.records import utcnow

from .base import EntityStore


class MeetingStore(EntityStore[Meeting]):
    collection = "meetings"
    kind = "meeting"
    record_type = Meeting
    default_order = "startTime"

    def add(self, title: str, start_time, end_time, **fields) -> Meeting:
        return self.create(
            Meeting(
                id="",
                user_id=self.user_id,
                title=title,
                start_time=start_time,
                end_time=end_time,
                **fields,
            )
        )

    def create_summary(self, meeting_id: str, summary: str) -> Meeting:
        return self.update(meeting_id, {"summary": summary})

    def _add_to_list(self, meeting_id: str, attr: str, value: str) -> Meeting:
        meeting = self.get(meeting_id)
        items = getattr(meeting, attr)
        if value in items:
            return meeting
        items.append(value)
        meeting.updated_at = utcnow()
        return self._save(meeting)

    def _remove_from_list(self, meeting_id: str, attr: str, value: str) -> Meeting:
        meeting = self.get(meeting_id)
        items = getattr(meeting, attr)
        if value not in items:
            return meeting
        items.remove(value)
        meeting.updated_at = utcnow()
        return self._save(meeting)

    def add_task(self, meeting_id: str, task_id: str) -> Meeting:
        return self._add_to_list(meeting_id, "tasks", task_id)

    def remove_task(self, meeting_id: str, task_id: str) -> Meeting:
        return self._remove_from_list(meeting_id, "tasks", task_id)

    def add_participant(self, meeting_id: str, person_id: str) -> Meeting:
        return self._add_to_list(meeting_id, "participants", person_id)

    def remove_participant(self, meeting_id: str, person_id: str) -> Meeting:
        return self._remove_from_list(meeting_id, "participants", person_id)


class MeetingCategoryStore(EntityStore[MeetingCategory]):
    collection = "meetingCategories"
    kind = "meeting category"
    record_type = MeetingCategory
    default_order = "name"

    def add(self, name: str, **fields) -> MeetingCategory:
        return self.create(MeetingCategory(id="", user_id=self.user_id, name=name, **fields))

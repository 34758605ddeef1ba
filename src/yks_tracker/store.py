"""In-process entity store for tasks, logs, exams, flashcards, goals and moods."""
import dataclasses
import logging
import uuid
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from yks_tracker.config import Settings
from yks_tracker.errors import ReferentialIntegrityError, ValidationError
from yks_tracker.models import (
    DIFFICULTIES, ExamResult, ExamSubjectNet, Flashcard, FlashcardError, Goal, Mood,
    Patch, QuestionLog, Task, parse_subjects_data, to_count,
)
from yks_tracker.repository import RepositoryFactory, memory_factory, sqlite_factory
from yks_tracker.scoring import calc_exam_nets, calc_net

logger = logging.getLogger(__name__)

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}
RESERVED_FIELDS = ("id", "created_at")


def new_id() -> str:
    return str(uuid.uuid4())


def _day(value) -> Optional[str]:
    """Calendar day (YYYY-MM-DD) of a date string or datetime."""
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    return str(value).split("T")[0]


def _newest_first(records: list) -> list:
    return sorted(records, key=lambda r: r.created_at or datetime.min, reverse=True)


class EntityStore:
    """CRUD over one repository per entity type.

    Lookups of a missing id return None (or False for deletes); only
    referential-integrity and validation failures raise.
    """

    def __init__(self, repository_factory: RepositoryFactory = memory_factory,
                 clock: Callable[[], datetime] = datetime.now):
        self.clock = clock
        self.tasks = repository_factory("tasks", Task)
        self.moods = repository_factory("moods", Mood)
        self.goals = repository_factory("goals", Goal)
        self.question_logs = repository_factory("question_logs", QuestionLog)
        self.exam_results = repository_factory("exam_results", ExamResult)
        self.exam_subject_nets = repository_factory("exam_subject_nets", ExamSubjectNet)
        self.flashcards = repository_factory("flashcards", Flashcard)
        self.flashcard_errors: list[FlashcardError] = []

    # --- helpers ---

    def _create(self, repo, model, fields: dict):
        for name in RESERVED_FIELDS:
            if name in fields:
                raise ValidationError(f"{name} is assigned by the store")
        try:
            record = model(id=new_id(), created_at=self.clock(), **fields)
        except TypeError as e:
            raise ValidationError(f"invalid {model.__name__} fields: {e}") from None
        repo.put(record)
        logger.debug("Created %s %s", model.__name__, record.id)
        return record

    def _update(self, repo, record_id: str, patch: Patch):
        existing = repo.get(record_id)
        if existing is None:
            return None
        updated = dataclasses.replace(existing, **patch.changes())
        repo.put(updated)
        logger.debug("Updated %s %s", type(updated).__name__, record_id)
        return updated

    def _delete(self, repo, record_id: str) -> bool:
        deleted = repo.remove(record_id)
        if deleted:
            logger.debug("Deleted %s", record_id)
        return deleted

    # --- tasks ---

    def get_tasks(self) -> list[Task]:
        """Tasks by priority (high first), newest first within a priority."""
        tasks = _newest_first(self.tasks.values())
        return sorted(tasks, key=lambda t: PRIORITY_ORDER[t.priority])

    def get_task(self, task_id: str) -> Optional[Task]:
        return self.tasks.get(task_id)

    def create_task(self, **fields) -> Task:
        fields.pop("completed_at", None)
        return self._create(self.tasks, Task, fields)

    def update_task(self, task_id: str, patch: Patch) -> Optional[Task]:
        return self._update(self.tasks, task_id, patch)

    def delete_task(self, task_id: str) -> bool:
        return self._delete(self.tasks, task_id)

    def toggle_task_complete(self, task_id: str) -> Optional[Task]:
        task = self.tasks.get(task_id)
        if task is None:
            return None
        completed = not task.completed
        updated = dataclasses.replace(
            task, completed=completed, completed_at=self.clock() if completed else None,
        )
        self.tasks.put(updated)
        return updated

    def get_tasks_by_date(self, day: str) -> list[Task]:
        """Tasks due on ``day``. Undated tasks created today only show up for today."""
        today = _day(self.clock())
        result = []
        for task in self.get_tasks():
            if task.due_date:
                if _day(task.due_date) == day:
                    result.append(task)
            elif day == today and _day(task.created_at) == today:
                result.append(task)
        return result

    def get_daily_summary(self, range_days: int = 30) -> list[dict]:
        """Per-day completion counts for the last ``range_days`` days, newest first."""
        tasks = self.get_tasks()
        moods = self.get_moods()
        today = self.clock().date()
        summary = []
        for offset in range(range_days):
            day = (today - timedelta(days=offset)).isoformat()
            completed = [t for t in tasks if t.completed_at and _day(t.completed_at) == day]
            summary.append({
                "date": day,
                "tasks_completed": len(completed),
                "total_tasks": sum(1 for t in tasks if t.created_at and _day(t.created_at) <= day),
                "moods": [m for m in moods if _day(m.created_at) == day],
                "productivity": min(len(completed) * 20, 100),
            })
        return summary

    # --- moods ---

    def get_moods(self) -> list[Mood]:
        return _newest_first(self.moods.values())

    def get_latest_mood(self) -> Optional[Mood]:
        moods = self.get_moods()
        return moods[0] if moods else None

    def create_mood(self, **fields) -> Mood:
        return self._create(self.moods, Mood, fields)

    def delete_mood(self, mood_id: str) -> bool:
        return self._delete(self.moods, mood_id)

    # --- goals ---

    def get_goals(self) -> list[Goal]:
        return _newest_first(self.goals.values())

    def get_goal(self, goal_id: str) -> Optional[Goal]:
        return self.goals.get(goal_id)

    def create_goal(self, **fields) -> Goal:
        return self._create(self.goals, Goal, fields)

    def update_goal(self, goal_id: str, patch: Patch) -> Optional[Goal]:
        return self._update(self.goals, goal_id, patch)

    def delete_goal(self, goal_id: str) -> bool:
        return self._delete(self.goals, goal_id)

    # --- question logs ---

    def get_question_logs(self) -> list[QuestionLog]:
        return _newest_first(self.question_logs.values())

    def get_question_log(self, log_id: str) -> Optional[QuestionLog]:
        return self.question_logs.get(log_id)

    def create_question_log(self, **fields) -> QuestionLog:
        return self._create(self.question_logs, QuestionLog, fields)

    def update_question_log(self, log_id: str, patch: Patch) -> Optional[QuestionLog]:
        return self._update(self.question_logs, log_id, patch)

    def get_question_logs_by_date_range(self, start_date: str, end_date: str) -> list[QuestionLog]:
        logs = [
            log for log in self.question_logs.values()
            if start_date <= log.study_date <= end_date
        ]
        return sorted(logs, key=lambda log: log.study_date, reverse=True)

    def delete_question_log(self, log_id: str) -> bool:
        return self._delete(self.question_logs, log_id)

    def delete_all_question_logs(self) -> bool:
        self.question_logs.clear()
        logger.debug("Cleared question logs")
        return True

    # --- exam results ---

    def get_exam_results(self) -> list[ExamResult]:
        return _newest_first(self.exam_results.values())

    def get_exam_result(self, exam_id: str) -> Optional[ExamResult]:
        return self.exam_results.get(exam_id)

    def create_exam_result(self, **fields) -> ExamResult:
        """Create an exam result; nets omitted by the caller are derived from subjects_data."""
        fields["subjects_data"] = parse_subjects_data(fields.get("subjects_data"))
        if "tyt_net" not in fields and "ayt_net" not in fields and fields["subjects_data"]:
            fields["tyt_net"], fields["ayt_net"] = calc_exam_nets(
                fields.get("exam_type", "TYT"), fields["subjects_data"],
            )
        return self._create(self.exam_results, ExamResult, fields)

    def update_exam_result(self, exam_id: str, patch: Patch) -> Optional[ExamResult]:
        return self._update(self.exam_results, exam_id, patch)

    def delete_exam_result(self, exam_id: str) -> bool:
        deleted = self._delete(self.exam_results, exam_id)
        if deleted:
            self.delete_exam_subject_nets_by_exam_id(exam_id)
        return deleted

    def delete_all_exam_results(self) -> bool:
        self.exam_results.clear()
        self.exam_subject_nets.clear()
        logger.debug("Cleared exam results and subject nets")
        return True

    # --- exam subject nets ---

    def get_exam_subject_nets(self) -> list[ExamSubjectNet]:
        return _newest_first(self.exam_subject_nets.values())

    def get_exam_subject_net(self, net_id: str) -> Optional[ExamSubjectNet]:
        return self.exam_subject_nets.get(net_id)

    def get_exam_subject_nets_by_exam_id(self, exam_id: str) -> list[ExamSubjectNet]:
        nets = [n for n in self.exam_subject_nets.values() if n.exam_id == exam_id]
        return sorted(nets, key=lambda n: n.subject)

    def create_exam_subject_net(self, **fields) -> ExamSubjectNet:
        exam_id = fields.get("exam_id")
        if exam_id not in self.exam_results:
            logger.warning("Rejected subject net for unknown exam %s", exam_id)
            raise ReferentialIntegrityError(f"Exam with id {exam_id} does not exist")
        if fields.get("net_score") is None:
            fields["net_score"] = calc_net(
                to_count("correct_count", fields.get("correct_count")),
                to_count("wrong_count", fields.get("wrong_count")),
            )
        return self._create(self.exam_subject_nets, ExamSubjectNet, fields)

    def update_exam_subject_net(self, net_id: str, patch: Patch) -> Optional[ExamSubjectNet]:
        return self._update(self.exam_subject_nets, net_id, patch)

    def delete_exam_subject_net(self, net_id: str) -> bool:
        return self._delete(self.exam_subject_nets, net_id)

    def delete_exam_subject_nets_by_exam_id(self, exam_id: str) -> bool:
        deleted_any = False
        for net in self.exam_subject_nets.values():
            if net.exam_id == exam_id and self.exam_subject_nets.remove(net.id):
                deleted_any = True
        return deleted_any

    # --- flashcards ---

    def get_flashcards(self) -> list[Flashcard]:
        return _newest_first(self.flashcards.values())

    def get_flashcard(self, card_id: str) -> Optional[Flashcard]:
        return self.flashcards.get(card_id)

    def create_flashcard(self, **fields) -> Flashcard:
        """New cards start unreviewed and are due immediately unless told otherwise."""
        fields.pop("review_count", None)
        if fields.get("next_review") is None:
            fields["next_review"] = self.clock()
        return self._create(self.flashcards, Flashcard, fields)

    def update_flashcard(self, card_id: str, patch: Patch) -> Optional[Flashcard]:
        return self._update(self.flashcards, card_id, patch)

    def save_flashcard(self, card: Flashcard) -> Flashcard:
        self.flashcards.put(card)
        return card

    def delete_flashcard(self, card_id: str) -> bool:
        return self._delete(self.flashcards, card_id)

    def add_flashcard_error(self, error: FlashcardError) -> None:
        self.flashcard_errors.append(error)

    def get_flashcard_errors(self) -> list[FlashcardError]:
        return list(self.flashcard_errors)

    def get_flashcard_errors_by_difficulty(self) -> dict[str, list[FlashcardError]]:
        return {
            level: [e for e in self.flashcard_errors if e.difficulty == level]
            for level in DIFFICULTIES
        }


def create_store(settings: Settings, clock: Callable[[], datetime] = datetime.now) -> EntityStore:
    """Build a store on the backend named in settings."""
    if settings.backend == "memory":
        return EntityStore(memory_factory, clock=clock)
    if settings.backend == "sqlite":
        return EntityStore(sqlite_factory(settings.db_path), clock=clock)
    raise ValidationError(f"Unknown backend {settings.backend!r}")

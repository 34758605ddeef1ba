"""Data classes for the tracker domain model."""
import json
import logging
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import Optional

from yks_tracker.errors import ValidationError

logger = logging.getLogger(__name__)

EXAM_TYPES = ("TYT", "AYT")
PRIORITIES = ("low", "medium", "high")
TASK_CATEGORIES = (
    "genel", "turkce", "sosyal", "matematik", "fizik", "kimya", "biyoloji",
    "ayt-matematik", "ayt-fizik", "ayt-kimya", "ayt-biyoloji",
)
RECURRENCE_TYPES = ("none", "weekly", "monthly")
GOAL_CATEGORIES = ("tyt", "ayt", "siralama", "genel")
TIMEFRAMES = ("günlük", "haftalık", "aylık", "yıllık")
FLASHCARD_SUBJECTS = (
    "turkce", "matematik", "fizik", "kimya", "biyoloji",
    "tarih", "cografya", "felsefe", "genel",
)
DIFFICULTIES = ("easy", "medium", "hard")

DEFAULT_TASK_COLOR = "#8B5CF6"


def check_choice(name: str, value, choices: tuple) -> None:
    if value not in choices:
        raise ValidationError(f"{name} must be one of {', '.join(choices)}; got {value!r}")


def to_count(name: str, value) -> int:
    """Parse a non-negative question count. Blank input counts as zero."""
    if value is None or value == "":
        return 0
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer; got {value!r}") from None
    if count < 0:
        raise ValidationError(f"{name} must not be negative; got {count}")
    return count


def _to_float(name: str, value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number; got {value!r}") from None


def _to_datetime(value, name: str = "timestamp") -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an ISO datetime; got {value!r}") from None


def _jsonable(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


class Record:
    """Dict round-tripping shared by the stored entities."""

    DATETIME_FIELDS: tuple = ("created_at",)

    def to_dict(self) -> dict:
        return _jsonable(asdict(self))

    @classmethod
    def from_dict(cls, data: dict):
        values = dict(data)
        for name in cls.DATETIME_FIELDS:
            values[name] = _to_datetime(values.get(name), name)
        return cls(**values)

    def _parse_datetimes(self) -> None:
        for name in self.DATETIME_FIELDS:
            setattr(self, name, _to_datetime(getattr(self, name), name))


@dataclass
class Task(Record):
    id: str
    title: str
    description: Optional[str] = None
    priority: str = "medium"
    category: str = "genel"
    color: str = DEFAULT_TASK_COLOR
    completed: bool = False
    completed_at: Optional[datetime] = None
    due_date: Optional[str] = None
    recurrence_type: str = "none"
    recurrence_end_date: Optional[str] = None
    created_at: Optional[datetime] = None

    DATETIME_FIELDS = ("completed_at", "created_at")

    def __post_init__(self):
        self._parse_datetimes()
        check_choice("priority", self.priority, PRIORITIES)
        check_choice("category", self.category, TASK_CATEGORIES)
        check_choice("recurrence_type", self.recurrence_type, RECURRENCE_TYPES)


@dataclass
class Mood(Record):
    id: str
    mood: str
    mood_bg: Optional[str] = None
    note: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class Goal(Record):
    id: str
    title: str
    target_value: float = 100.0
    current_value: float = 0.0
    unit: str = "net"
    description: Optional[str] = None
    category: str = "genel"
    timeframe: str = "aylık"
    target_date: Optional[str] = None
    completed: bool = False
    created_at: Optional[datetime] = None

    def __post_init__(self):
        self.target_value = _to_float("target_value", self.target_value)
        self.current_value = _to_float("current_value", self.current_value)
        check_choice("category", self.category, GOAL_CATEGORIES)
        check_choice("timeframe", self.timeframe, TIMEFRAMES)


@dataclass
class WrongTopic:
    """A topic the user got wrong, optionally tagged with difficulty and category."""
    topic: str
    difficulty: Optional[str] = None
    category: Optional[str] = None

    @classmethod
    def coerce(cls, item) -> "WrongTopic":
        if isinstance(item, WrongTopic):
            return item
        if isinstance(item, str):
            item = {"topic": item}
        if isinstance(item, dict):
            topic = item.get("topic")
            if not isinstance(topic, str) or not topic.strip():
                raise ValidationError(f"wrong topic needs a topic name; got {item!r}")
            return cls(
                topic=topic,
                difficulty=item.get("difficulty"),
                category=item.get("category"),
            )
        raise ValidationError(f"wrong topic must be a string or mapping; got {item!r}")


@dataclass
class QuestionLog(Record):
    id: str
    exam_type: str
    subject: str
    correct_count: int
    wrong_count: int
    study_date: str
    blank_count: int = 0
    topic: Optional[str] = None
    wrong_topics: list = field(default_factory=list)
    time_spent_minutes: Optional[int] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        check_choice("exam_type", self.exam_type, EXAM_TYPES)
        self.correct_count = to_count("correct_count", self.correct_count)
        self.wrong_count = to_count("wrong_count", self.wrong_count)
        self.blank_count = to_count("blank_count", self.blank_count)
        if self.time_spent_minutes is not None:
            self.time_spent_minutes = to_count("time_spent_minutes", self.time_spent_minutes)
        self.wrong_topics = [WrongTopic.coerce(t) for t in (self.wrong_topics or [])]

    @property
    def total_questions(self) -> int:
        return self.correct_count + self.wrong_count + self.blank_count


@dataclass
class SubjectResult:
    """Per-subject breakdown inside an exam result."""
    correct: int = 0
    wrong: int = 0
    blank: int = 0
    wrong_topics: list = field(default_factory=list)

    def __post_init__(self):
        self.correct = to_count("correct", self.correct)
        self.wrong = to_count("wrong", self.wrong)
        self.blank = to_count("blank", self.blank)
        if not isinstance(self.wrong_topics, list):
            raise ValidationError(f"wrong_topics must be a list; got {self.wrong_topics!r}")
        self.wrong_topics = [str(t) for t in self.wrong_topics]

    @classmethod
    def coerce(cls, item) -> "SubjectResult":
        if isinstance(item, SubjectResult):
            return item
        if not isinstance(item, dict):
            raise ValidationError(f"subject result must be a mapping; got {item!r}")
        return cls(
            correct=item.get("correct", 0),
            wrong=item.get("wrong", 0),
            blank=item.get("blank", 0),
            wrong_topics=item.get("wrong_topics") or [],
        )


def parse_subjects_data(raw) -> Optional[dict]:
    """Normalise exam subject data from JSON text or a mapping.

    Anything that cannot be read as ``{subject: {correct, wrong, blank,
    wrong_topics}}`` is logged and treated as absent.
    """
    if raw is None or raw == "":
        return None
    data = raw
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Skipping unparseable subjects_data: %.60r", raw)
            return None
    if not isinstance(data, dict):
        logger.warning("Skipping subjects_data that is not a mapping: %.60r", data)
        return None
    try:
        return {str(key): SubjectResult.coerce(value) for key, value in data.items()}
    except ValidationError as e:
        logger.warning("Skipping malformed subjects_data: %s", e)
        return None


@dataclass
class ExamResult(Record):
    id: str
    exam_name: str
    exam_date: str
    exam_type: str = "TYT"
    tyt_net: float = 0.0
    ayt_net: float = 0.0
    subjects_data: Optional[dict] = None
    ranking: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        check_choice("exam_type", self.exam_type, EXAM_TYPES)
        self.tyt_net = _to_float("tyt_net", self.tyt_net)
        self.ayt_net = _to_float("ayt_net", self.ayt_net)
        self.subjects_data = parse_subjects_data(self.subjects_data)


@dataclass
class ExamSubjectNet(Record):
    id: str
    exam_id: str
    subject: str
    exam_type: str = "TYT"
    net_score: float = 0.0
    correct_count: int = 0
    wrong_count: int = 0
    blank_count: int = 0
    created_at: Optional[datetime] = None

    def __post_init__(self):
        check_choice("exam_type", self.exam_type, EXAM_TYPES)
        self.net_score = _to_float("net_score", self.net_score)
        self.correct_count = to_count("correct_count", self.correct_count)
        self.wrong_count = to_count("wrong_count", self.wrong_count)
        self.blank_count = to_count("blank_count", self.blank_count)


@dataclass
class Flashcard(Record):
    id: str
    question: str
    answer: str
    exam_type: str = "TYT"
    subject: str = "genel"
    topic: Optional[str] = None
    difficulty: str = "medium"
    last_reviewed: Optional[datetime] = None
    next_review: Optional[datetime] = None
    review_count: int = 0
    created_at: Optional[datetime] = None

    DATETIME_FIELDS = ("last_reviewed", "next_review", "created_at")

    def __post_init__(self):
        check_choice("exam_type", self.exam_type, EXAM_TYPES)
        check_choice("subject", self.subject, FLASHCARD_SUBJECTS)
        check_choice("difficulty", self.difficulty, DIFFICULTIES)
        self.review_count = to_count("review_count", self.review_count)
        self._parse_datetimes()


@dataclass
class FlashcardError:
    """A wrong answer given while drilling a flashcard."""
    card_id: str
    question: str
    topic: str
    difficulty: str
    user_answer: str
    correct_answer: str
    timestamp: datetime


# --- Partial updates ---


class _Unset:
    def __repr__(self):
        return "UNSET"


UNSET = _Unset()


class Patch:
    """Base for partial updates. Fields left as UNSET are not touched."""

    def changes(self) -> dict:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }


@dataclass
class TaskPatch(Patch):
    title: str = UNSET
    description: Optional[str] = UNSET
    priority: str = UNSET
    category: str = UNSET
    color: str = UNSET
    completed: bool = UNSET
    due_date: Optional[str] = UNSET
    recurrence_type: str = UNSET
    recurrence_end_date: Optional[str] = UNSET


@dataclass
class GoalPatch(Patch):
    title: str = UNSET
    description: Optional[str] = UNSET
    category: str = UNSET
    target_value: float = UNSET
    current_value: float = UNSET
    unit: str = UNSET
    timeframe: str = UNSET
    target_date: Optional[str] = UNSET
    completed: bool = UNSET


@dataclass
class QuestionLogPatch(Patch):
    exam_type: str = UNSET
    subject: str = UNSET
    topic: Optional[str] = UNSET
    correct_count: int = UNSET
    wrong_count: int = UNSET
    blank_count: int = UNSET
    study_date: str = UNSET
    wrong_topics: list = UNSET
    time_spent_minutes: Optional[int] = UNSET


@dataclass
class ExamResultPatch(Patch):
    exam_name: str = UNSET
    exam_date: str = UNSET
    exam_type: str = UNSET
    tyt_net: float = UNSET
    ayt_net: float = UNSET
    subjects_data: Optional[dict] = UNSET
    ranking: Optional[str] = UNSET
    notes: Optional[str] = UNSET


@dataclass
class ExamSubjectNetPatch(Patch):
    exam_type: str = UNSET
    subject: str = UNSET
    net_score: float = UNSET
    correct_count: int = UNSET
    wrong_count: int = UNSET
    blank_count: int = UNSET


@dataclass
class FlashcardPatch(Patch):
    exam_type: str = UNSET
    subject: str = UNSET
    topic: Optional[str] = UNSET
    question: str = UNSET
    answer: str = UNSET
    difficulty: str = UNSET
    last_reviewed: Optional[datetime] = UNSET
    next_review: Optional[datetime] = UNSET

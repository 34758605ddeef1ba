"""Wrong-topic frequency analysis and priority classification."""
EXAM_WEIGHT = 2
LOG_WEIGHT = 1
MIN_MENTIONS = 2

# (priority, min mentions, min frequency %, color), checked top-down.
PRIORITY_TIERS = (
    ("critical", 10, 50, "#DC2626"),
    ("high", 6, 30, "#EA580C"),
    ("medium", 3, 15, "#D97706"),
)
LOW_PRIORITY = ("low", "#16A34A")

SUBJECT_NAMES = {
    "turkce": "Türkçe",
    "matematik": "Matematik",
    "sosyal": "Sosyal",
    "fen": "Fen",
    "fizik": "Fizik",
    "kimya": "Kimya",
    "biyoloji": "Biyoloji",
}


def _exam_wrong_topics(exam):
    """Yield (subject_key, topic) for every non-blank wrong topic in an exam."""
    for subject_key, result in (exam.subjects_data or {}).items():
        for topic in result.wrong_topics:
            if topic and topic.strip():
                yield subject_key, topic


def get_topic_stats(store) -> list[dict]:
    """Topics the user keeps getting wrong, most mentioned first.

    Practice-log mentions count once, exam mentions twice. Frequency is the
    share of question logs the topic appeared in; exam sessions add to the
    numerator but the denominator is always the question log count.
    """
    logs = store.get_question_logs()
    stats = {}

    for log in logs:
        for item in log.wrong_topics:
            if not item.topic.strip():
                continue
            entry = stats.setdefault(item.topic, {"mentions": 0, "sessions": set()})
            entry["mentions"] += LOG_WEIGHT
            entry["sessions"].add(log.id)

    for exam in store.get_exam_results():
        for _, topic in _exam_wrong_topics(exam):
            entry = stats.setdefault(topic, {"mentions": 0, "sessions": set()})
            entry["mentions"] += EXAM_WEIGHT
            entry["sessions"].add(f"exam_{exam.id}")

    total_sessions = len(logs)
    result = [
        {
            "topic": topic,
            "wrong_mentions": entry["mentions"],
            "total_sessions": len(entry["sessions"]),
            "mention_frequency": (
                len(entry["sessions"]) / total_sessions * 100 if total_sessions else 0.0
            ),
        }
        for topic, entry in stats.items()
        if entry["mentions"] >= MIN_MENTIONS
    ]
    result.sort(key=lambda s: s["wrong_mentions"], reverse=True)
    return result


def classify_priority(wrong_mentions: int, mention_frequency: float) -> tuple[str, str]:
    """Return (priority, color). Either threshold is enough to reach a tier."""
    for priority, min_mentions, min_frequency, color in PRIORITY_TIERS:
        if wrong_mentions >= min_mentions or mention_frequency >= min_frequency:
            return priority, color
    return LOW_PRIORITY


def get_priority_topics(store) -> list[dict]:
    topics = []
    for stat in get_topic_stats(store):
        priority, color = classify_priority(stat["wrong_mentions"], stat["mention_frequency"])
        topics.append({
            "topic": stat["topic"],
            "wrong_mentions": stat["wrong_mentions"],
            "mention_frequency": stat["mention_frequency"],
            "priority": priority,
            "color": color,
        })
    return topics


def get_missing_topics(store) -> list[dict]:
    """Wrong topics grouped per subject with where and when they were last seen."""
    topics = {}

    def _add(subject, topic, source, seen, difficulty=None, category=None):
        key = (subject, topic)
        entry = topics.get(key)
        if entry is None:
            topics[key] = {
                "topic": topic,
                "subject": subject,
                "source": source,
                "frequency": 1,
                "last_seen": seen,
                "difficulty": difficulty,
                "category": category,
            }
        else:
            entry["frequency"] += 1
            entry["last_seen"] = max(entry["last_seen"], seen)

    for log in store.get_question_logs():
        for item in log.wrong_topics:
            if item.topic:
                _add(log.subject, item.topic, "question", log.study_date,
                     item.difficulty, item.category)

    for exam in store.get_exam_results():
        for subject_key, topic in _exam_wrong_topics(exam):
            _add(SUBJECT_NAMES.get(subject_key, subject_key), topic, "exam", exam.exam_date)

    return sorted(topics.values(), key=lambda t: t["frequency"], reverse=True)

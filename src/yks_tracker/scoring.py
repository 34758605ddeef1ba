"""Net score, OBP and solved-question statistics."""
from yks_tracker.models import EXAM_TYPES, Goal, SubjectResult, check_choice

WRONG_PER_CORRECT = 4
OBP_MAX = 500.0

# Question counts per section, used to clamp calculator input.
SECTION_LIMITS = {
    ("TYT", "turkce"): 40,
    ("TYT", "sosyal"): 20,
    ("TYT", "matematik"): 40,
    ("TYT", "fen"): 20,
    ("AYT", "matematik"): 40,
    ("AYT", "fizik"): 14,
    ("AYT", "kimya"): 13,
    ("AYT", "biyoloji"): 13,
}
DEFAULT_SECTION_LIMIT = 40

# Subjects that only appear in one exam type. Shared subjects (matematik)
# count toward the exam's own type.
TYT_ONLY_SUBJECTS = ("turkce", "sosyal", "fen")
AYT_ONLY_SUBJECTS = ("fizik", "kimya", "biyoloji")


def calc_net(correct: float, wrong: float) -> float:
    """Four wrong answers cancel one correct answer. Never negative."""
    return max(0.0, correct - wrong / WRONG_PER_CORRECT)


def calc_exam_net(subjects) -> float:
    """Sum of subject nets. Accepts SubjectResults or (correct, wrong) pairs.

    Each subject is clamped at 0 before summing.
    """
    total = 0.0
    for subject in subjects:
        if isinstance(subject, SubjectResult):
            total += calc_net(subject.correct, subject.wrong)
        else:
            correct, wrong = subject
            total += calc_net(correct, wrong)
    return total


def exam_type_of_subject(exam_type: str, subject_key: str) -> str:
    key = subject_key.lower()
    if key in AYT_ONLY_SUBJECTS or key.startswith("ayt-"):
        return "AYT"
    if key in TYT_ONLY_SUBJECTS:
        return "TYT"
    return exam_type


def calc_exam_nets(exam_type: str, subjects_data: dict | None) -> tuple[float, float]:
    """(tyt_net, ayt_net) for an exam, each summed over that type's subjects."""
    check_choice("exam_type", exam_type, EXAM_TYPES)
    sections = {"TYT": [], "AYT": []}
    for key, result in (subjects_data or {}).items():
        sections[exam_type_of_subject(exam_type, key)].append(result)
    return (
        round(calc_exam_net(sections["TYT"]), 2),
        round(calc_exam_net(sections["AYT"]), 2),
    )


def calc_obp(diploma_score: float, previously_placed: bool = False) -> float:
    """Diploma grade scaled to 500, halved for students placed in a prior year."""
    obp = (diploma_score / 100) * OBP_MAX
    if previously_placed:
        obp = obp / 2
    return min(OBP_MAX, max(0.0, obp))


def section_limit(exam_type: str, subject: str) -> int:
    return SECTION_LIMITS.get((exam_type, subject), DEFAULT_SECTION_LIMIT)


def clamp_answer_count(exam_type: str, subject: str, value: int) -> int:
    return min(max(0, value), section_limit(exam_type, subject))


def get_subject_solved_stats(store) -> list[dict]:
    """Questions solved and time spent per subject, most practised first."""
    totals = {}
    for log in store.get_question_logs():
        entry = totals.setdefault(log.subject, {"questions": 0, "minutes": 0})
        entry["questions"] += log.total_questions
        entry["minutes"] += log.time_spent_minutes or 0
    stats = [
        {
            "subject": subject,
            "total_questions": entry["questions"],
            "total_time_minutes": entry["minutes"],
            "average_time_per_question": (
                entry["minutes"] / entry["questions"] if entry["questions"] else 0.0
            ),
        }
        for subject, entry in totals.items()
        if entry["questions"] > 0
    ]
    stats.sort(key=lambda s: s["total_questions"], reverse=True)
    return stats


def goal_progress(goal: Goal) -> float:
    """Percent of the way to a goal, capped at 100.

    Ranking goals improve downwards: reaching or beating the target rank is 100%.
    """
    if goal.category == "siralama":
        if goal.current_value <= 0:
            return 0.0
        progress = goal.target_value / goal.current_value * 100
    elif goal.target_value <= 0:
        return 100.0
    else:
        progress = goal.current_value / goal.target_value * 100
    return round(min(100.0, max(0.0, progress)), 1)

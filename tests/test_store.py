"""Tests for the entity store CRUD operations."""
from datetime import datetime, timedelta

import pytest

from yks_tracker.errors import ReferentialIntegrityError, ValidationError
from yks_tracker.models import (
    ExamSubjectNetPatch, FlashcardError, FlashcardPatch, GoalPatch, QuestionLogPatch, TaskPatch,
)


def test_create_task_applies_defaults(store, clock):
    task = store.create_task(title="Deneme çöz")
    assert task.priority == "medium"
    assert task.completed is False
    assert task.created_at == clock.now
    assert store.get_task(task.id) == task


def test_created_ids_are_unique(store):
    ids = {store.create_task(title=f"t{i}").id for i in range(20)}
    assert len(ids) == 20


def test_create_rejects_store_assigned_fields(store):
    with pytest.raises(ValidationError):
        store.create_task(title="x", id="mine")


def test_create_rejects_unknown_field(store):
    with pytest.raises(ValidationError):
        store.create_task(title="x", colour="red")


def test_tasks_sorted_by_priority_then_newest(store, clock):
    low = store.create_task(title="low", priority="low")
    clock.advance(minutes=1)
    high_old = store.create_task(title="high old", priority="high")
    clock.advance(minutes=1)
    high_new = store.create_task(title="high new", priority="high")
    assert [t.id for t in store.get_tasks()] == [high_new.id, high_old.id, low.id]


def test_update_task_merges_patch(store):
    task = store.create_task(title="Eski", description="not")
    updated = store.update_task(task.id, TaskPatch(title="Yeni"))
    assert updated.title == "Yeni"
    assert updated.description == "not"
    assert updated.created_at == task.created_at


def test_update_task_validates_choices(store):
    task = store.create_task(title="x")
    with pytest.raises(ValidationError):
        store.update_task(task.id, TaskPatch(priority="asap"))
    assert store.get_task(task.id).priority == "medium"


def test_update_missing_returns_none(store):
    assert store.update_task("nope", TaskPatch(title="x")) is None
    assert store.update_goal("nope", GoalPatch(title="x")) is None
    assert store.update_question_log("nope", QuestionLogPatch(subject="x")) is None
    assert store.update_flashcard("nope", FlashcardPatch(answer="x")) is None
    assert store.update_exam_subject_net("nope", ExamSubjectNetPatch(subject="x")) is None


def test_delete_returns_whether_record_existed(store):
    task = store.create_task(title="x")
    assert store.delete_task(task.id) is True
    assert store.delete_task(task.id) is False
    assert store.get_task(task.id) is None


def test_toggle_task_complete_sets_and_clears_timestamp(store, clock):
    task = store.create_task(title="x")
    done = store.toggle_task_complete(task.id)
    assert done.completed is True
    assert done.completed_at == clock.now
    reopened = store.toggle_task_complete(task.id)
    assert reopened.completed is False
    assert reopened.completed_at is None
    assert store.toggle_task_complete("nope") is None


def test_tasks_by_date_matches_due_date(store):
    due = store.create_task(title="due", due_date="2025-03-12")
    store.create_task(title="other", due_date="2025-03-13T10:00:00")
    assert [t.id for t in store.get_tasks_by_date("2025-03-12")] == [due.id]


def test_undated_tasks_only_show_today(store):
    undated = store.create_task(title="undated")
    assert [t.id for t in store.get_tasks_by_date("2025-03-10")] == [undated.id]
    assert store.get_tasks_by_date("2025-03-11") == []
    assert store.get_tasks_by_date("2025-03-09") == []


def test_undated_task_from_yesterday_not_in_today(store, clock):
    store.create_task(title="old")
    clock.advance(days=1)
    assert store.get_tasks_by_date("2025-03-11") == []


def test_daily_summary_has_one_entry_per_day(store):
    summary = store.get_daily_summary(7)
    assert len(summary) == 7
    assert summary[0]["date"] == "2025-03-10"
    assert summary[-1]["date"] == "2025-03-04"


def test_daily_summary_productivity(store, clock):
    for i in range(3):
        store.toggle_task_complete(store.create_task(title=f"t{i}").id)
    for i in range(6):
        store.create_task(title=f"later{i}", due_date="2025-04-01")
    mood = store.create_mood(mood="😊")
    summary = store.get_daily_summary(7)
    today = summary[0]
    assert today["tasks_completed"] == 3
    assert today["total_tasks"] == 9
    assert today["productivity"] == 60
    assert today["moods"] == [mood]
    assert summary[1]["tasks_completed"] == 0
    assert summary[1]["total_tasks"] == 0
    assert summary[1]["productivity"] == 0


def test_daily_summary_productivity_caps_at_100(store):
    for i in range(7):
        store.toggle_task_complete(store.create_task(title=f"t{i}").id)
    assert store.get_daily_summary(1)[0]["productivity"] == 100


def test_latest_mood(store, clock):
    assert store.get_latest_mood() is None
    store.create_mood(mood="😐")
    clock.advance(hours=2)
    latest = store.create_mood(mood="😊", note="iyi gün")
    assert store.get_latest_mood() == latest


def test_goal_crud(store):
    goal = store.create_goal(title="TYT 75 net", target_value=75, category="tyt")
    assert goal.current_value == 0.0
    assert goal.timeframe == "aylık"
    updated = store.update_goal(goal.id, GoalPatch(current_value=70, completed=False))
    assert updated.current_value == 70.0
    assert store.get_goals() == [updated]
    assert store.delete_goal(goal.id) is True


def test_question_log_defaults_and_date_range(store):
    a = store.create_question_log(exam_type="TYT", subject="Türkçe", correct_count=20,
                                  wrong_count=5, study_date="2025-03-01")
    b = store.create_question_log(exam_type="TYT", subject="Türkçe", correct_count=20,
                                  wrong_count=5, study_date="2025-03-05")
    store.create_question_log(exam_type="AYT", subject="Fizik", correct_count=10,
                              wrong_count=2, study_date="2025-03-09")
    assert a.blank_count == 0
    assert a.wrong_topics == []
    in_range = store.get_question_logs_by_date_range("2025-03-01", "2025-03-05")
    assert [log.id for log in in_range] == [b.id, a.id]


def test_update_question_log_does_not_cross_validate(store):
    log = store.create_question_log(exam_type="TYT", subject="Türkçe", correct_count=20,
                                    wrong_count=5, study_date="2025-03-01")
    updated = store.update_question_log(log.id, QuestionLogPatch(exam_type="AYT"))
    assert updated.exam_type == "AYT"
    assert updated.subject == "Türkçe"


def test_delete_all_question_logs(store):
    for _ in range(3):
        store.create_question_log(exam_type="TYT", subject="Fen", correct_count=1,
                                  wrong_count=1, study_date="2025-03-01")
    assert store.delete_all_question_logs() is True
    assert store.get_question_logs() == []


def test_exam_result_nets_derived_from_subjects(store):
    exam = store.create_exam_result(
        exam_name="Deneme 1", exam_date="2025-03-02", exam_type="TYT",
        subjects_data={
            "turkce": {"correct": 30, "wrong": 8, "blank": 2, "wrong_topics": []},
            "matematik": {"correct": 20, "wrong": 4, "blank": 16, "wrong_topics": []},
        },
    )
    assert exam.tyt_net == 47.0
    assert exam.ayt_net == 0.0


def test_tyt_exam_with_ayt_subject_splits_nets(store):
    exam = store.create_exam_result(
        exam_name="Karma", exam_date="2025-03-02", exam_type="TYT",
        subjects_data={"turkce": {"correct": 10}, "fizik": {"correct": 10}},
    )
    assert exam.tyt_net == 10.0
    assert exam.ayt_net == 10.0


def test_exam_result_keeps_given_nets(store):
    exam = store.create_exam_result(exam_name="Deneme", exam_date="2025-03-02",
                                    tyt_net="68.75", subjects_data={"turkce": {"correct": 1}})
    assert exam.tyt_net == 68.75
    assert exam.ayt_net == 0.0


def test_exam_result_with_malformed_subjects_is_stored_without_them(store):
    exam = store.create_exam_result(exam_name="Deneme", exam_date="2025-03-02",
                                    subjects_data="{broken")
    assert exam.subjects_data is None
    assert store.get_exam_result(exam.id) is not None


def test_subject_net_requires_existing_exam(store):
    with pytest.raises(ReferentialIntegrityError):
        store.create_exam_subject_net(exam_id="missing", subject="Matematik", correct_count=10)
    assert store.get_exam_subject_nets() == []


def test_subject_net_score_derived_from_counts(store):
    exam = store.create_exam_result(exam_name="Deneme", exam_date="2025-03-02")
    net = store.create_exam_subject_net(exam_id=exam.id, subject="Matematik",
                                        correct_count="40", wrong_count="4")
    assert net.net_score == 39.0
    assert net.blank_count == 0


def test_subject_nets_by_exam_sorted_by_subject(store):
    exam = store.create_exam_result(exam_name="Deneme", exam_date="2025-03-02")
    other = store.create_exam_result(exam_name="Diğer", exam_date="2025-03-03")
    store.create_exam_subject_net(exam_id=exam.id, subject="Türkçe")
    store.create_exam_subject_net(exam_id=exam.id, subject="Fen")
    store.create_exam_subject_net(exam_id=other.id, subject="Matematik")
    assert [n.subject for n in store.get_exam_subject_nets_by_exam_id(exam.id)] == ["Fen", "Türkçe"]


def test_delete_exam_cascades_to_subject_nets(store):
    exam = store.create_exam_result(exam_name="Deneme", exam_date="2025-03-02")
    keep = store.create_exam_result(exam_name="Diğer", exam_date="2025-03-03")
    store.create_exam_subject_net(exam_id=exam.id, subject="Türkçe")
    store.create_exam_subject_net(exam_id=exam.id, subject="Fen")
    kept = store.create_exam_subject_net(exam_id=keep.id, subject="Matematik")
    assert store.delete_exam_result(exam.id) is True
    assert store.get_exam_subject_nets_by_exam_id(exam.id) == []
    assert store.get_exam_subject_nets() == [kept]
    assert store.delete_exam_result(exam.id) is False


def test_delete_all_exam_results_clears_subject_nets(store):
    exam = store.create_exam_result(exam_name="Deneme", exam_date="2025-03-02")
    store.create_exam_subject_net(exam_id=exam.id, subject="Türkçe")
    assert store.delete_all_exam_results() is True
    assert store.get_exam_results() == []
    assert store.get_exam_subject_nets() == []


def test_delete_subject_nets_by_exam_id(store):
    exam = store.create_exam_result(exam_name="Deneme", exam_date="2025-03-02")
    assert store.delete_exam_subject_nets_by_exam_id(exam.id) is False
    net = store.create_exam_subject_net(exam_id=exam.id, subject="Türkçe")
    store.update_exam_subject_net(net.id, ExamSubjectNetPatch(correct_count=12))
    assert store.get_exam_subject_net(net.id).correct_count == 12
    assert store.delete_exam_subject_nets_by_exam_id(exam.id) is True
    assert store.get_exam_result(exam.id) is not None


def test_new_flashcard_is_due_now(store, clock):
    card = store.create_flashcard(question="Q?", answer="A", review_count=7)
    assert card.next_review == clock.now
    assert card.review_count == 0
    assert card.last_reviewed is None


def test_flashcard_keeps_explicit_next_review(store, clock):
    later = clock.now + timedelta(days=3)
    card = store.create_flashcard(question="Q?", answer="A", next_review=later)
    assert card.next_review == later


def test_flashcard_update_and_delete(store):
    card = store.create_flashcard(question="Q?", answer="A", subject="fizik")
    updated = store.update_flashcard(card.id, FlashcardPatch(answer="B", topic="Optik"))
    assert updated.answer == "B"
    assert updated.topic == "Optik"
    assert store.delete_flashcard(card.id) is True
    assert store.get_flashcards() == []


def test_flashcard_errors_grouped_by_difficulty(store):
    for level in ("easy", "hard", "hard"):
        store.add_flashcard_error(FlashcardError(
            card_id="c", question="Q", topic="T", difficulty=level,
            user_answer="x", correct_answer="y", timestamp=datetime(2025, 3, 10),
        ))
    grouped = store.get_flashcard_errors_by_difficulty()
    assert len(grouped["easy"]) == 1
    assert grouped["medium"] == []
    assert len(grouped["hard"]) == 2
    errors = store.get_flashcard_errors()
    errors.clear()
    assert len(store.get_flashcard_errors()) == 3

"""Tests for the results screen: overview, table and candidate detail."""

import csv
import io

import pytest

from interview_studio.middleware.error_handler import NotFoundError, ValidationAPIError
from interview_studio.schemas.results import CandidateScore, PerformanceData, SortState
from interview_studio.services.results import (
    ResultsView,
    build_criteria_columns,
    format_score,
    next_sort,
    overall_score,
    performance_overview,
)


def scores(*values):
    return [
        CandidateScore(criterion_id=f"c{i}", criterion_name=f"C{i}", score=value)
        for i, value in enumerate(values)
    ]


@pytest.fixture
def view(store, graded_interview):
    return ResultsView.load(store, graded_interview)


def names(rows):
    return [row.name for row in rows]


def test_overall_ignores_booleans():
    assert overall_score(scores(4, 5, True)) == 4.5


def test_overall_ignores_text():
    assert overall_score(scores(3, "strong", 5)) == 4


def test_overall_absent_without_numeric_scores():
    assert overall_score(scores(True, "n/a")) is None
    assert overall_score([]) is None


def test_format_score():
    assert format_score(4) == "4.0"
    assert format_score(True) == "Yes"
    assert format_score(False) == "No"
    assert format_score("great") == "great"
    assert format_score(None) == "N/A"


def test_criteria_columns_general_then_tasks(graded_interview):
    columns = build_criteria_columns(graded_interview)

    assert [c.id for c in columns] == ["comm-general", "prof-general", "depth-task1", "calc-task2"]
    assert columns[0].task_name is None
    assert columns[2].task_name == "Behavioral Questions"
    assert columns[3].task_name == "Merger Math"


def test_overview(view):
    overview = view.overview()

    assert overview.total_candidates == 5
    assert overview.average_overall_score == pytest.approx(4.0)
    assert overview.top_performer.name == "Emily Rodriguez"
    assert overview.high_performer_count == 3

    averages = {a.id: a.average for a in overview.criterion_averages}
    assert averages["comm-general"] == 3.8
    assert averages["prof-general"] == 4.4
    # Lisa's boolean score counts as 0
    assert averages["calc-task2"] == 3.2

    assert overview.strongest_area.id == "prof-general"
    assert overview.weakest_area.id == "calc-task2"


def test_overview_without_candidates():
    overview = performance_overview(PerformanceData())
    assert overview.total_candidates == 0
    assert overview.average_overall_score == 0
    assert overview.top_performer is None
    assert overview.strongest_area is None


def test_top_performer_first_wins_ties(candidate_factory):
    data = PerformanceData(candidates=[
        candidate_factory("a", "Ann", "ann@x.com", 4.0, []),
        candidate_factory("b", "Ben", "ben@x.com", 4.0, []),
    ])
    assert performance_overview(data).top_performer.name == "Ann"


def test_sort_cycle():
    state = SortState()
    state = next_sort(state, "name")
    assert (state.key, state.direction) == ("name", "asc")
    state = next_sort(state, "name")
    assert (state.key, state.direction) == ("name", "desc")
    state = next_sort(state, "name")
    assert (state.key, state.direction) == (None, None)
    state = next_sort(state, "name")
    assert state.direction == "asc"


def test_switching_column_restarts_at_asc():
    state = next_sort(next_sort(SortState(), "name"), "name")
    assert state.direction == "desc"

    state = next_sort(state, "overallScore")
    assert (state.key, state.direction) == ("overallScore", "asc")


def test_unsorted_keeps_loaded_order(view):
    assert names(view.rows()) == [
        "Sarah Johnson", "Michael Chen", "Emily Rodriguez", "David Park", "Lisa Thompson",
    ]


def test_sort_by_overall(view):
    view.toggle_sort("overallScore")
    assert names(view.rows())[0] == "David Park"

    view.toggle_sort("overallScore")
    assert names(view.rows())[:2] == ["Emily Rodriguez", "Sarah Johnson"]


def test_sort_by_criterion_treats_non_numeric_as_zero(view):
    view.toggle_sort("calc-task2")
    assert names(view.rows())[0] == "Lisa Thompson"


def test_sort_is_stable_for_ties(view):
    view.toggle_sort("prof-general")
    assert names(view.rows())[:3] == ["Michael Chen", "David Park", "Lisa Thompson"]


def test_search_composes_with_sort(view):
    view.toggle_sort("overallScore")
    view.toggle_sort("overallScore")

    rows = view.rows("CHEN")
    assert names(rows) == ["Michael Chen"]

    rows = view.rows("sarah.johnson@")
    assert names(rows) == ["Sarah Johnson"]

    rows = [r for r in view.rows("") if r.name in ("Sarah Johnson", "Michael Chen")]
    assert names(rows) == ["Sarah Johnson", "Michael Chen"]


def test_unknown_sort_key(view):
    with pytest.raises(ValidationAPIError):
        view.toggle_sort("favouriteColour")


def test_table_empty_states(view, store, graded_interview):
    assert view.table_view("zzz").empty_state == "no_matches"
    assert view.table_view("").empty_state is None

    empty = ResultsView(graded_interview, [])
    assert empty.table_view("").empty_state == "no_candidates"


def test_export_csv(view):
    view.toggle_sort("name")
    reader = list(csv.reader(io.StringIO(view.export_csv())))

    assert reader[0] == [
        "Name", "Email", "Completed At", "Overall Score",
        "Communication", "Professionalism", "Depth of Answer", "Calculation Accuracy",
    ]
    assert reader[1][0] == "David Park"
    lisa = next(row for row in reader if row[0] == "Lisa Thompson")
    assert lisa[3] == "4.0"
    assert lisa[-1] == "Yes"


def test_stage_and_save_scores(view, store, graded_interview):
    detail = view.stage_scores("candidate-2", {"comm-general": 5})
    assert detail.has_unsaved_changes is True
    assert detail.candidate.overall_score == 3.8

    detail = view.save_scores(store, "candidate-2")

    assert detail.has_unsaved_changes is False
    assert detail.candidate.overall_score == pytest.approx(4.25)
    persisted = {c.id: c for c in store.list_results(graded_interview.id)}
    assert persisted["candidate-2"].overall_score == pytest.approx(4.25)
    assert persisted["candidate-2"].scores[0].score == 5


def test_saving_excludes_boolean_from_overall(view, store):
    detail = view.stage_scores("candidate-5", {"comm-general": 5})
    detail = view.save_scores(store, "candidate-5")
    assert detail.candidate.overall_score == pytest.approx(13 / 3)


def test_cannot_stage_non_numeric_or_unknown_scores(view):
    with pytest.raises(ValidationAPIError):
        view.stage_scores("candidate-5", {"calc-task2": 3})
    with pytest.raises(ValidationAPIError):
        view.stage_scores("candidate-1", {"nope": 3})
    assert view.open_candidate("candidate-1").has_unsaved_changes is False


def test_discard_staged_scores(view):
    view.stage_scores("candidate-1", {"comm-general": 1})
    detail = view.discard_scores("candidate-1")
    assert detail.pending_scores == {}


def test_add_note(view, store, graded_interview):
    detail = view.add_note(store, "candidate-2", "Depth of Answer", "Strong examples.", "Jordan Lee")

    notes = detail.candidate.notes
    assert notes[-1].column == "Depth of Answer"
    assert notes[-1].author == "Jordan Lee"
    persisted = {c.id: c for c in store.list_results(graded_interview.id)}
    assert persisted["candidate-2"].notes[-1].content == "Strong examples."


def test_note_must_target_candidate_criterion(view, store):
    with pytest.raises(ValidationAPIError):
        view.add_note(store, "candidate-2", "Charisma", "?", "Jordan Lee")


def test_unknown_candidate(view):
    with pytest.raises(NotFoundError):
        view.open_candidate("candidate-99")


def test_search_is_not_trimmed(view):
    assert names(view.rows(" ")) == [
        "Sarah Johnson", "Michael Chen", "Emily Rodriguez", "David Park", "Lisa Thompson",
    ]
    assert view.table_view("chen ").empty_state == "no_matches"

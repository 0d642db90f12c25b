"""
Tests for the Recommendation/Sort Pipeline and the operation workflow.
"""
import pytest
from datetime import datetime, timedelta, timezone
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_operation(operation_id, priority='Medium', deadline=None, skills=('Dev',), **overrides):
    from shared.models import Operation
    fields = {
        'operation_id': operation_id,
        'title': f'Operation {operation_id}',
        'category': 'Development',
        'difficulty': 'Beginner',
        'priority': priority,
        'deadline': deadline,
        'required_skills': frozenset(skills),
    }
    fields.update(overrides)
    return Operation(**fields)


def ids(operations):
    return [op.operation_id for op in operations]


class TestFilterBySkills:
    """Tests for filter_by_skills."""

    def test_any_overlap_matches(self):
        """One shared skill is enough; full containment is not required."""
        from shared.recommendations import filter_by_skills

        operations = [
            make_operation('a', skills=('Dev', 'Design')),
            make_operation('b', skills=('Narrative',)),
            make_operation('c', skills=('BizOps', 'Dev', 'Coordination')),
        ]

        assert ids(filter_by_skills(operations, {'Dev'})) == ['a', 'c']

    def test_disjoint_skills_excluded(self):
        """Operations sharing no skill with the operator are dropped."""
        from shared.recommendations import filter_by_skills

        operations = [make_operation('a', skills=('Design',)), make_operation('b', skills=('VibeOps',))]

        assert filter_by_skills(operations, ['Dev', 'BizOps']) == []

    def test_empty_inputs(self):
        """Empty skill sets and empty collections are valid and match nothing."""
        from shared.recommendations import filter_by_skills

        assert filter_by_skills([make_operation('a')], set()) == []
        assert filter_by_skills([], {'Dev'}) == []
        assert filter_by_skills([make_operation('a', skills=())], {'Dev'}) == []


class TestSortByPriority:
    """Tests for sort_by_priority and select."""

    def test_priority_then_deadline(self):
        """Critical first; within a priority, soonest deadline first, no deadline last."""
        from shared.recommendations import sort_by_priority

        operations = [
            make_operation('low', priority='Low', deadline=NOW),
            make_operation('high-none', priority='High'),
            make_operation('high-late', priority='High', deadline=NOW + timedelta(days=3)),
            make_operation('critical', priority='Critical'),
            make_operation('high-soon', priority='High', deadline=NOW + timedelta(hours=2)),
            make_operation('medium', priority='Medium', deadline=NOW - timedelta(days=1)),
        ]

        assert ids(sort_by_priority(operations)) == [
            'critical', 'high-soon', 'high-late', 'high-none', 'medium', 'low'
        ]

    def test_stable_for_equal_keys(self):
        """Operations with identical keys keep their original order."""
        from shared.recommendations import sort_by_priority

        operations = [
            make_operation('first', priority='High'),
            make_operation('second', priority='High'),
            make_operation('third', priority='High', deadline=NOW),
            make_operation('fourth', priority='High', deadline=NOW),
        ]

        assert ids(sort_by_priority(operations)) == ['third', 'fourth', 'first', 'second']

    def test_idempotent(self):
        """Sorting an already-sorted list reproduces it."""
        from shared.recommendations import sort_by_priority

        operations = [
            make_operation(str(i), priority=priority, deadline=NOW + timedelta(hours=i) if i % 2 else None)
            for i, priority in enumerate(['Low', 'Critical', 'Medium', 'High', 'Critical', 'Low', 'High'])
        ]

        once = sort_by_priority(operations)
        assert sort_by_priority(once) == once
        assert sorted(ids(once)) == sorted(ids(operations))

    def test_does_not_mutate_input(self):
        """The caller's list is left untouched."""
        from shared.recommendations import sort_by_priority

        operations = [make_operation('a', priority='Low'), make_operation('b', priority='Critical')]
        sort_by_priority(operations)

        assert ids(operations) == ['a', 'b']

    def test_unknown_priority_rejected(self):
        """A priority outside the enumeration is a configuration error."""
        from shared.recommendations import sort_by_priority
        from shared.errors import ConfigurationError

        with pytest.raises(ConfigurationError):
            sort_by_priority([make_operation('a', priority='Urgent'), make_operation('b')])

    def test_select_filters_then_sorts(self):
        """select keeps skill matches only, most urgent first."""
        from shared.recommendations import select

        operations = [
            make_operation('design', priority='Critical', skills=('Design',)),
            make_operation('dev-low', priority='Low'),
            make_operation('dev-high', priority='High'),
        ]

        assert ids(select(operations, {'Dev'})) == ['dev-high', 'dev-low']


class TestBoard:
    """Tests for the board filters."""

    def test_exact_filters(self):
        """Category and priority filters match exactly; 'all' disables a filter."""
        from shared.recommendations import filter_operations

        operations = [
            make_operation('a', priority='High', category='Design'),
            make_operation('b', priority='Low', category='Design'),
            make_operation('c', priority='High', category='Testing'),
        ]

        assert ids(filter_operations(operations, category='Design')) == ['a', 'b']
        assert ids(filter_operations(operations, category='Design', priority='High')) == ['a']
        assert ids(filter_operations(operations, category='all', priority='all')) == ['a', 'b', 'c']

    def test_search_title_and_description(self):
        """Search is a case-insensitive substring match."""
        from shared.recommendations import filter_operations

        operations = [
            make_operation('a', title='Refactor Wallet'),
            make_operation('b', description='Write the WALLET onboarding guide'),
            make_operation('c', title='Logo refresh'),
        ]

        assert ids(filter_operations(operations, search='wallet')) == ['a', 'b']
        assert ids(filter_operations(operations, search='   ')) == ['a', 'b', 'c']

    def test_board_recommended_only(self):
        """Recommended view applies the skill filter before sorting."""
        from shared.recommendations import board

        operations = [
            make_operation('design', priority='Critical', skills=('Design',)),
            make_operation('dev', priority='Low'),
        ]

        assert ids(board(operations, {'Dev'})) == ['design', 'dev']
        assert ids(board(operations, {'Dev'}, recommended_only=True)) == ['dev']


class TestWorkflow:
    """Tests for operation status transitions."""

    def test_linear_workflow(self):
        """Each status can only move forward one step."""
        from shared.workflow import can_transition

        assert can_transition('Open', 'InProgress')
        assert can_transition('InProgress', 'UnderReview')
        assert can_transition('UnderReview', 'Completed')
        assert not can_transition('Open', 'Completed')
        assert not can_transition('UnderReview', 'InProgress')

    def test_cancel_and_terminal(self):
        """Non-terminal statuses can be cancelled; terminal ones go nowhere."""
        from shared.workflow import can_transition, TERMINAL_STATUSES

        assert can_transition('Open', 'Cancelled')
        assert can_transition('UnderReview', 'Cancelled')
        assert not can_transition('Completed', 'Cancelled')
        assert TERMINAL_STATUSES == {'Completed', 'Cancelled'}

    def test_validate_transition_raises(self):
        """Invalid moves raise InvalidTransitionError."""
        from shared.workflow import validate_transition
        from shared.errors import InvalidTransitionError

        with pytest.raises(InvalidTransitionError):
            validate_transition('Completed', 'Completed')


if __name__ == '__main__':
    pytest.main([__file__, '-v'])

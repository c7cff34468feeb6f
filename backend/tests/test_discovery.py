"""
Tests for the Discovery & Ranking Engine.
"""
import pytest

from marketplace.errors import NotFound, ValidationError


class TestListWizards:
    """Tests for filtered, sorted, paginated wizard listings."""

    def test_only_active_wizards(self, engine, make_user):
        wizard = make_user()
        make_user(isDisabled=True)
        make_user(role='admin')
        make_user(isWizard=False)

        result = list(engine.list_wizards())

        assert [w['userId'] for w in result] == [wizard['userId']]

    def test_email_never_returned(self, engine, make_user):
        make_user()

        result = list(engine.list_wizards())

        assert result and all('email' not in w for w in result)

    def test_subject_and_language_filters(self, engine, make_user):
        both = make_user(subjects=['Math', 'Art'], languages=['English', 'French'])
        make_user(subjects=['Math'], languages=['Spanish'])
        make_user(subjects=['History'], languages=['English'])

        result = list(engine.list_wizards(subjects=['Math'], languages=['English']))

        assert [w['userId'] for w in result] == [both['userId']]

    def test_or_within_a_filter(self, engine, make_user):
        math = make_user(subjects=['Math'])
        art = make_user(subjects=['Art'])
        make_user(subjects=['History'])

        result = list(engine.list_wizards(subjects=['Math', 'Art']))

        assert {w['userId'] for w in result} == {math['userId'], art['userId']}

    def test_empty_filter_list_matches_nothing(self, engine, make_user):
        make_user(subjects=['Math'], languages=['English'])

        assert list(engine.list_wizards(subjects=[])) == []
        assert list(engine.list_wizards(subjects=['Math'], languages=[])) == []
        assert engine.count_wizards(languages=[]) == 0
        assert engine.count_wizards(subjects=None) == 1

    def test_unknown_subject_rejected(self, engine):
        with pytest.raises(ValidationError):
            engine.list_wizards(subjects=['Alchemy'])

    def test_count_matches_unbounded_listing(self, engine, make_user):
        for i in range(7):
            make_user(subjects=['Math'] if i % 2 else ['Art'], languages=['English'])
        make_user(isDisabled=True)

        for filters in ({}, {'subjects': ['Math']}, {'subjects': ['Art'], 'languages': ['English']}):
            listed = list(engine.list_wizards(size=None, **filters))
            assert engine.count_wizards(**filters) == len(listed)

    def test_second_page(self, engine, make_user):
        wizards = [make_user() for _ in range(12)]

        result = list(engine.list_wizards(page=2, size=5))

        assert [w['userId'] for w in result] == [w['userId'] for w in wizards[5:10]]

    def test_page_past_the_end_is_empty(self, engine, make_user):
        for _ in range(5):
            make_user()

        assert list(engine.list_wizards(page=2, size=5)) == []

    def test_sort_by_reviews(self, engine, make_user):
        for reviews in (3, 5, 1, 4):
            make_user(reviews=reviews)

        desc = [w['reviews'] for w in engine.list_wizards(sort_by_reviews='desc')]
        asc = [w['reviews'] for w in engine.list_wizards(sort_by_reviews='asc')]
        natural = [w['reviews'] for w in engine.list_wizards(sort_by_reviews='sideways')]

        assert desc == [5, 4, 3, 1]
        assert asc == [1, 3, 4, 5]
        assert natural == [3, 5, 1, 4]

    def test_sort_applies_before_pagination(self, engine, make_user):
        for reviews in range(10):
            make_user(reviews=reviews)

        result = [w['reviews'] for w in engine.list_wizards(sort_by_reviews='desc', page=2, size=3)]

        assert result == [6, 5, 4]

    def test_result_is_single_pass(self, engine, make_user):
        make_user()

        result = engine.list_wizards()

        assert len(list(result)) == 1
        assert list(result) == []

    def test_invalid_page(self, engine):
        with pytest.raises(ValidationError):
            engine.list_wizards(page=0)


class TestLeaderboards:
    """Tests for top sellers and top rated wizards."""

    def test_top_sellers_limit_and_order(self, engine, make_user):
        for jobs_done in [4, 12, 0, 7, 7, 1, 30, 2, 9, 15, 3, 5]:
            make_user(experience={'title': 'T', 'origin': 'O', 'expYears': 1, 'expJobs': jobs_done})

        result = engine.top_sellers()
        counts = [w['experience']['expJobs'] for w in result]

        assert len(result) == 10
        assert counts == sorted(counts, reverse=True)
        assert counts[0] == 30

    def test_top_sellers_projection(self, engine, make_user):
        make_user(name='Merlin', image='m.png', reviews=4)

        summary = engine.top_sellers()[0]

        assert set(summary) == {'userId', 'name', 'image', 'experience'}
        assert set(summary['experience']) == {'expJobs'}

    def test_top_sellers_ignore_non_wizards_only(self, engine, make_user):
        disabled = make_user(isDisabled=True)
        make_user(isWizard=False)

        assert [w['userId'] for w in engine.top_sellers()] == [disabled['userId']]

    def test_top_rated_requires_completed_jobs(self, engine, make_user):
        rookie = make_user(reviews=5)
        veteran = make_user(reviews=4, experience={'title': 'T', 'origin': 'O', 'expYears': 2, 'expJobs': 3})
        star = make_user(reviews=4.8, experience={'title': 'T', 'origin': 'O', 'expYears': 2, 'expJobs': 1})

        result = engine.top_rated_wizards()

        assert [w['userId'] for w in result] == [star['userId'], veteran['userId']]
        assert rookie['userId'] not in {w['userId'] for w in result}
        assert set(result[0]) == {'userId', 'name', 'image', 'reviews'}


class TestGetCalendar:
    """Tests for calendar exposure."""

    def test_returns_calendar(self, engine, make_user):
        user = make_user(calendar={'monday': ['10:00']})

        assert engine.get_calendar(user['userId']) == {
            'userId': user['userId'],
            'calendar': {'monday': ['10:00']}
        }

    def test_client_calendar_visible(self, engine, make_user):
        user = make_user(isWizard=False, role='client')

        assert engine.get_calendar(user['userId'])['userId'] == user['userId']

    def test_hidden_for_disabled_and_admin(self, engine, make_user):
        for user in (make_user(isDisabled=True), make_user(role='admin')):
            with pytest.raises(NotFound):
                engine.get_calendar(user['userId'])

    def test_unknown_user(self, engine):
        with pytest.raises(NotFound):
            engine.get_calendar('missing')

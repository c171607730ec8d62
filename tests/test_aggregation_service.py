from datetime import datetime, timedelta, timezone

import pytest

from backend.app.db import DatabaseError
from backend.app.services.errors import ValidationError
from backend.app.services.surveys.aggregation_service import SurveyAggregationService, get_age_group


def _survey(store, locality=None, ratings=None, amenities=None, age=30, occupation='Engineer', comments='', created_at=None):
    return store.add('surveys', {
        'name': 'x',
        'age': age,
        'occupation': occupation,
        'locality': locality or {'state': 'texas', 'city': 'austin', 'area': 'downtown', 'pincode': '73301'},
        'ratings': ratings if ratings is not None else {},
        'amenities': amenities if amenities is not None else {},
        'comments': comments,
        'createdAt': created_at or datetime(2025, 9, 25, 12, 0),
    })


@pytest.mark.parametrize('age, group', [
    (17, 'Under 18'),
    (18, '18-25'),
    (25, '18-25'),
    (26, '26-35'),
    (35, '26-35'),
    (36, '36-50'),
    (50, '36-50'),
    (51, '50+'),
])
def test_get_age_group(age, group):
    assert get_age_group(age) == group


def test_survey_matching_several_fields_counts_once(store):
    _survey(store, locality={'state': 'texas', 'city': 'texas', 'area': 'texas', 'pincode': ''})
    _survey(store, locality={'state': 'ohio', 'city': 'texas', 'area': 'downtown', 'pincode': ''})
    _survey(store, locality={'state': 'ohio', 'city': 'columbus', 'area': 'downtown', 'pincode': ''})

    service = SurveyAggregationService(store)
    assert len(service.find_surveys_by_locality('Texas')) == 2
    assert sum(service.get_survey_stats_by_locality('TEXAS')['occupationDistribution'].values()) == 2


def test_lookup_runs_one_query_per_locality_field(store):
    SurveyAggregationService(store).find_surveys_by_locality('austin')
    assert store.calls.count(('find', 'surveys')) == 4


def test_pincode_term_matches(store):
    _survey(store)
    assert len(SurveyAggregationService(store).find_surveys_by_locality('73301')) == 1


def test_missing_term_is_validation_error(store):
    with pytest.raises(ValidationError):
        SurveyAggregationService(store).get_survey_stats_by_locality('')
    assert store.calls == []


def test_store_failure_propagates(store):
    store.fail_on.add('find')
    with pytest.raises(DatabaseError):
        SurveyAggregationService(store).get_survey_stats_by_locality('texas')


def test_no_matches_returns_none_and_empty_series(store):
    _survey(store)
    service = SurveyAggregationService(store)
    assert service.get_survey_stats_by_locality('nowhere') is None
    assert service.get_ratings_over_time('nowhere') == []


def test_rating_averages(store):
    for value in (3, 4, 5):
        _survey(store, ratings={'cleanliness': value, 'safety': value - 1})

    stats = SurveyAggregationService(store).get_survey_stats_by_locality('austin')
    assert stats['ratingsAvg']['cleanliness'] == 4
    assert stats['ratingsAvg']['safety'] == 3
    # fields never submitted average to zero
    assert stats['ratingsAvg']['internetQuality'] == 0
    assert list(stats['ratingsAvg']) == [
        'cleanliness', 'waterQuality', 'airQuality', 'noiseLevel',
        'roadQuality', 'affordability', 'safety', 'internetQuality',
    ]


def test_amenity_averages_treat_missing_as_zero(store):
    _survey(store, amenities={'hospital': 4, 'schools': None})
    _survey(store, amenities={'hospital': 2, 'schools': 3})

    stats = SurveyAggregationService(store).get_survey_stats_by_locality('austin')
    assert stats['amenitiesAvg']['hospital'] == 3
    assert stats['amenitiesAvg']['schools'] == 1.5
    assert stats['amenitiesAvg']['recreation'] == 0


def test_distributions_and_comments(store):
    _survey(store, age=17, occupation='Student', comments='  noisy at night ')
    _survey(store, age=22, occupation='student', comments='   ')
    _survey(store, age=60, occupation='Retired', comments='')

    stats = SurveyAggregationService(store).get_survey_stats_by_locality('downtown')
    assert stats['ageDistribution'] == {'Under 18': 1, '18-25': 1, '50+': 1}
    assert stats['occupationDistribution'] == {'student': 2, 'retired': 1}
    assert stats['comments'] == ['noisy at night']


def test_ratings_over_time_groups_by_utc_day(store):
    ist = timezone(timedelta(hours=5, minutes=30))
    _survey(store, ratings={'cleanliness': 2, 'airQuality': 4, 'waterQuality': 3, 'noiseLevel': 1},
            created_at=datetime(2025, 9, 26, 9, 0))
    _survey(store, ratings={'cleanliness': 4, 'airQuality': 2, 'waterQuality': 3},
            created_at=datetime(2025, 9, 26, 23, 59))
    # 02:00 IST on the 26th is still the 25th in UTC
    _survey(store, ratings={'cleanliness': 5, 'airQuality': 5, 'waterQuality': 5, 'noiseLevel': 5},
            created_at=datetime(2025, 9, 26, 2, 0, tzinfo=ist))

    series = SurveyAggregationService(store).get_ratings_over_time('texas')
    assert series == [
        {'date': '2025-09-25', 'cleanliness': 5, 'airQuality': 5, 'waterQuality': 5, 'noiseLevel': 5},
        {'date': '2025-09-26', 'cleanliness': 3, 'airQuality': 3, 'waterQuality': 3, 'noiseLevel': 0.5},
    ]


def test_ratings_over_time_skips_surveys_without_timestamp(store):
    _survey(store, ratings={'cleanliness': 4, 'airQuality': 4, 'waterQuality': 4, 'noiseLevel': 4})
    undated = _survey(store, ratings={'cleanliness': 1, 'airQuality': 1, 'waterQuality': 1, 'noiseLevel': 1})
    store.collections['surveys'][undated].pop('createdAt')

    series = SurveyAggregationService(store).get_ratings_over_time('austin')
    assert series == [
        {'date': '2025-09-25', 'cleanliness': 4, 'airQuality': 4, 'waterQuality': 4, 'noiseLevel': 4},
    ]

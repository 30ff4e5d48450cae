"""
Tests for lead_engine/pipeline/scoring.py — sub-scores, overall blend, batch helpers.

Pure functions only; no database.
"""
import pytest

from lead_engine.pipeline.scoring import (
    calculate_engagement_score,
    calculate_urgency_score,
    calculate_fit_score,
    calculate_overall_score,
    score,
    score_batch,
    is_hot,
)
from lead_engine.pipeline.base import LeadScoreResult


# ── Engagement ───────────────────────────────────────────────────────────────

class TestEngagementScore:

    def test_all_zero(self):
        value, factors = calculate_engagement_score(0, 0, False, 0)
        assert value == 0
        assert factors == {'demo_views': 0, 'email_opens': 0, 'replies': 0, 'days_since_interaction': 0}

    def test_demo_views_capped_at_40(self):
        assert calculate_engagement_score(1, 0, False, 0)[0] == 20
        assert calculate_engagement_score(2, 0, False, 0)[0] == 40
        assert calculate_engagement_score(9, 0, False, 0)[0] == 40

    def test_email_opens_capped_at_30(self):
        assert calculate_engagement_score(0, 2, False, 0)[0] == 20
        assert calculate_engagement_score(0, 12, False, 0)[0] == 30

    def test_reply_adds_30(self):
        assert calculate_engagement_score(0, 0, True, 0)[0] == 30

    def test_max_is_100(self):
        assert calculate_engagement_score(5, 5, True, 0)[0] == 100

    def test_decay_five_points_per_day(self):
        assert calculate_engagement_score(2, 0, False, 2)[0] == 30

    def test_decay_capped_at_20(self):
        assert calculate_engagement_score(5, 5, True, 30)[0] == 80

    def test_decay_never_goes_negative(self):
        """10 points of signal minus 20 of decay floors at zero."""
        assert calculate_engagement_score(0, 1, False, 10)[0] == 0

    def test_negative_inputs_treated_as_zero(self):
        value, factors = calculate_engagement_score(-3, -1, False, -5)
        assert value == 0
        assert factors['days_since_interaction'] == 0


# ── Urgency ──────────────────────────────────────────────────────────────────

class TestUrgencyScore:

    def test_new_lead_no_signals(self):
        value, factors = calculate_urgency_score('new_lead', 0, 0)
        assert value == 0
        assert factors['status_type'] == 'new_lead'

    @pytest.mark.parametrize('status,days,expected', [
        ('demo_sent', 3, 30),
        ('demo_sent', 2, 0),
        ('contact_attempted', 7, 40),
        ('contact_attempted', 6, 0),
        ('demo_engaged', 2, 25),
        ('demo_engaged', 1, 0),
    ])
    def test_stalled_status_thresholds(self, status, days, expected):
        assert calculate_urgency_score(status, days, 0)[0] == expected

    def test_ignored_follow_ups_need_two(self):
        assert calculate_urgency_score('new_lead', 0, 1)[0] == 0
        assert calculate_urgency_score('new_lead', 0, 2)[0] == 20

    def test_ready_to_buy(self):
        assert calculate_urgency_score('ready_to_buy', 0, 0)[0] == 50

    def test_rules_co_fire(self):
        assert calculate_urgency_score('contact_attempted', 10, 4)[0] == 60
        assert calculate_urgency_score('ready_to_buy', 0, 3)[0] == 70


# ── Fit ──────────────────────────────────────────────────────────────────────

class TestFitScore:

    def test_nothing_known(self):
        value, factors = calculate_fit_score(False, False, False, None)
        assert value == 0
        assert factors['review_rating'] is None

    def test_full_fit_is_100(self):
        assert calculate_fit_score(True, True, True, 4.6)[0] == 100

    @pytest.mark.parametrize('rating,expected', [
        (4.0, 30),
        (3.9, 15),
        (3.0, 15),
        (2.9, 0),
        (0, 0),
    ])
    def test_rating_tiers(self, rating, expected):
        assert calculate_fit_score(False, False, False, rating)[0] == expected

    def test_each_flag_contributes(self):
        assert calculate_fit_score(True, False, False, None)[0] == 30
        assert calculate_fit_score(False, True, False, None)[0] == 20
        assert calculate_fit_score(False, False, True, None)[0] == 20


# ── Overall ──────────────────────────────────────────────────────────────────

class TestOverallScore:

    def test_weighted_blend(self):
        assert calculate_overall_score(100, 50, 0) == 60

    def test_fractional_blend_rounds_to_nearest(self):
        assert calculate_overall_score(3, 0, 0) == 1    # 1.2
        assert calculate_overall_score(4, 0, 0) == 2    # 1.6
        assert calculate_overall_score(0, 0, 5) == 1    # 1.0

    def test_synergy_bonus_when_all_above_70(self):
        assert calculate_overall_score(71, 71, 71) == 81

    def test_no_bonus_at_exactly_70(self):
        assert calculate_overall_score(70, 70, 70) == 70

    def test_no_bonus_if_one_axis_low(self):
        assert calculate_overall_score(100, 100, 70) == 94

    def test_clamped_to_100(self):
        assert calculate_overall_score(100, 100, 100) == 100


# ── score() / batch ──────────────────────────────────────────────────────────

class TestScore:

    def test_all_zero_bundle(self, make_bundle):
        result = score(make_bundle())
        assert isinstance(result, LeadScoreResult)
        assert (result.engagement_score, result.urgency_score,
                result.fit_score, result.overall_score) == (0, 0, 0, 0)

    def test_ready_to_buy_engaged_lead(self, make_bundle):
        bundle = make_bundle(
            pipeline_status='ready_to_buy',
            demo_view_count=2,
            email_open_count=3,
            email_reply_count=1,
            has_replied=True,
        )
        result = score(bundle)
        assert result.engagement_score == 100
        assert result.urgency_score == 50
        assert result.fit_score == 0
        assert result.overall_score == 60

    def test_ready_to_buy_engaged_lead_with_fit(self, make_bundle):
        bundle = make_bundle(
            pipeline_status='ready_to_buy',
            demo_view_count=2,
            email_open_count=3,
            has_replied=True,
            industry='hvac',
            industry_match=True,
            has_website=True,
            has_reviews=True,
            google_rating=4.8,
        )
        result = score(bundle)
        assert result.fit_score == 100
        # 40 + 20 + 20 = 80; urgency 50 keeps the synergy bonus off
        assert result.overall_score == 80
        assert is_hot(result)

    def test_factors_shape(self, make_bundle):
        result = score(make_bundle(days_in_current_status=4, google_rating=3.5))
        assert set(result.score_factors) == {'engagement', 'urgency', 'fit'}
        assert result.score_factors['urgency']['days_in_status'] == 4
        assert result.score_factors['fit']['review_rating'] == 3.5

    def test_deterministic(self, make_bundle):
        bundle = make_bundle(demo_view_count=1, email_open_count=2, days_since_last_interaction=3)
        assert score(bundle) == score(bundle)

    def test_all_scores_in_range(self, make_bundle):
        bundle = make_bundle(
            pipeline_status='contact_attempted',
            demo_view_count=50,
            email_open_count=50,
            has_replied=True,
            days_in_current_status=100,
            follow_ups_ignored_count=20,
            industry_match=True,
            has_website=True,
            has_reviews=True,
            google_rating=5,
        )
        result = score(bundle)
        for value in (result.engagement_score, result.urgency_score,
                      result.fit_score, result.overall_score):
            assert 0 <= value <= 100

    def test_more_demo_views_never_lowers_engagement(self, make_bundle):
        previous = -1
        for views in range(0, 6):
            current = score(make_bundle(demo_view_count=views)).engagement_score
            assert current >= previous
            previous = current


class TestScoreBatch:

    def test_skips_terminal(self, make_bundle):
        bundles = [
            make_bundle(lead_id='a'),
            make_bundle(lead_id='b', pipeline_status='customer_won'),
            make_bundle(lead_id='c', pipeline_status='lost_closed'),
        ]
        results = score_batch(bundles)
        assert [r.lead_id for r in results] == ['a']

    def test_empty(self):
        assert score_batch([]) == []


class TestIsHot:

    def test_threshold(self):
        assert is_hot(LeadScoreResult('x', 0, 0, 0, 80))
        assert not is_hot(LeadScoreResult('x', 0, 0, 0, 79))

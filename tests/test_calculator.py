"""
Unit tests for the ranking calculator

Tests cover:
1. Points and TOP % calculation
2. Player aggregation (placement buckets, penalty scoping)
3. Performance ordering
4. RankingCalculator over a snapshot (veteran / beginner)
"""

import itertools
import json

import pytest

from ranking.calculator import (
    RankingCalculator,
    aggregate,
    calculate_points,
    calculate_top_percentage,
    compare_performance,
    count_scoped_penalties,
    is_top_placement,
    main,
    sort_by_performance,
)
from ranking.models import PenaltyRecord, PlacementRecord


# =============================================================================
# Points / percentage
# =============================================================================

class TestCalculatePoints:
    """Tests for placement points"""

    def test_point_values(self):
        """1st = 4, 2nd = 3, 3rd = 2, 4th = 2"""
        assert calculate_points(1, 0, 0, 0) == 4
        assert calculate_points(0, 1, 0, 0) == 3
        assert calculate_points(0, 0, 1, 0) == 2
        assert calculate_points(0, 0, 0, 1) == 2

    def test_mixed_placements(self, aggregate_factory):
        """Placements [1, 1, 2, 4] give 13 points, 4 TOPs, 100%"""
        agg = aggregate_factory(1, "P", [1, 1, 2, 4])
        assert agg.points == 13
        assert agg.total_tops == 4
        assert agg.top_percentage == 100.0

    def test_points_match_buckets(self, aggregate_factory):
        """points always equals the weighted bucket sum"""
        agg = aggregate_factory(1, "P", [1, 2, 2, 3, 4, 4, None, 7])
        assert agg.points == (
            agg.first_place * 4 + agg.second_place * 3 + agg.third_place * 2 + agg.fourth_place * 2
        )


class TestTopPercentage:
    """Tests for TOP % calculation"""

    def test_zero_tournaments(self):
        """No tournaments gives 0, not a division error"""
        assert calculate_top_percentage(0, 0) == 0.0

    def test_bounds(self):
        """TOP % stays within 0..100"""
        for tops, total in [(0, 5), (3, 10), (5, 5)]:
            assert 0.0 <= calculate_top_percentage(tops, total) <= 100.0

    def test_is_top_placement(self):
        assert is_top_placement(1)
        assert is_top_placement(4)
        assert not is_top_placement(5)
        assert not is_top_placement(0)
        assert not is_top_placement(None)


# =============================================================================
# Aggregation
# =============================================================================

class TestAggregate:
    """Tests for player aggregation"""

    def test_no_results(self, aggregate_factory):
        """A player without results has zeroed stats"""
        agg = aggregate_factory(1, "P", [])
        assert agg.total_tournaments == 0
        assert agg.top_percentage == 0.0
        assert agg.points == 0
        assert not agg.is_eligible

    def test_out_of_range_placements(self, aggregate_factory):
        """None / 0 / 5+ count as played but outside every bucket"""
        agg = aggregate_factory(1, "P", [None, 0, 5, 12, 1])
        assert agg.total_tournaments == 5
        assert agg.total_tops == 1
        assert agg.first_place == 1
        assert agg.points == 4

    def test_penalty_scoping(self, player_factory):
        """veteran counts non-beginner penalties, beginner only beginner ones"""
        player = player_factory(1, "P", [1], penalties=["regular", "beginner", "special"])

        assert aggregate(player, player.tournament_results, player.penalties, scope="veteran").penalties == 2
        assert aggregate(player, player.tournament_results, player.penalties, scope="beginner").penalties == 1
        assert aggregate(player, player.tournament_results, player.penalties, scope="all").penalties == 3

    def test_scoped_penalty_counts_are_always_filled(self, player_factory):
        player = player_factory(1, "P", [], penalties=["regular", "beginner"])
        agg = aggregate(player, (), player.penalties, scope="beginner")
        assert agg.veteran_penalties == 1
        assert agg.beginner_penalties == 1

    def test_count_scoped_penalties(self):
        penalties = [PenaltyRecord("regular"), PenaltyRecord("beginner"), PenaltyRecord("regular")]
        assert count_scoped_penalties(penalties, "veteran") == 2
        assert count_scoped_penalties(penalties, "beginner") == 1
        assert count_scoped_penalties(penalties) == 3


# =============================================================================
# Performance ordering
# =============================================================================

class TestPerformanceOrder:
    """Tests for the ranking comparator"""

    def test_first_place_beats_more_tops(self, aggregate_factory):
        """A single win ranks above three 2nd places"""
        winner = aggregate_factory(1, "Winner", [1])
        runner_up = aggregate_factory(2, "RunnerUp", [2, 2, 2])
        assert compare_performance(winner, runner_up) < 0
        assert sort_by_performance([runner_up, winner])[0].name == "Winner"

    def test_top_percentage_breaks_tie(self, aggregate_factory):
        """Equal through total_tops: higher TOP % ranks first"""
        a = aggregate_factory(1, "A", [1, None])
        b = aggregate_factory(2, "B", [1])
        assert sort_by_performance([a, b])[0].name == "B"

    def test_same_tops_different_attendance(self, aggregate_factory):
        """3 TOPs in 10 (30%) ranks below 3 TOPs in 5 (60%)"""
        p1 = aggregate_factory(1, "P1", [3, 3, 3] + [None] * 7)
        p2 = aggregate_factory(2, "P2", [3, 3, 3, None, None])
        assert p1.top_percentage == pytest.approx(30.0)
        assert p2.top_percentage == pytest.approx(60.0)
        assert [p.name for p in sort_by_performance([p1, p2])] == ["P2", "P1"]

    def test_full_tie_keeps_input_order(self, aggregate_factory):
        """Identical stats compare equal and keep their order"""
        a = aggregate_factory(1, "Alpha", [2, None])
        b = aggregate_factory(2, "Beta", [2, None])
        assert compare_performance(a, b) == 0
        assert [p.name for p in sort_by_performance([a, b])] == ["Alpha", "Beta"]
        assert [p.name for p in sort_by_performance([b, a])] == ["Beta", "Alpha"]

    def test_comparator_is_transitive(self, aggregate_factory):
        """cmp(a, b) <= 0 and cmp(b, c) <= 0 implies cmp(a, c) <= 0"""
        players = [
            aggregate_factory(i, f"P{i}", placements)
            for i, placements in enumerate([
                [1], [1, None], [2, 2], [2, 3], [3, 4, None], [4], [None], [], [1, 2], [2],
            ])
        ]
        for a, b, c in itertools.permutations(players, 3):
            if compare_performance(a, b) <= 0 and compare_performance(b, c) <= 0:
                assert compare_performance(a, c) <= 0

    def test_antisymmetric(self, aggregate_factory):
        a = aggregate_factory(1, "A", [2, 3])
        b = aggregate_factory(2, "B", [2, 4, 4])
        assert compare_performance(a, b) == -compare_performance(b, a)


# =============================================================================
# RankingCalculator
# =============================================================================

class TestRankingCalculator:
    """Tests for the snapshot calculator"""

    @pytest.fixture
    def calculator(self, snapshot):
        calc = RankingCalculator()
        calc.load_from_data(snapshot)
        return calc

    def test_load_counts(self, calculator):
        assert len(calculator.players) == 4
        assert len(calculator.tournaments) == 5
        assert len(calculator.decks) == 4

    def test_veteran_tournaments_include_untyped(self, calculator):
        """Tournaments without a type count as veteran"""
        assert calculator.tournament_ids("veteran") == {1, 2, 4, 5}
        assert calculator.tournament_ids("beginner") == {3}

    def test_veteran_ranking(self, calculator):
        rankings = calculator.calculate_rankings("veteran")
        assert [r.name for r in rankings] == ["Alice", "Bob", "Carol", "Dave"]

        alice = rankings[0]
        assert alice.total_tournaments == 4
        assert alice.first_place == 2
        assert alice.second_place == 1
        assert alice.points == 11
        assert alice.top_percentage == pytest.approx(75.0)

    def test_beginner_ranking_lists_participants_only(self, calculator):
        """Players without beginner results are left out"""
        rankings = calculator.calculate_rankings("beginner")
        assert [r.name for r in rankings] == ["Bob", "Carol"]
        assert rankings[0].points == 4
        assert rankings[0].penalties == 1

    def test_veteran_tiers(self, calculator):
        result = calculator.calculate_tiers("veteran")
        assert result.avg_points == 8
        assert result.thresholds == {"S": 14, "A": 10, "B": 7, "C": 5}
        assert [(p.name, p.tier) for p in result.tiered_players] == [
            ("Alice", "A"),
            ("Bob", "B"),
            ("Carol", "D"),
            ("Dave", None),
        ]

    def test_penalty_ranking(self, calculator):
        standings = calculator.calculate_penalty_ranking("veteran")
        assert [(s.name, s.total_penalties) for s in standings] == [("Bob", 2), ("Alice", 1)]
        assert standings[0].penalty_rate == pytest.approx(100.0)

    def test_unknown_scope(self, calculator):
        with pytest.raises(ValueError):
            calculator.calculate_rankings("pro")

    def test_malformed_placement_is_not_a_top(self):
        """A non-numeric placement still counts as a tournament played"""
        calc = RankingCalculator()
        calc.load_from_data({
            "players": [{
                "id": 1,
                "name": "P",
                "tournament_results": [
                    {"tournament_id": 1, "placement": "abc"},
                    {"tournament_id": 2, "placement": "2"},
                ],
            }],
        })
        agg = calc.calculate_rankings("all")[0]
        assert agg.total_tournaments == 2
        assert agg.total_tops == 1
        assert agg.second_place == 1

    def test_fractional_placement_is_not_a_top(self):
        """1.5 is not truncated into a first place"""
        calc = RankingCalculator()
        calc.load_from_data({
            "players": [{
                "id": 1,
                "name": "P",
                "tournament_results": [
                    {"tournament_id": 1, "placement": 1.5},
                    {"tournament_id": 2, "placement": 2.0},
                ],
            }],
        })
        agg = calc.calculate_rankings("all")[0]
        assert agg.total_tournaments == 2
        assert agg.first_place == 0
        assert agg.second_place == 1
        assert agg.points == 3

    def test_broken_penalty_keeps_the_player(self):
        calc = RankingCalculator()
        calc.load_from_data({
            "players": [{
                "id": 1,
                "name": "P",
                "tournament_results": [{"tournament_id": 1, "placement": 1}],
                "penalties": [{"penalty_type": 3}, {"penalty_type": "regular", "player_id": "x"}],
            }],
        })
        assert len(calc.players) == 1
        agg = calc.calculate_rankings("all")[0]
        assert agg.points == 4
        assert agg.penalties == 1

    def test_export_rankings(self, calculator, tmp_path):
        output = tmp_path / "rankings.json"
        calculator.export_rankings(str(output), scope="veteran")

        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["meta"]["scope"] == "veteran"
        assert data["meta"]["avg_points"] == 8
        assert data["rankings"][0]["rank"] == 1
        assert data["rankings"][0]["name"] == "Alice"
        assert data["rankings"][0]["tier"] == "A"
        assert [p["name"] for p in data["penalties"]] == ["Bob", "Alice"]


class TestCommandLine:
    """Tests for python -m ranking.calculator"""

    def test_export_from_snapshot_file(self, snapshot, tmp_path):
        data_file = tmp_path / "snapshot.json"
        data_file.write_text(json.dumps(snapshot), encoding="utf-8")
        output = tmp_path / "out.json"

        main(["--data", str(data_file), "--scope", "beginner", "--output", str(output)])

        data = json.loads(output.read_text(encoding="utf-8"))
        assert [p["name"] for p in data["rankings"]] == ["Bob", "Carol"]

    def test_print_summary(self, snapshot, tmp_path, capsys):
        data_file = tmp_path / "snapshot.json"
        data_file.write_text(json.dumps(snapshot), encoding="utf-8")

        main(["--data", str(data_file), "--top", "2"])

        out = capsys.readouterr().out
        assert "Alice" in out
        assert "Bob" in out
        assert "Carol" not in out

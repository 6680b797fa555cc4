"""Tests for equilibrium value types and profile comparison."""

import pytest

from nashlab.models.equilibrium import (
    EquilibriumType,
    MixedEquilibrium,
    PureEquilibrium,
    deduplicate,
    profile_key,
    same_equilibrium,
)


def mixed(p: float, q: float) -> MixedEquilibrium:
    return MixedEquilibrium(distributions=((p, 1 - p), (q, 1 - q)), payoffs=(0.0, 0.0), stability=0.0)


class TestPureEquilibrium:
    def test_fields_are_normalized(self) -> None:
        eq = PureEquilibrium(profile=[1, 1], payoffs=[1, 1], stability=0.1, is_strict=True)
        assert eq.profile == (1, 1)
        assert eq.payoffs == (1.0, 1.0)
        assert eq.equilibrium_type is EquilibriumType.PURE
        assert eq.num_players == 2

    def test_as_distributions(self) -> None:
        eq = PureEquilibrium(profile=(0, 2), payoffs=(0, 0), stability=0.0)
        assert eq.as_distributions(3) == ((1.0, 0.0, 0.0), (0.0, 0.0, 1.0))

    def test_describe(self) -> None:
        eq = PureEquilibrium(profile=(1, 1), payoffs=(1, 1), stability=0.1)
        assert eq.describe() == "1,1"
        assert eq.describe(["Cooperate", "Defect"]) == "Defect,Defect"

    def test_to_dict(self) -> None:
        eq = PureEquilibrium(profile=(1, 0), payoffs=(5, 0), stability=0.5, is_strict=True)
        assert eq.to_dict() == {
            "type": "pure",
            "strategies": [1, 0],
            "payoffs": [5.0, 0.0],
            "stability": 0.5,
            "is_strict": True,
        }


class TestMixedEquilibrium:
    def test_never_strict_by_default(self) -> None:
        assert mixed(0.5, 0.5).is_strict is False
        assert mixed(0.5, 0.5).equilibrium_type is EquilibriumType.MIXED

    def test_support(self) -> None:
        eq = MixedEquilibrium(
            distributions=((0.5, 0.5, 0.0), (1e-12, 0.0, 1.0)),
            payoffs=(0, 0),
            stability=0.0,
        )
        assert eq.support(0) == (0, 1)
        assert eq.support(1) == (2,)
        assert eq.support_sizes() == [2, 1]

    def test_describe_with_names(self) -> None:
        text = mixed(0.25, 0.5).describe(["Heads", "Tails"])
        assert text == "(Heads=0.250, Tails=0.750) (Heads=0.500, Tails=0.500)"

    def test_to_dict_lists_distributions(self) -> None:
        data = mixed(0.5, 0.5).to_dict()
        assert data["type"] == "mixed"
        assert data["strategies"] == [[0.5, 0.5], [0.5, 0.5]]
        assert data["is_strict"] is False


class TestComparison:
    def test_pure_matches_on_profile(self) -> None:
        a = PureEquilibrium(profile=(0, 1), payoffs=(1, 1), stability=0.1)
        b = PureEquilibrium(profile=(0, 1), payoffs=(9, 9), stability=0.9)
        c = PureEquilibrium(profile=(1, 0), payoffs=(1, 1), stability=0.1)
        assert same_equilibrium(a, b)
        assert not same_equilibrium(a, c)

    def test_mixed_matches_within_tolerance(self) -> None:
        assert same_equilibrium(mixed(0.5, 0.5), mixed(0.5 + 1e-9, 0.5))
        assert not same_equilibrium(mixed(0.5, 0.5), mixed(0.51, 0.5))

    def test_pure_never_matches_mixed(self) -> None:
        pure = PureEquilibrium(profile=(0, 0), payoffs=(1, 1), stability=0.1)
        degenerate = mixed(1.0, 1.0)
        assert not same_equilibrium(pure, degenerate)

    def test_deduplicate_keeps_first_occurrence(self) -> None:
        first = mixed(0.5, 0.5)
        items = [first, mixed(0.5 + 1e-9, 0.5), mixed(0.25, 0.5)]
        unique = deduplicate(items)
        assert len(unique) == 2
        assert unique[0] is first

    @pytest.mark.parametrize("noise", [0.0, 1e-10, -1e-10])
    def test_profile_key_is_stable(self, noise: float) -> None:
        assert profile_key(mixed(0.5 + noise, 0.5)) == profile_key(mixed(0.5, 0.5))

    def test_profile_key_distinguishes_types(self) -> None:
        pure = PureEquilibrium(profile=(0, 0), payoffs=(1, 1), stability=0.1)
        assert profile_key(pure) == ("pure", (0, 0))
        assert profile_key(pure) != profile_key(mixed(1.0, 1.0))

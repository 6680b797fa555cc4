"""Classic game templates.

Each game type has a constructor that checks the type's ordinal constraints
and builds a valid ``PayoffMatrix`` from ``TemplateParameters``. The
constructors guarantee the textbook structure (for example Prisoner's
Dilemma always has the unique equilibrium (Defect, Defect)), so scenario
authors only tune magnitudes.

Two-player symmetric games are built from a single own-payoff table ``u``
with ``cell[i][j] = (u[i][j], u[j][i])``. The n-player Public Goods game
stores the evaluated player's payoff for (own choice, aggregate opponent
choice) in every slot of the cell.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar, Protocol, Sequence, runtime_checkable

from pydantic import BaseModel, ConfigDict, field_validator

from nashlab.models.matrices import PayoffMatrix, Strategy


class GameType(Enum):
    """Built-in game templates."""

    # Dominant strategy games
    PRISONERS_DILEMMA = "prisoners_dilemma"
    PUBLIC_GOODS = "public_goods"

    # Anti-coordination games
    CHICKEN = "chicken"
    HAWK_DOVE = "hawk_dove"

    # Coordination games
    COORDINATION = "coordination"
    STAG_HUNT = "stag_hunt"
    BATTLE_OF_SEXES = "battle_of_sexes"

    # Zero-sum games
    MATCHING_PENNIES = "matching_pennies"
    ROCK_PAPER_SCISSORS = "rock_paper_scissors"


class TemplateParameters(BaseModel):
    """Parameters for template construction.

    Each constructor reads only its own fields. Use
    ``get_default_params_for_type`` for values that satisfy a type's
    constraints.
    """

    model_config = ConfigDict(frozen=True)

    # Multiplies every payoff
    scale: float = 1.0

    # Only Public Goods supports more than 2 players
    players: int = 2

    # PD family (T > R > P > S)
    temptation: float = 5.0
    reward: float = 3.0
    punishment: float = 1.0
    sucker: float = 0.0

    # Chicken (T > R > S > P); reuses temptation, reward, sucker
    crash_payoff: float = -10.0

    # Hawk-Dove (win > share > yield > fight)
    win_payoff: float = 3.0
    share_payoff: float = 2.0
    yield_payoff: float = 1.0
    fight_payoff: float = -1.0

    # Stag Hunt (R > T > P > S)
    stag_payoff: float = 3.0
    hare_temptation: float = 2.0
    hare_safe: float = 1.0
    stag_fail: float = 0.0

    # Coordination games
    coordination_bonus: float = 1.0
    miscoordination_penalty: float = 0.0
    preferred_payoff: float = 2.0
    compromise_payoff: float = 1.0

    # Public Goods (free ride > contribute > no contribution > exploited)
    free_ride_payoff: float = 2.0
    contribute_payoff: float = 1.0
    no_contribution_payoff: float = 0.0
    exploited_payoff: float = -1.0

    # Zero-sum games
    stake: float = 1.0
    win: float = 1.0
    tie: float = 0.0
    loss: float = -1.0

    @field_validator("scale", "stake")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("scale and stake must be positive")
        return v

    @field_validator("players")
    @classmethod
    def validate_players(cls, v: int) -> int:
        if v < 2:
            raise ValueError(f"players must be at least 2, got {v}")
        return v


@runtime_checkable
class TemplateConstructor(Protocol):
    """Protocol for template constructors."""

    name: ClassVar[str]
    description: ClassVar[str]

    @staticmethod
    def validate_params(params: TemplateParameters) -> None:
        """Raise ValueError if parameters violate the type's constraints."""
        ...

    @staticmethod
    def build(params: TemplateParameters) -> PayoffMatrix:
        ...


def _strategies(*specs: tuple[str, str, str]) -> tuple[Strategy, ...]:
    return tuple(
        Strategy(id=sid, name=name, short_name=name[:1].upper(), description=description)
        for sid, name, description in specs
    )


def _symmetric_two_player(
    u: Sequence[Sequence[float]], strategies: tuple[Strategy, ...], scale: float
) -> PayoffMatrix:
    n = len(u)
    payoffs = tuple(
        tuple((u[i][j] * scale, u[j][i] * scale) for j in range(n)) for i in range(n)
    )
    return PayoffMatrix(players=2, strategies=strategies, payoffs=payoffs, is_symmetric=True)


def _require_two_players(params: TemplateParameters, game: str) -> None:
    if params.players != 2:
        raise ValueError(f"{game} is a 2-player game, got players={params.players}")


class PrisonersDilemmaConstructor:
    """Prisoner's Dilemma.

    Ordinal constraint: T > R > P > S
    Guaranteed Nash Equilibrium: Unique (Defect, Defect)
    """

    name = "Prisoner's Dilemma"
    description = "Two prisoners must decide whether to cooperate or defect without communication"

    @staticmethod
    def validate_params(params: TemplateParameters) -> None:
        _require_two_players(params, "Prisoner's Dilemma")
        t, r, p, s = params.temptation, params.reward, params.punishment, params.sucker
        if not (t > r > p > s):
            raise ValueError(f"Prisoner's Dilemma requires T > R > P > S, got T={t}, R={r}, P={p}, S={s}")

    @staticmethod
    def build(params: TemplateParameters) -> PayoffMatrix:
        PrisonersDilemmaConstructor.validate_params(params)
        t, r, p, s = params.temptation, params.reward, params.punishment, params.sucker
        return _symmetric_two_player(
            [[r, s], [t, p]],
            _strategies(
                ("cooperate", "Cooperate", "Work together for mutual benefit"),
                ("defect", "Defect", "Act in self-interest"),
            ),
            params.scale,
        )


class ChickenConstructor:
    """Chicken.

    Ordinal constraint: T > R > S > P (crashing is the worst outcome)
    Guaranteed Nash Equilibria: (Swerve, Straight) and (Straight, Swerve)
    """

    name = "Chicken"
    description = "Backing down is costly but collision is catastrophic"

    @staticmethod
    def validate_params(params: TemplateParameters) -> None:
        _require_two_players(params, "Chicken")
        t, r, s, p = params.temptation, params.reward, params.sucker, params.crash_payoff
        if not (t > r > s > p):
            raise ValueError(f"Chicken requires T > R > S > P, got T={t}, R={r}, S={s}, P={p}")

    @staticmethod
    def build(params: TemplateParameters) -> PayoffMatrix:
        ChickenConstructor.validate_params(params)
        t, r, s, p = params.temptation, params.reward, params.sucker, params.crash_payoff
        return _symmetric_two_player(
            [[r, s], [t, p]],
            _strategies(
                ("swerve", "Swerve", "Avoid confrontation by backing down"),
                ("straight", "Straight", "Continue straight ahead"),
            ),
            params.scale,
        )


class HawkDoveConstructor:
    """Hawk-Dove.

    Ordinal constraint: win > share > yield > fight
    Guaranteed Nash Equilibria: (Hawk, Dove), (Dove, Hawk) and one mixed
    """

    name = "Hawk-Dove"
    description = "Contest over resources where aggressive and peaceful strategies compete"

    @staticmethod
    def validate_params(params: TemplateParameters) -> None:
        _require_two_players(params, "Hawk-Dove")
        w, sh, y, f = params.win_payoff, params.share_payoff, params.yield_payoff, params.fight_payoff
        if not (w > sh > y > f):
            raise ValueError(
                f"Hawk-Dove requires win > share > yield > fight, got {w}, {sh}, {y}, {f}"
            )

    @staticmethod
    def build(params: TemplateParameters) -> PayoffMatrix:
        HawkDoveConstructor.validate_params(params)
        return _symmetric_two_player(
            [
                [params.fight_payoff, params.win_payoff],
                [params.yield_payoff, params.share_payoff],
            ],
            _strategies(
                ("hawk", "Hawk", "Aggressive strategy, fight until there is a winner"),
                ("dove", "Dove", "Peaceful strategy, share or retreat"),
            ),
            params.scale,
        )


class StagHuntConstructor:
    """Stag Hunt.

    Ordinal constraint: R > T > P > S
    Guaranteed Nash Equilibria: (Stag, Stag) payoff dominant, (Hare, Hare) risk dominant
    """

    name = "Stag Hunt"
    description = "Mutual cooperation pays best but requires trust"

    @staticmethod
    def validate_params(params: TemplateParameters) -> None:
        _require_two_players(params, "Stag Hunt")
        r, t, p, s = params.stag_payoff, params.hare_temptation, params.hare_safe, params.stag_fail
        if not (r > t > p > s):
            raise ValueError(f"Stag Hunt requires R > T > P > S, got R={r}, T={t}, P={p}, S={s}")

    @staticmethod
    def build(params: TemplateParameters) -> PayoffMatrix:
        StagHuntConstructor.validate_params(params)
        r, t, p, s = params.stag_payoff, params.hare_temptation, params.hare_safe, params.stag_fail
        return _symmetric_two_player(
            [[r, s], [t, p]],
            _strategies(
                ("stag", "Hunt Stag", "Hunt the stag, which requires cooperation"),
                ("hare", "Hunt Hare", "Hunt hare, the safe individual choice"),
            ),
            params.scale,
        )


class CoordinationConstructor:
    """Pure coordination.

    Ordinal constraint: coordination bonus > miscoordination penalty
    Guaranteed Nash Equilibria: both matching profiles
    """

    name = "Pure Coordination"
    description = "Players want to pick the same action but have no preference which one"

    @staticmethod
    def validate_params(params: TemplateParameters) -> None:
        _require_two_players(params, "Pure Coordination")
        if not params.coordination_bonus > params.miscoordination_penalty:
            raise ValueError(
                f"Pure Coordination requires bonus > penalty, got "
                f"{params.coordination_bonus} <= {params.miscoordination_penalty}"
            )

    @staticmethod
    def build(params: TemplateParameters) -> PayoffMatrix:
        CoordinationConstructor.validate_params(params)
        b, m = params.coordination_bonus, params.miscoordination_penalty
        return _symmetric_two_player(
            [[b, m], [m, b]],
            _strategies(
                ("option_a", "Option A", "Coordinate on the first option"),
                ("option_b", "Option B", "Coordinate on the second option"),
            ),
            params.scale,
        )


class BattleOfSexesConstructor:
    """Battle of the Sexes.

    Ordinal constraint: preferred > compromise > miscoordination
    Guaranteed Nash Equilibria: both matching profiles and one interior mixed
    """

    name = "Battle of the Sexes"
    description = "Players want to be together but disagree on the activity"

    @staticmethod
    def validate_params(params: TemplateParameters) -> None:
        _require_two_players(params, "Battle of the Sexes")
        hi, lo, miss = params.preferred_payoff, params.compromise_payoff, params.miscoordination_penalty
        if not (hi > lo > miss):
            raise ValueError(
                f"Battle of the Sexes requires preferred > compromise > miscoordination, "
                f"got {hi}, {lo}, {miss}"
            )

    @staticmethod
    def build(params: TemplateParameters) -> PayoffMatrix:
        BattleOfSexesConstructor.validate_params(params)
        k = params.scale
        hi = params.preferred_payoff * k
        lo = params.compromise_payoff * k
        miss = params.miscoordination_penalty * k
        return PayoffMatrix(
            players=2,
            strategies=_strategies(
                ("football", "Football", "Prefer watching football"),
                ("opera", "Opera", "Prefer watching opera"),
            ),
            payoffs=(((hi, lo), (miss, miss)), ((miss, miss), (lo, hi))),
            is_symmetric=False,
        )


class MatchingPenniesConstructor:
    """Matching Pennies.

    Zero-sum: player 0 wins the stake on a match, player 1 on a mismatch.
    Guaranteed Nash Equilibrium: unique mixed at (0.5, 0.5)
    """

    name = "Matching Pennies"
    description = "Zero-sum game where one player wins what the other loses"

    @staticmethod
    def validate_params(params: TemplateParameters) -> None:
        _require_two_players(params, "Matching Pennies")

    @staticmethod
    def build(params: TemplateParameters) -> PayoffMatrix:
        MatchingPenniesConstructor.validate_params(params)
        v = params.stake * params.scale
        return PayoffMatrix(
            players=2,
            strategies=_strategies(
                ("heads", "Heads", "Choose heads"),
                ("tails", "Tails", "Choose tails"),
            ),
            payoffs=(((v, -v), (-v, v)), ((-v, v), (v, -v))),
            is_symmetric=False,
        )


class RockPaperScissorsConstructor:
    """Rock-Paper-Scissors.

    Ordinal constraint: win > tie > loss
    Guaranteed Nash Equilibrium: unique mixed at one third each
    """

    name = "Rock-Paper-Scissors"
    description = "Cyclic zero-sum game where every strategy beats one and loses to another"

    @staticmethod
    def validate_params(params: TemplateParameters) -> None:
        _require_two_players(params, "Rock-Paper-Scissors")
        if not (params.win > params.tie > params.loss):
            raise ValueError(
                f"Rock-Paper-Scissors requires win > tie > loss, got {params.win}, {params.tie}, {params.loss}"
            )

    @staticmethod
    def build(params: TemplateParameters) -> PayoffMatrix:
        RockPaperScissorsConstructor.validate_params(params)
        w, t, lo = params.win, params.tie, params.loss
        return _symmetric_two_player(
            [[t, lo, w], [w, t, lo], [lo, w, t]],
            _strategies(
                ("rock", "Rock", "Beats scissors"),
                ("paper", "Paper", "Beats rock"),
                ("scissors", "Scissors", "Beats paper"),
            ),
            params.scale,
        )


class PublicGoodsConstructor:
    """Public Goods.

    Ordinal constraint: free ride > contribute > no contribution > exploited
    Guaranteed Nash Equilibrium: everyone free rides

    Supports any player count. With three or more players the opponents'
    joint choice is their aggregate (mean) contribution decision.
    """

    name = "Public Goods"
    description = "Contributing benefits everyone but costs the contributor"

    @staticmethod
    def validate_params(params: TemplateParameters) -> None:
        f, c = params.free_ride_payoff, params.contribute_payoff
        n, e = params.no_contribution_payoff, params.exploited_payoff
        if not (f > c > n > e):
            raise ValueError(
                f"Public Goods requires free ride > contribute > no contribution > exploited, "
                f"got {f}, {c}, {n}, {e}"
            )

    @staticmethod
    def build(params: TemplateParameters) -> PayoffMatrix:
        PublicGoodsConstructor.validate_params(params)
        u = [
            [params.contribute_payoff, params.exploited_payoff],
            [params.free_ride_payoff, params.no_contribution_payoff],
        ]
        strategies = _strategies(
            ("contribute", "Contribute", "Pay a cost to provide a public benefit"),
            ("free_ride", "Free Ride", "Benefit without contributing"),
        )
        if params.players == 2:
            return _symmetric_two_player(u, strategies, params.scale)

        payoffs = tuple(
            tuple(tuple([u[own][other] * params.scale] * params.players) for other in range(2))
            for own in range(2)
        )
        return PayoffMatrix(players=params.players, strategies=strategies, payoffs=payoffs, is_symmetric=True)


# Registry of all constructors by game type
CONSTRUCTORS: dict[GameType, type[TemplateConstructor]] = {
    GameType.PRISONERS_DILEMMA: PrisonersDilemmaConstructor,
    GameType.PUBLIC_GOODS: PublicGoodsConstructor,
    GameType.CHICKEN: ChickenConstructor,
    GameType.HAWK_DOVE: HawkDoveConstructor,
    GameType.COORDINATION: CoordinationConstructor,
    GameType.STAG_HUNT: StagHuntConstructor,
    GameType.BATTLE_OF_SEXES: BattleOfSexesConstructor,
    GameType.MATCHING_PENNIES: MatchingPenniesConstructor,
    GameType.ROCK_PAPER_SCISSORS: RockPaperScissorsConstructor,
}


def build_matrix(game_type: GameType, params: TemplateParameters | None = None) -> PayoffMatrix:
    """Build a payoff matrix from type and parameters.

    Uses the type's defaults when ``params`` is omitted.
    Raises ValueError if parameters violate the game type's constraints.
    """
    constructor = CONSTRUCTORS.get(game_type)
    if constructor is None:
        raise ValueError(f"Unknown game type: {game_type}")
    if params is None:
        params = get_default_params_for_type(game_type)
    return constructor.build(params)


def get_default_params_for_type(game_type: GameType) -> TemplateParameters:
    """Get default parameters that satisfy the ordinal constraints for a given type.

    The defaults reproduce the textbook matrices.
    """
    defaults = {
        GameType.PRISONERS_DILEMMA: TemplateParameters(temptation=5, reward=3, punishment=1, sucker=0),
        GameType.CHICKEN: TemplateParameters(temptation=1, reward=0, sucker=-1, crash_payoff=-10),
    }
    return defaults.get(game_type, TemplateParameters())

"""
Instrument reference data.

An instrument version fixes the set of needs, the values that group them and
the rounds in which needs are ranked against each other. Instances are
immutable and are passed explicitly to every scoring step.

Bounds:
    Each ranking awards points in [-4, +4] to every need in the round, so a
    need that appears in k rounds has raw bounds [-4k, +4k]. Value bounds are
    the sums of the member needs' bounds. Both are computed once when the
    instrument is built, since they depend only on the round configuration.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

ROUND_SIZE = 5

# Rank position (1 = most important) -> points
RANK_POINTS = {1: 4, 2: 2, 3: 0, 4: -2, 5: -4}
MAX_POINTS = max(RANK_POINTS.values())


@dataclass(frozen=True)
class Need:
    """
    Atomic scored item.

    Attributes:
        code: Unique need code
        value_code: Code of the value this need belongs to
        label: Statement shown to the subject
    """
    code: str
    value_code: str
    label: str = ""


@dataclass(frozen=True)
class Value:
    """A group of related needs."""
    code: str
    label: str
    order: int


@dataclass(frozen=True)
class Round:
    """
    One forced-choice ranking task.

    Attributes:
        index: Round index (1-based in the bundled instrument)
        need_codes: The needs presented in this round, in display order
        version: Instrument version the round belongs to
    """
    index: int
    need_codes: Tuple[str, ...]
    version: str

    def __post_init__(self):
        if len(self.need_codes) != ROUND_SIZE:
            raise ValidationError(
                f"Round {self.index} must contain exactly {ROUND_SIZE} needs, "
                f"got {len(self.need_codes)}"
            )
        if len(set(self.need_codes)) != len(self.need_codes):
            raise ValidationError(f"Round {self.index} contains duplicate needs: {self.need_codes}")


@dataclass(frozen=True)
class Instrument:
    """
    Immutable, versioned instrument configuration.

    Attributes:
        version: Instrument version string
        values: Values ordered by their display order
        needs: Needs in canonical order
        rounds: Rounds ordered by index
    """
    version: str
    values: Tuple[Value, ...]
    needs: Tuple[Need, ...]
    rounds: Tuple[Round, ...]

    _needs_by_code: Dict[str, Need] = field(init=False, repr=False, compare=False)
    _rounds_by_index: Dict[int, Round] = field(init=False, repr=False, compare=False)
    _appearances: Dict[str, int] = field(init=False, repr=False, compare=False)
    _value_members: Dict[str, Tuple[str, ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        self._validate()

        # Frozen dataclass: derived lookups are set through object.__setattr__
        object.__setattr__(self, "_needs_by_code", {n.code: n for n in self.needs})
        object.__setattr__(self, "_rounds_by_index", {r.index: r for r in self.rounds})

        appearances = {n.code: 0 for n in self.needs}
        for rnd in self.rounds:
            for code in rnd.need_codes:
                appearances[code] += 1
        object.__setattr__(self, "_appearances", appearances)

        members = {
            v.code: tuple(n.code for n in self.needs if n.value_code == v.code)
            for v in self.values
        }
        object.__setattr__(self, "_value_members", members)

        logger.debug(f"Built instrument {self.version}: {len(self.needs)} needs, "
                     f"{len(self.values)} values, {len(self.rounds)} rounds")

    def _validate(self) -> None:
        """
        Check the structural invariants of the instrument.

        Raises:
            ValidationError: If any invariant is violated
        """
        if not self.needs:
            raise ValidationError("Instrument defines no needs")
        if not self.rounds:
            raise ValidationError("Instrument defines no rounds")

        need_codes = [n.code for n in self.needs]
        if len(set(need_codes)) != len(need_codes):
            raise ValidationError("Instrument has duplicate need codes")

        value_codes = {v.code for v in self.values}
        if len(value_codes) != len(self.values):
            raise ValidationError("Instrument has duplicate value codes")

        orphans = [n.code for n in self.needs if n.value_code not in value_codes]
        if orphans:
            raise ValidationError(f"Needs reference unknown values: {orphans}")

        empty = value_codes - {n.value_code for n in self.needs}
        if empty:
            raise ValidationError(f"Values without needs: {sorted(empty)}")

        indices = [r.index for r in self.rounds]
        if len(set(indices)) != len(indices):
            raise ValidationError("Instrument has duplicate round indices")

        known = set(need_codes)
        seen = set()
        for rnd in self.rounds:
            if rnd.version != self.version:
                raise ValidationError(
                    f"Round {rnd.index} has version {rnd.version}, expected {self.version}"
                )
            unknown = set(rnd.need_codes) - known
            if unknown:
                raise ValidationError(f"Round {rnd.index} references unknown needs: {sorted(unknown)}")
            seen.update(rnd.need_codes)

        unused = known - seen
        if unused:
            logger.warning(f"Instrument {self.version}: needs never presented in any round "
                           f"will score 50: {sorted(unused)}")

    @property
    def need_codes(self) -> List[str]:
        return [n.code for n in self.needs]

    @property
    def round_indices(self) -> List[int]:
        return [r.index for r in self.rounds]

    def get_need(self, code: str) -> Need:
        return self._needs_by_code[code]

    def get_round(self, index: int) -> Round:
        """
        Look up a round by index.

        Raises:
            ValidationError: If the instrument has no such round
        """
        try:
            return self._rounds_by_index[index]
        except KeyError:
            raise ValidationError(
                f"Round {index} is not part of instrument {self.version}"
            ) from None

    def appearances(self, need_code: str) -> int:
        """Number of rounds in which the need is presented."""
        return self._appearances[need_code]

    def need_bounds(self, need_code: str) -> Tuple[int, int]:
        """Raw (min, max) score attainable by a need."""
        k = self._appearances[need_code]
        return -MAX_POINTS * k, MAX_POINTS * k

    def value_members(self, value_code: str) -> Tuple[str, ...]:
        return self._value_members[value_code]

    def value_bounds(self, value_code: str) -> Tuple[int, int]:
        """Raw (min, max) of a value: sum of its member needs' own bounds."""
        low = 0
        high = 0
        for code in self._value_members[value_code]:
            need_low, need_high = self.need_bounds(code)
            low += need_low
            high += need_high
        return low, high

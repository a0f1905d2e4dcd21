"""
Price Tables

Configuration data for the calculator: one rate card per guest tier and
room size, plus a whole-chalet bulk card. No logic beyond validation.

Rate model:
- ``empty`` is the nightly price of an unoccupied room
- ``adult`` / ``child`` are per-guest nightly surcharges added on top
- toddlers are always free, so they have no rate at all
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

from shared.domain.base import InvalidPriceConfiguration, ValueObject


class GuestTier(str, Enum):
    RESIDENT = 'resident'
    EXTERNAL = 'external'


class RoomSize(str, Enum):
    SMALL = 'small'
    LARGE = 'large'


class PersonType(str, Enum):
    ADULT = 'adult'
    CHILD = 'child'
    TODDLER = 'toddler'


@dataclass(frozen=True)
class RoomRate(ValueObject):
    """Nightly rate card for one tier x size combination"""
    empty: int
    adult: int
    child: int

    def surcharge(self, person_type: PersonType) -> int:
        if person_type is PersonType.ADULT:
            return self.adult
        if person_type is PersonType.CHILD:
            return self.child
        return 0


@dataclass(frozen=True)
class BulkRate(ValueObject):
    """Whole-chalet rate card: one base price plus per-tier surcharges"""
    base: int
    adult: Mapping[GuestTier, int] = field(default_factory=dict)
    child: Mapping[GuestTier, int] = field(default_factory=dict)


@dataclass(frozen=True)
class PriceTables(ValueObject):
    """
    Immutable snapshot of all price configuration

    Built from storage (or JSON) and validated before the calculator sees
    it. The same snapshot type feeds the live preview and the commit path,
    so both compute identical totals.
    """
    room_rates: Mapping[Tuple[GuestTier, RoomSize], RoomRate]
    bulk: BulkRate | None = None

    def validate(self) -> 'PriceTables':
        """
        Check completeness and sign

        Raises:
            InvalidPriceConfiguration: a tier x size combination is missing
            or any value is negative
        """
        missing = [
            f"{tier.value}/{size.value}"
            for tier in GuestTier
            for size in RoomSize
            if (tier, size) not in self.room_rates
        ]
        if missing:
            raise InvalidPriceConfiguration(
                f"Missing room rates for: {', '.join(missing)}",
                details={'missing': missing},
            )

        for (tier, size), rate in self.room_rates.items():
            for name in ('empty', 'adult', 'child'):
                value = getattr(rate, name)
                if not isinstance(value, int) or value < 0:
                    raise InvalidPriceConfiguration(
                        f"Room rate {tier.value}/{size.value}.{name} must be a non-negative integer"
                    )

        if self.bulk is not None:
            values = [('base', self.bulk.base)]
            for tier in GuestTier:
                values.append((f"{tier.value}.adult", self.bulk.adult.get(tier)))
                values.append((f"{tier.value}.child", self.bulk.child.get(tier)))
            for name, value in values:
                if not isinstance(value, int) or value < 0:
                    raise InvalidPriceConfiguration(
                        f"Bulk rate {name} must be a non-negative integer"
                    )
        return self

    def room_rate(self, tier: GuestTier, size: RoomSize) -> RoomRate:
        try:
            return self.room_rates[(tier, size)]
        except KeyError:
            raise InvalidPriceConfiguration(
                f"No room rate for {tier.value}/{size.value}"
            ) from None

    def bulk_rate(self) -> BulkRate:
        if self.bulk is None:
            raise InvalidPriceConfiguration("Bulk price table is not configured")
        return self.bulk

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'PriceTables':
        """
        Build tables from the JSON layout used by the admin API:

            {
                "resident": {"small": {"empty": 250, "adult": 50, "child": 25}, "large": {...}},
                "external": {...},
                "bulk": {"base": 2000,
                         "resident": {"adult": 100, "child": 0},
                         "external": {"adult": 250, "child": 50}}
            }
        """
        if not isinstance(data, Mapping):
            raise InvalidPriceConfiguration("Price tables must be an object")

        room_rates: Dict[Tuple[GuestTier, RoomSize], RoomRate] = {}
        for tier in GuestTier:
            by_size = data.get(tier.value) or {}
            if not isinstance(by_size, Mapping):
                raise InvalidPriceConfiguration(f"Rates for {tier.value} must be an object")
            for size in RoomSize:
                card = by_size.get(size.value)
                if card is None:
                    continue
                try:
                    room_rates[(tier, size)] = RoomRate(
                        empty=card['empty'],
                        adult=card['adult'],
                        child=card['child'],
                    )
                except (KeyError, TypeError) as exc:
                    raise InvalidPriceConfiguration(
                        f"Incomplete rate card {tier.value}/{size.value}: {exc}"
                    ) from exc

        bulk = None
        bulk_data = data.get('bulk')
        if bulk_data:
            try:
                bulk = BulkRate(
                    base=bulk_data['base'],
                    adult={tier: bulk_data[tier.value]['adult'] for tier in GuestTier},
                    child={tier: bulk_data[tier.value]['child'] for tier in GuestTier},
                )
            except (KeyError, TypeError) as exc:
                raise InvalidPriceConfiguration(f"Incomplete bulk rate card: {exc}") from exc

        return cls(room_rates=room_rates, bulk=bulk).validate()

    def to_dict(self) -> dict:
        data: dict = {}
        for (tier, size), rate in self.room_rates.items():
            data.setdefault(tier.value, {})[size.value] = {
                'empty': rate.empty,
                'adult': rate.adult,
                'child': rate.child,
            }
        if self.bulk is not None:
            data['bulk'] = {'base': self.bulk.base}
            for tier in GuestTier:
                data['bulk'][tier.value] = {
                    'adult': self.bulk.adult.get(tier),
                    'child': self.bulk.child.get(tier),
                }
        return data


DEFAULT_PRICE_TABLES = {
    'resident': {
        'small': {'empty': 250, 'adult': 50, 'child': 25},
        'large': {'empty': 350, 'adult': 70, 'child': 35},
    },
    'external': {
        'small': {'empty': 400, 'adult': 100, 'child': 50},
        'large': {'empty': 500, 'adult': 120, 'child': 60},
    },
    'bulk': {
        'base': 2000,
        'resident': {'adult': 100, 'child': 0},
        'external': {'adult': 250, 'child': 50},
    },
}

"""
Match setup: roster bulk import, setup validation and the category list.
"""

import re
from typing import List, Optional, Sequence, Tuple, Union

from config.settings import settings
from core.exceptions import ValidationError
from core.utils import LoggerFactory, IdentifierFactory, DataValidator

from ..models.base import TeamSide
from ..models.player import Player

logger = LoggerFactory.get_logger(__name__)

_NUMBER_LINE = re.compile(r"^\d+$")


def parse_player_list(
    text: str,
    team: Union[TeamSide, str],
    existing: Sequence[Player] = (),
    squad_size: Optional[int] = None
) -> List[Player]:
    """
    Parse a pasted squad list into players for one side.

    The list alternates a shirt-number line and a name line::

        1
        Mary Earps
        4
        Keira Walsh

    A name line is only taken when a number is pending; stray names are
    skipped. The parsed players are sorted by number and cut down to the
    free slots left in the squad, counting ``existing`` players of the same
    side.

    Returns:
        New players to add to the roster
    """
    try:
        team = TeamSide(team)
    except ValueError:
        raise ValidationError("team", team, "must be 'home' or 'away'")
    squad_size = squad_size or settings.max_players_per_team

    parsed: List[Player] = []
    pending: Optional[str] = None
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        if _NUMBER_LINE.match(line):
            pending = line
        elif pending is not None:
            parsed.append(Player(
                id=IdentifierFactory.new_id(),
                name=line,
                number=int(pending),
                team=team,
            ))
            pending = None

    parsed.sort(key=lambda p: p.number)

    taken = sum(1 for p in existing if p.team is team)
    free = max(0, squad_size - taken)
    if len(parsed) > free:
        logger.warning(
            f"Squad limit reached for {team.value}: keeping {free} of {len(parsed)} imported players"
        )
    return parsed[:free]


def validate_setup(
    home_team: str,
    away_team: str,
    category: str,
    leg_number: int = 1,
    require_category: bool = True
) -> Tuple[str, str, str]:
    """
    Check a match setup before the match is created.

    Returns:
        The trimmed home team, away team and category

    Raises:
        ValidationError: A team name or the category is blank, or the leg
            number is below 1
    """
    home_team = DataValidator.validate_required_str(home_team, "home_team")
    away_team = DataValidator.validate_required_str(away_team, "away_team")
    if require_category:
        category = DataValidator.validate_required_str(category, "category")
    else:
        category = (category or "").strip()
    DataValidator.validate_positive_int(leg_number, "leg_number")
    return home_team, away_team, category


class CategoryService:
    """Match categories offered on the setup screen, stored as one list."""

    def __init__(self, store, storage_key: Optional[str] = None):
        self.store = store
        self.storage_key = storage_key or settings.categories_key

    async def list_categories(self) -> List[str]:
        return list(await self.store.get(self.storage_key) or [])

    async def add_category(self, name: str) -> List[str]:
        """Add a trimmed category; duplicates and blanks are ignored."""
        name = (name or "").strip()
        categories = await self.list_categories()
        if not name or name in categories:
            logger.debug(f"Category '{name}' not added (blank or duplicate)")
            return categories

        categories.append(name)
        await self.store.set(self.storage_key, categories)
        logger.info(f"Added match category '{name}'")
        return categories

    async def remove_category(self, name: str) -> List[str]:
        categories = await self.list_categories()
        remaining = [c for c in categories if c != name]
        if len(remaining) != len(categories):
            await self.store.set(self.storage_key, remaining)
            logger.info(f"Removed match category '{name}'")
        return remaining


__all__ = [
    'parse_player_list',
    'validate_setup',
    'CategoryService',
]

"""Catalog of known raids and dungeons for autocomplete."""

MAX_SUGGESTIONS = 25

RAID_ACTIVITIES: tuple[str, ...] = (
    "Last Wish",
    "Garden of Salvation",
    "Deep Stone Crypt",
    "Vault of Glass",
    "Vow of the Disciple",
    "King's Fall",
    "Root of Nightmares",
    "Salvation's Edge",
    "Crota's End",
    "Spire of the Watcher",
    "Ghosts of the Deep",
    "Warlord's Ruin",
    "Duality",
    "Grasp of Avarice",
    "Prophecy",
    "Pit of Heresy",
    "Shattered Throne",
)


def suggest_activities(
    query: str,
    catalog: tuple[str, ...] = RAID_ACTIVITIES,
    limit: int = MAX_SUGGESTIONS,
) -> list[str]:
    """Return catalog entries containing the query, case-insensitively."""
    needle = query.strip().lower()
    matches = [name for name in catalog if needle in name.lower()]
    return matches[:limit]

"""Rating-based strength bands for the engine opponent."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RatingBand:
    below: Optional[int]  # exclusive upper bound, None for the top band
    value: float


# Search depth per rating band
DEPTH_BANDS: tuple[RatingBand, ...] = (
    RatingBand(700, 1),
    RatingBand(900, 2),
    RatingBand(None, 3),
)

# Chance of playing a uniformly random legal move instead of the searched one
RANDOM_MOVE_BANDS: tuple[RatingBand, ...] = (
    RatingBand(800, 0.30),
    RatingBand(1000, 0.15),
    RatingBand(None, 0.05),
)


@dataclass(frozen=True)
class SkillProfile:
    search_depth: int
    random_move_probability: float


def band_value(bands: tuple[RatingBand, ...], rating: int) -> float:
    """Value of the first band the rating falls below."""
    return next(band.value for band in bands if band.below is None or rating < band.below)


def skill_profile(rating: int, max_search_depth: Optional[int] = None) -> SkillProfile:
    """Look up depth / randomness for a rating. The depth can be capped (e.g. from settings)."""
    depth = int(band_value(DEPTH_BANDS, rating))
    if max_search_depth is not None:
        depth = max(1, min(depth, max_search_depth))
    return SkillProfile(
        search_depth=depth,
        random_move_probability=band_value(RANDOM_MOVE_BANDS, rating),
    )

# Predictors Package
from .base import (
    BasePredictor,
    BHTPredictor,
    GlobalHistoryPredictor,
    BHT_4K,
    GSHARE_64K,
)

from .tournament import TournamentPredictor, TOURNAMENT_DEFAULT

from .tage import (
    TAGEPredictor,
    TAGE_DEFAULT,
    TAGE_SMALL,
)


PRESETS = {
    'bht': BHT_4K,
    'gshare': GSHARE_64K,
    'tournament': TOURNAMENT_DEFAULT,
    'tage': TAGE_DEFAULT,
    'tage-small': TAGE_SMALL,
}


__all__ = [
    'BasePredictor',
    'BHTPredictor',
    'GlobalHistoryPredictor',
    'TournamentPredictor',
    'TAGEPredictor',

    'BHT_4K',
    'GSHARE_64K',
    'TOURNAMENT_DEFAULT',
    'TAGE_DEFAULT',
    'TAGE_SMALL',
    'PRESETS',
]

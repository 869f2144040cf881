# Utils Package
from .helpers import (
    load_config,
    save_results,
    setup_logging,
    create_predictor_from_config,
    resolve_predictor_config,
)

__all__ = [
    'load_config',
    'save_results',
    'setup_logging',
    'create_predictor_from_config',
    'resolve_predictor_config',
]

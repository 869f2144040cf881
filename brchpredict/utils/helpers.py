"""
Configuration, logging and results I/O

YAML configuration loading, the package logging setup, result export and
the factory that builds predictors from configuration dictionaries.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

LOGGER_NAME = "brchpredict"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read a YAML configuration.

    An empty file gives an empty dict; any other non-mapping document is
    rejected.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        config = yaml.safe_load(f)

    if config is not None and not isinstance(config, dict):
        raise ValueError(f"Config file must hold a mapping: {config_path}")

    return config or {}


def save_results(results: Dict[str, Any], output_path: Union[str, Path]) -> Path:
    """
    Write a results dictionary.

    The format follows the suffix: `.yaml`/`.yml`, `.csv` (one dotted key
    per row), anything else JSON.

    Returns:
        The path written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    suffix = output_path.suffix.lower()

    if suffix in ('.yaml', '.yml'):
        with open(output_path, 'w') as f:
            yaml.safe_dump(results, f, default_flow_style=False, sort_keys=False)
    elif suffix == '.csv':
        with open(output_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(['key', 'value'])
            writer.writerows(_flatten(results))
    else:
        with open(output_path, 'w') as f:
            json.dump(results, f, indent=2, default=str)

    return output_path


def _flatten(data: Dict[str, Any], prefix: str = ''):
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            yield from _flatten(value, name + '.')
        else:
            yield name, value


def setup_logging(level: str = "INFO",
                  log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Configure the package logger.

    Messages go to stderr and, when log_file is given, to that file too.
    Calling it again replaces the handlers of the previous call.

    Args:
        level: Level name (case-insensitive)
        log_file: Optional log file path

    Returns:
        The `brchpredict` logger
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def resolve_predictor_config(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """
    Find a predictor configuration by name.

    Looks in the config's `predictors` section first, then in the built-in
    presets.
    """
    from ..predictors import PRESETS

    section = config.get('predictors', {}) or {}
    if name in section:
        return section[name]
    if name in PRESETS:
        return PRESETS[name]

    known = sorted(set(section) | set(PRESETS))
    raise ValueError(f"Unknown predictor: {name} (choose from {known})")


def create_predictor_from_config(config: Dict[str, Any]):
    """
    Create predictor instance from configuration.

    Composite predictors nest their children's configurations:
    a tournament lists two sub-predictor configs under `predictors`.

    Args:
        config: Predictor configuration with a `type` key

    Returns:
        Predictor instance
    """
    from ..predictors.base import BHTPredictor, GlobalHistoryPredictor
    from ..predictors.tournament import TournamentPredictor
    from ..predictors.tage import TAGEPredictor

    predictor_type = str(config.get('type', '')).lower()
    params = {k: v for k, v in config.items() if k not in ('type', 'name')}

    try:
        if predictor_type in ('bht', 'bimodal'):
            predictor = BHTPredictor(**params)

        elif predictor_type in ('global_history', 'gshare'):
            if 'hash' in params:
                params['hash_fn'] = params.pop('hash')
            predictor = GlobalHistoryPredictor(**params)

        elif predictor_type == 'tournament':
            children = params.pop('predictors', None)
            if not children or len(children) != 2:
                raise ValueError("A tournament predictor needs exactly two sub-predictors")
            predictor = TournamentPredictor(
                create_predictor_from_config(children[0]),
                create_predictor_from_config(children[1]),
                **params
            )

        elif predictor_type == 'tage':
            if 'hash' in params:
                params['hash_fn'] = params.pop('hash')
            predictor = TAGEPredictor(**params)

        else:
            raise ValueError(f"Unknown predictor type: {config.get('type')}")

    except TypeError as e:
        raise ValueError(f"Bad parameters for {predictor_type} predictor: {e}") from e

    if 'name' in config:
        predictor.name = config['name']
    return predictor

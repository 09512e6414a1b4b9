"""
Normalizers for security master labels.
Pure functions apart from the optional YAML alias file.
"""

import os
import logging
from pathlib import Path
from typing import Dict, Optional

import pandas as pd
import yaml
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


CANONICAL_ASSET_CLASSES = ['equity', 'commodities', 'fixed_income', 'alternatives']

# Keys are stripped, lower-cased raw labels
DEFAULT_ASSET_CLASS_ALIASES: Dict[str, str] = {
    'equity': 'equity',
    'equty': 'equity',
    'equities': 'equity',
    'eqiuty': 'equity',
    'equity fund': 'equity',
    'stock': 'equity',
    'stocks': 'equity',
    'fixed_income': 'fixed_income',
    'fixed income': 'fixed_income',
    'fixed-income': 'fixed_income',
    'fixed income corporate': 'fixed_income',
    'fixed income government': 'fixed_income',
    'fixed income municipal': 'fixed_income',
    'fixed incme': 'fixed_income',
    'bond': 'fixed_income',
    'bonds': 'fixed_income',
    'commodities': 'commodities',
    'commodity': 'commodities',
    'alternatives': 'alternatives',
    'alternative': 'alternatives',
    'alts': 'alternatives',
}


class AssetClassConfigError(Exception):
    """Raised when the asset-class alias file cannot be loaded."""
    pass


def load_asset_class_aliases(config_path: Optional[str] = None) -> Dict[str, str]:
    """
    Load the asset-class alias table.

    Without a path (argument or ASSET_CLASS_ALIASES_PATH) the built-in
    table is returned. The YAML file must hold an 'aliases' mapping of
    raw label -> canonical label; it replaces the built-in table.

    Args:
        config_path: Path to YAML alias file

    Returns:
        Dictionary keyed by stripped, lower-cased raw label

    Raises:
        AssetClassConfigError: If the file is missing or malformed
    """
    if config_path is None:
        config_path = os.getenv('ASSET_CLASS_ALIASES_PATH')

    if not config_path:
        return dict(DEFAULT_ASSET_CLASS_ALIASES)

    config_file = Path(config_path)
    if not config_file.exists():
        raise AssetClassConfigError(f"Asset class alias file not found: {config_path}")

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise AssetClassConfigError(f"Failed to parse asset class aliases: {e}")

    if not isinstance(config, dict) or not isinstance(config.get('aliases'), dict):
        raise AssetClassConfigError("Asset class alias file missing 'aliases' mapping")

    aliases = {}
    for raw, canonical in config['aliases'].items():
        aliases[str(raw).strip().lower()] = str(canonical)

    logger.info(f"Loaded {len(aliases)} asset class aliases from {config_path}")
    return aliases


def normalize_asset_class(label, aliases: Optional[Dict[str, str]] = None):
    """
    Map a raw major asset class label to its canonical form.

    Unrecognized labels (and missing values) are returned unchanged.

    Example:
        normalize_asset_class('Equty') -> 'equity'
        normalize_asset_class('Fixed Income Corporate') -> 'fixed_income'
        normalize_asset_class('Real Estate') -> 'Real Estate'
    """
    if aliases is None:
        aliases = DEFAULT_ASSET_CLASS_ALIASES

    if not isinstance(label, str):
        return label

    return aliases.get(label.strip().lower(), label)


def normalize_asset_classes(
    labels: pd.Series,
    aliases: Optional[Dict[str, str]] = None
) -> pd.Series:
    """Vectorized normalize_asset_class over a Series of raw labels."""
    if aliases is None:
        aliases = DEFAULT_ASSET_CLASS_ALIASES

    # One lookup per distinct label
    mapping = {raw: normalize_asset_class(raw, aliases) for raw in labels.dropna().unique()}
    return labels.map(lambda raw: mapping.get(raw, raw))

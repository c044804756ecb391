"""File I/O utilities."""

import logging
import os

import aiofiles
import aiofiles.os

from config.settings import ConfigurationError
from .catalog import Catalog, parse_catalog, serialize_catalog

logger = logging.getLogger(__name__)


def load_catalog_file(input_file: str) -> Catalog:
    """Load and parse a .po catalog. Missing or unreadable input is fatal."""
    logger.info(f"Loading input file: {input_file}")
    if not os.path.isfile(input_file):
        raise ConfigurationError(f"Input file not found: {input_file}")
    try:
        with open(input_file, 'r', encoding='utf-8') as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Cannot read input file {input_file}: {e}") from e

    catalog = parse_catalog(content)
    logger.info(
        f"Loaded {len(catalog.entries)} entries "
        f"({len(catalog.header)} header fields) from {input_file}"
    )
    return catalog


async def save_catalog_file(output_file: str, catalog: Catalog):
    """Serialize the whole catalog and replace output_file with it.

    The text goes to a sibling temp file first, so an interrupted write
    leaves the previous output intact.
    """
    content = serialize_catalog(catalog)
    temp_file = f"{output_file}.tmp"
    try:
        async with aiofiles.open(temp_file, 'w', encoding='utf-8') as f:
            await f.write(content)
        await aiofiles.os.replace(temp_file, output_file)
    except BaseException:
        if os.path.exists(temp_file):
            os.remove(temp_file)
        raise
    logger.debug(f"Saved {len(catalog.entries)} entries to {output_file}")

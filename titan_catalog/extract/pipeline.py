"""Top-level catalog loaders.

Each loader fetches the configured catalog files, scans them for one
concept and returns a load result. Data-quality problems become warnings
on the result; only transport failures raise.
"""

import asyncio
import logging
import time
from typing import Callable, Optional

import httpx

from ..config import CatalogConfig
from ..overrides import OverrideLoader, default_loader
from .assemble import assemble_titans
from .chassis import legend_titans, scan_chassis
from .formations import scan_formations
from .legions import scan_legions
from .links import CatalogIndex
from .models import LoadResult, TitanLoadResult
from .sources import fetch_sources, http_client
from .traits import scan_traits
from .upgrades import scan_upgrades

logger = logging.getLogger(__name__)

NO_CHASSIS_WARNING = (
    "No titan chassis were recognized in fetched catalog files "
    "(expected names containing: warhound/reaver/warlord/warmaster)."
)
NO_FORMATIONS_WARNING = "No maniple/formation entries were recognized in fetched catalog files."
NO_LEGIONS_WARNING = "No legions were recognized in fetched catalog files."
NO_UPGRADES_WARNING = "No wargear upgrades were resolved from catalog data."
NO_TRAITS_WARNING = "No Princeps trait templates were resolved from catalog data."


async def load_titan_templates(
    config: Optional[CatalogConfig] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
    overrides: Optional[OverrideLoader] = None,
) -> TitanLoadResult:
    """Titan chassis templates with override data applied.

    Catalog files and override tables are fetched concurrently.
    """
    config = config or CatalogConfig()
    loader = overrides or default_loader
    started = time.monotonic()

    async with http_client(config, client) as http:
        sources, bundle = await asyncio.gather(
            fetch_sources(config, http),
            loader.load(config.overrides_url, client, timeout=config.timeout),
        )

    warnings = list(sources.warnings)
    chassis = scan_chassis(CatalogIndex(sources.documents))
    if not chassis:
        logger.warning(NO_CHASSIS_WARNING)
        warnings.append(NO_CHASSIS_WARNING)
        return TitanLoadResult(templates=(), warnings=tuple(warnings))

    templates, missing, assembly_warnings = assemble_titans(chassis, bundle)
    warnings.extend(bundle.warnings)
    warnings.extend(assembly_warnings)
    legends = legend_titans(chassis)

    logger.info(
        "Loaded %d titan templates (%d legends, %d warnings) in %.2fs",
        len(templates), len(legends), len(warnings), time.monotonic() - started,
    )
    return TitanLoadResult(
        templates=tuple(templates),
        warnings=tuple(warnings),
        missing_max_data=tuple(missing),
        legend_titans=tuple(legends),
    )


async def _load_concept(
    label: str,
    scan: Callable[[CatalogIndex], list],
    empty_warning: str,
    config: Optional[CatalogConfig],
    client: Optional[httpx.AsyncClient],
) -> LoadResult:
    config = config or CatalogConfig()
    started = time.monotonic()

    async with http_client(config, client) as http:
        sources = await fetch_sources(config, http)

    warnings = list(sources.warnings)
    templates = scan(CatalogIndex(sources.documents))
    if not templates:
        logger.warning(empty_warning)
        warnings.append(empty_warning)

    logger.info(
        "Loaded %d %s (%d warnings) in %.2fs",
        len(templates), label, len(warnings), time.monotonic() - started,
    )
    return LoadResult(templates=tuple(templates), warnings=tuple(warnings))


async def load_formation_templates(
    config: Optional[CatalogConfig] = None, *, client: Optional[httpx.AsyncClient] = None
) -> LoadResult:
    return await _load_concept("formation templates", scan_formations, NO_FORMATIONS_WARNING, config, client)


async def load_legion_templates(
    config: Optional[CatalogConfig] = None, *, client: Optional[httpx.AsyncClient] = None
) -> LoadResult:
    return await _load_concept("legion templates", scan_legions, NO_LEGIONS_WARNING, config, client)


async def load_upgrade_templates(
    config: Optional[CatalogConfig] = None, *, client: Optional[httpx.AsyncClient] = None
) -> LoadResult:
    return await _load_concept("upgrade templates", scan_upgrades, NO_UPGRADES_WARNING, config, client)


async def load_trait_templates(
    config: Optional[CatalogConfig] = None, *, client: Optional[httpx.AsyncClient] = None
) -> LoadResult:
    return await _load_concept("princeps trait templates", scan_traits, NO_TRAITS_WARNING, config, client)
